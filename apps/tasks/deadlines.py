"""
Deadline history resolution.

A task keeps its original deadline forever; amendments are appended to
its deadline history. The *effective* deadline is the new_due_at of the
chronologically last amendment, or the original deadline when there is
none.

History is never trusted to arrive sorted. Amendments sharing the same
changed_at are ordered by record id (highest id is the latest); records
without an id sort before saved ones.
"""

from collections import namedtuple


ResolvedDeadline = namedtuple('ResolvedDeadline', ['due_at', 'fell_back'])


def _history_of(task):
    history = getattr(task, 'deadline_history', None) or ()
    # Model instances expose a related manager
    if hasattr(history, 'all'):
        history = history.all()
    return list(history)


def _change_sort_key(change):
    record_id = getattr(change, 'id', None)
    return (change.changed_at, -1 if record_id is None else record_id)


def ordered_history(history):
    """Return deadline changes oldest first."""
    return sorted(history, key=_change_sort_key)


def latest_change(history):
    """Return the chronologically last change, or None for an empty history."""
    history = list(history)
    if not history:
        return None
    return max(history, key=_change_sort_key)


def resolve_deadline(task):
    """
    Resolve the deadline currently in force.

    Returns a ResolvedDeadline. fell_back is True when the history exists
    but its latest record carries no new date; the original deadline is
    used instead and the caller is expected to report the bad record.
    """
    change = latest_change(_history_of(task))
    if change is None:
        return ResolvedDeadline(task.original_due_at, False)
    if change.new_due_at is None:
        return ResolvedDeadline(task.original_due_at, True)
    return ResolvedDeadline(change.new_due_at, False)


def resolve_effective_deadline(task):
    return resolve_deadline(task).due_at


def resolve_original_deadline(task):
    """
    Deadline committed before any amendment.

    The first history record's previous_due_at when history exists,
    otherwise original_due_at. Both agree on well-formed data.
    """
    history = ordered_history(_history_of(task))
    if history and history[0].previous_due_at is not None:
        return history[0].previous_due_at
    return task.original_due_at


def has_history(task):
    return bool(_history_of(task))
