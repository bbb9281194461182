"""
Task lifecycle state machine.

The transition table is fixed: there is no configurable workflow.
Side effects (timestamps, feedback, history rows) are applied by
apps.tasks.services once next_status() has accepted the event.
"""

from django.db import models

from .exceptions import InvalidTransition
from .models import Task


class Event(models.TextChoices):
    DELIVER = 'deliver', 'Deliver'
    APPROVE = 'approve', 'Approve'
    REJECT = 'reject', 'Reject'
    AMEND_DEADLINE = 'amend_deadline', 'Amend deadline'
    CANCEL = 'cancel', 'Cancel'


# Keyed by plain values so lookups work for members and raw strings alike
TRANSITIONS = {
    (Task.Status.PENDING.value, Event.DELIVER.value): Task.Status.IN_REVIEW,
    (Task.Status.IN_REVIEW.value, Event.APPROVE.value): Task.Status.DONE,
    (Task.Status.IN_REVIEW.value, Event.REJECT.value): Task.Status.PENDING,
    (Task.Status.PENDING.value, Event.AMEND_DEADLINE.value): Task.Status.PENDING,
    (Task.Status.PENDING.value, Event.CANCEL.value): Task.Status.CANCELLED,
    (Task.Status.IN_REVIEW.value, Event.CANCEL.value): Task.Status.CANCELLED,
}


def _key(status, event):
    return (str(status), str(event))


def next_status(status, event):
    """
    Return the status reached by applying event to status.

    Raises:
        InvalidTransition: If the pair is not in the transition table
    """
    try:
        return TRANSITIONS[_key(status, event)]
    except KeyError:
        raise InvalidTransition(str(status), str(event)) from None


def can_apply(status, event):
    return _key(status, event) in TRANSITIONS


def allowed_events(status):
    """Events legal from status, in declaration order."""
    return [event for event in Event if can_apply(status, event)]
