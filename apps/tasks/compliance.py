"""
Compliance classification.

classify() decides, for one task and one instant, which KPI bucket the
task falls in. Submitted tasks are judged on when the responsible user
delivered, not on when the reviewer approved, so review latency never
turns a timely delivery into a late one.
"""

import logging

from django.db import models
from django.utils import timezone

from .deadlines import resolve_deadline
from .models import Task

logger = logging.getLogger(__name__)


class Verdict(models.TextChoices):
    PENDING_ON_TIME = 'pending_on_time', 'Pending on time'
    PENDING_LATE = 'pending_late', 'Pending late'
    DELIVERED_LATE = 'delivered_late', 'Delivered late'
    DELIVERED_ON_TIME = 'delivered_on_time', 'Delivered on time'
    # Cancelled, or submitted without any completion timestamp
    NOT_EVALUATED = 'not_evaluated', 'Not evaluated'


class PendingState(models.TextChoices):
    OVERDUE = 'overdue', 'Overdue'
    DUE_SOON = 'due_soon', 'Due soon'
    NORMAL = 'normal', 'Normal'


def effective_deadline(task):
    """Resolve the effective deadline, reporting malformed history."""
    resolved = resolve_deadline(task)
    if resolved.fell_back:
        logger.warning(
            f"Task {task.id}: latest deadline change has no new date, "
            f"falling back to original deadline {resolved.due_at.isoformat()}"
        )
    return resolved.due_at


def completion_timestamp(task):
    """Delivery time if known, else approval time, else None."""
    return task.delivered_at or task.closed_at


def classify(task, now):
    """
    Classify a task into a compliance bucket.

    Rules, first match wins:
    1. cancelled → NOT_EVALUATED
    2. pending → PENDING_LATE when now is past the effective deadline,
       else PENDING_ON_TIME
    3. in_review / done → compare delivered_at (or closed_at) with the
       effective deadline; no timestamp at all → NOT_EVALUATED

    Args:
        task: Task or TaskRecord
        now: Aware datetime of the evaluation

    Returns:
        Verdict
    """
    status = task.status

    if status == Task.Status.CANCELLED:
        return Verdict.NOT_EVALUATED

    if status == Task.Status.PENDING:
        if now > effective_deadline(task):
            return Verdict.PENDING_LATE
        return Verdict.PENDING_ON_TIME

    if status in (Task.Status.IN_REVIEW, Task.Status.DONE):
        completed = completion_timestamp(task)
        if completed is None:
            logger.warning(
                f"Task {task.id} is {status} without delivery or closure "
                f"timestamp; excluded from compliance"
            )
            return Verdict.NOT_EVALUATED
        if completed > effective_deadline(task):
            return Verdict.DELIVERED_LATE
        return Verdict.DELIVERED_ON_TIME

    logger.warning(f"Task {task.id} has unknown status {status!r}")
    return Verdict.NOT_EVALUATED


def is_evaluated(verdict):
    return verdict != Verdict.NOT_EVALUATED


def pending_state(task, now, days):
    """
    Split a pending task by calendar days left before its deadline.

    Days are counted on local dates: a deadline later today is 0 days
    away, yesterday's is -1.

    Returns:
        PendingState.OVERDUE when the deadline date has passed,
        DUE_SOON when it is at most `days` days away, NORMAL otherwise
    """
    deadline = effective_deadline(task)
    days_left = (
        timezone.localtime(deadline).date() - timezone.localtime(now).date()
    ).days
    if days_left < 0:
        return PendingState.OVERDUE
    if days_left <= days:
        return PendingState.DUE_SOON
    return PendingState.NORMAL


def is_due_soon(task, now, days):
    """A pending task that is not late yet but due within `days` days."""
    if task.status != Task.Status.PENDING:
        return False
    if classify(task, now) == Verdict.PENDING_LATE:
        return False
    return pending_state(task, now, days) == PendingState.DUE_SOON
