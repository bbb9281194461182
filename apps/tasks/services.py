"""
Service layer for tasks app.

All lifecycle mutations are centralized here. Every function:
- checks the transition against apps.tasks.workflow
- checks its guards (raising ValidationError with a code)
- applies the side effects inside one transaction
- writes an activity log entry

Services:
- create_task: Register a new pending task
- deliver_task: Submit evidence for review (pending → in_review)
- approve_task: Close a reviewed task (in_review → done)
- reject_task: Send a task back for correction (in_review → pending)
- amend_deadline: Append a deadline change (pending)
- cancel_task: Soft-delete a task (pending/in_review → cancelled)

Authorization is the caller's job (see apps.tasks.permissions).
"""

import logging
from datetime import date, datetime, time

from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import transaction
from django.utils import timezone

from .deadlines import resolve_effective_deadline
from .models import Task, DeadlineChange, Evidence
from .workflow import Event, next_status
from apps.activity_log.models import log_task_activity, TaskActivity

logger = logging.getLogger(__name__)


def _format_deadline(value):
    if value is None:
        return 'None'
    return timezone.localtime(value).strftime('%d %b %Y, %I:%M %p')


def normalize_deadline(value):
    """
    Extend a bare-date deadline to the end of that local day.

    A date, or a datetime at local midnight, means "any time that day".
    Other datetimes are returned unchanged (made aware if naive).
    """
    if value is None:
        return None

    if not isinstance(value, datetime) and isinstance(value, date):
        value = datetime.combine(value, time.min)

    if timezone.is_naive(value):
        value = timezone.make_aware(value)

    if not getattr(settings, 'DEADLINE_END_OF_DAY', True):
        return value

    local = timezone.localtime(value)
    if local.hour == 0 and local.minute == 0:
        local = local.replace(hour=23, minute=59, second=59, microsecond=999999)
    return local


def _require_text(value, message, code):
    if not value or not value.strip():
        raise ValidationError(message, code=code)
    return value.strip()


def create_task(
    title: str,
    assigner,
    department,
    responsibles,
    original_due_at,
    now,
    urgency: str = 'low',
    instructions: str = '',
):
    """
    Central task creation function.

    Args:
        title: Task title (required, already length-checked by the form)
        assigner: User creating the task (required)
        department: Owning Department (required)
        responsibles: Iterable of Users accountable for the task (at least one)
        original_due_at: Deadline committed at creation (date or datetime)
        now: Registration instant
        urgency: high/medium/low (default: low)
        instructions: Free-text instructions (optional)

    Returns:
        Created Task instance

    Raises:
        ValidationError: If required fields are missing
    """
    title = _require_text(title, "Task title is required.", 'empty_title')

    if not assigner:
        raise ValidationError("Assigner is required.", code='no_assigner')

    if department is None:
        raise ValidationError("Department is required.", code='no_department')

    responsibles = list(responsibles or [])
    if not responsibles:
        raise ValidationError(
            "At least one responsible user is required.", code='no_responsibles'
        )

    inactive = [user for user in responsibles if not user.is_active]
    if inactive:
        raise ValidationError(
            f"Cannot assign task to inactive user {inactive[0].get_full_name()}.",
            code='inactive_responsible'
        )

    if original_due_at is None:
        raise ValidationError("Deadline is required.", code='no_deadline')

    if urgency not in Task.Urgency.values:
        urgency = Task.Urgency.LOW

    due_at = normalize_deadline(original_due_at)

    with transaction.atomic():
        task = Task.objects.create(
            title=title,
            instructions=instructions.strip() if instructions else '',
            department=department,
            assigner=assigner,
            urgency=urgency,
            status=Task.Status.PENDING,
            original_due_at=due_at,
            due_at=due_at,
            created_at=now,
        )
        task.responsibles.set(responsibles)

        names = ', '.join(user.get_full_name() for user in responsibles)
        log_task_activity(
            task=task,
            user=assigner,
            action_type=TaskActivity.ActionType.CREATED,
            description=f'Task created and assigned to {names}'
        )

    logger.info(f"Task {task.pk} created by {assigner.email} in {department.name}")
    return task


def deliver_task(task, user, comment, now, evidence_urls=()):
    """
    Submit a task for review.

    Args:
        task: Task instance (must be pending)
        user: Responsible user delivering
        comment: Delivery comment (required)
        now: Delivery instant, recorded as delivered_at
        evidence_urls: References returned by the evidence store (optional)

    Returns:
        Updated Task instance

    Raises:
        InvalidTransition: If the task is not pending
        ValidationError: If the comment is empty
    """
    new_status = next_status(task.status, Event.DELIVER)
    comment = _require_text(
        comment, "A delivery comment is required.", 'empty_comment'
    )
    urls = [url.strip() for url in evidence_urls if url and url.strip()]

    with transaction.atomic():
        task.status = new_status
        task.delivered_at = now
        task.delivery_comment = comment
        task.review_feedback = ''
        task.save()

        if urls:
            Evidence.objects.bulk_create([
                Evidence(task=task, url=url, uploaded_by=user, uploaded_at=now)
                for url in urls
            ])

        description = f'Delivered for review: "{comment[:50]}{"..." if len(comment) > 50 else ""}"'
        if urls:
            description += f' ({len(urls)} evidence file{"s" if len(urls) != 1 else ""})'

        log_task_activity(
            task=task,
            user=user,
            action_type=TaskActivity.ActionType.DELIVERED,
            description=description,
            field_name='status',
            old_value=Task.Status.PENDING,
            new_value=new_status,
        )

    logger.info(f"Task {task.pk} delivered by {user.email}")
    return task


def approve_task(task, user, now, feedback=''):
    """
    Approve a delivered task and close it.

    Args:
        task: Task instance (must be in review)
        user: Reviewer
        now: Approval instant, recorded as closed_at
        feedback: Optional note, kept in the activity log only

    Returns:
        Updated Task instance

    Raises:
        InvalidTransition: If the task is not in review
    """
    new_status = next_status(task.status, Event.APPROVE)

    with transaction.atomic():
        task.status = new_status
        task.closed_at = now
        task.reviewed_at = now
        task.review_feedback = ''
        task.save()

        description = 'Delivery approved'
        if feedback and feedback.strip():
            description += f': {feedback.strip()}'

        log_task_activity(
            task=task,
            user=user,
            action_type=TaskActivity.ActionType.APPROVED,
            description=description,
            field_name='status',
            old_value=Task.Status.IN_REVIEW,
            new_value=new_status,
        )

    logger.info(f"Task {task.pk} approved by {user.email}")
    return task


def reject_task(task, user, feedback, now, new_due_at=None):
    """
    Reject a delivery and reopen the task.

    delivered_at is kept: it records the latest submission attempt until
    the next delivery overwrites it.

    Args:
        task: Task instance (must be in review)
        user: Reviewer
        feedback: Reason for rejection (required)
        now: Review instant
        new_due_at: Optional deadline extension granted with the rejection (date or datetime)

    Returns:
        Updated Task instance

    Raises:
        InvalidTransition: If the task is not in review
        ValidationError: If feedback is empty
    """
    new_status = next_status(task.status, Event.REJECT)
    feedback = _require_text(
        feedback, "Rejection feedback is required.", 'empty_feedback'
    )
    new_due_at = normalize_deadline(new_due_at)

    with transaction.atomic():
        if new_due_at is not None and new_due_at != resolve_effective_deadline(task):
            _append_deadline_change(
                task, user, new_due_at, f'Rejected: {feedback}', now
            )

        task.status = new_status
        task.review_feedback = feedback
        task.reviewed_at = now
        task.save()

        log_task_activity(
            task=task,
            user=user,
            action_type=TaskActivity.ActionType.REJECTED,
            description=f'Delivery rejected: {feedback}',
            field_name='status',
            old_value=Task.Status.IN_REVIEW,
            new_value=new_status,
        )

    logger.info(f"Task {task.pk} rejected by {user.email}")
    return task


def amend_deadline(task, user, new_due_at, reason, now):
    """
    Move the deadline of a pending task.

    Proposing the deadline already in force is a no-op.

    Args:
        task: Task instance (must be pending)
        user: User amending the deadline
        new_due_at: Proposed deadline (date or datetime, normalized like at creation)
        reason: Why the deadline moves (required when it moves)
        now: Amendment instant, recorded as changed_at

    Returns:
        Created DeadlineChange, or None when nothing changed

    Raises:
        InvalidTransition: If the task is not pending
        ValidationError: If the date is missing or the reason is empty
    """
    next_status(task.status, Event.AMEND_DEADLINE)

    new_due_at = normalize_deadline(new_due_at)
    if new_due_at is None:
        raise ValidationError("A new deadline is required.", code='no_deadline')

    if new_due_at == resolve_effective_deadline(task):
        return None

    reason = _require_text(
        reason, "A reason is required to change the deadline.", 'empty_reason'
    )

    with transaction.atomic():
        change = _append_deadline_change(task, user, new_due_at, reason, now)
        task.save()

    return change


def _append_deadline_change(task, user, new_due_at, reason, now):
    """Write a history row and move due_at; the caller saves the task."""
    previous = resolve_effective_deadline(task)
    change = DeadlineChange.objects.create(
        task=task,
        previous_due_at=previous,
        new_due_at=new_due_at,
        changed_by=user,
        reason=reason,
        changed_at=now,
    )
    task.due_at = new_due_at

    log_task_activity(
        task=task,
        user=user,
        action_type=TaskActivity.ActionType.DEADLINE_CHANGED,
        description=(
            f'Deadline changed from "{_format_deadline(previous)}" to '
            f'"{_format_deadline(new_due_at)}": {reason}'
        ),
        field_name='due_at',
        old_value=_format_deadline(previous),
        new_value=_format_deadline(new_due_at),
    )
    logger.info(f"Task {task.pk} deadline moved to {new_due_at.isoformat()} by {user.email}")
    return change


def cancel_task(task, user, now, reason=None):
    """
    Cancel a task. No transition is accepted afterwards.

    Args:
        task: Task instance (pending or in review)
        user: User cancelling the task
        now: Cancellation instant
        reason: Optional cancellation reason

    Returns:
        Updated Task instance

    Raises:
        InvalidTransition: If the task is already done or cancelled
    """
    old_status = task.status
    new_status = next_status(old_status, Event.CANCEL)

    with transaction.atomic():
        task.status = new_status
        task.cancelled_at = now
        task.cancelled_by = user
        task.save()

        description = 'Task cancelled'
        if reason:
            description += f': {reason}'

        log_task_activity(
            task=task,
            user=user,
            action_type=TaskActivity.ActionType.CANCELLED,
            description=description,
            field_name='status',
            old_value=old_status,
            new_value=new_status,
        )

    logger.info(f"Task {task.pk} cancelled by {user.email}")
    return task
