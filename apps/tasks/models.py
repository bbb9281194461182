"""
Task management models.

Models:
- Task: Work item with lifecycle status, original deadline and compliance timestamps
- DeadlineChange: Append-only history of deadline amendments
- Evidence: Reference to delivery evidence stored elsewhere
"""

from django.db import models
from django.conf import settings
from django.utils import timezone

from .records import DeadlineChangeRecord, Person, TaskRecord


class Task(models.Model):
    """
    Main Task model.

    Status workflow:
    - pending → in_review (responsible delivers evidence)
    - in_review → done (reviewer approves)
    - in_review → pending (reviewer rejects, optionally extending the deadline)
    - pending / in_review → cancelled (soft delete)

    original_due_at never changes; amendments live in deadline_history and
    due_at mirrors the last amendment so the repository can filter by it.
    """

    class Status(models.TextChoices):
        PENDING = 'pending', 'Pending'
        IN_REVIEW = 'in_review', 'In Review'
        DONE = 'done', 'Done'
        CANCELLED = 'cancelled', 'Cancelled'

    class Urgency(models.TextChoices):
        HIGH = 'high', 'High'
        MEDIUM = 'medium', 'Medium'
        LOW = 'low', 'Low'

    TITLE_MAX_LENGTH = 50
    INSTRUCTIONS_MAX_LENGTH = 160

    # Core fields
    title = models.CharField(max_length=TITLE_MAX_LENGTH)
    instructions = models.CharField(max_length=INSTRUCTIONS_MAX_LENGTH, blank=True)

    # Relationships
    department = models.ForeignKey(
        'departments.Department',
        on_delete=models.PROTECT,
        related_name='tasks',
        help_text='Owning department, fixed at creation'
    )
    assigner = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name='assigned_tasks',
        help_text='User who created this task'
    )
    responsibles = models.ManyToManyField(
        settings.AUTH_USER_MODEL,
        related_name='responsible_tasks',
        help_text='Users accountable for delivering this task'
    )

    status = models.CharField(
        max_length=15,
        choices=Status.choices,
        default=Status.PENDING,
        db_index=True,
    )
    urgency = models.CharField(
        max_length=10,
        choices=Urgency.choices,
        default=Urgency.LOW,
        db_index=True,
    )

    # Deadlines
    original_due_at = models.DateTimeField(
        help_text='Deadline committed at creation (never amended)'
    )
    due_at = models.DateTimeField(
        db_index=True,
        help_text='Current committed deadline, mirrors the last history entry'
    )

    # Timestamps
    created_at = models.DateTimeField(default=timezone.now, db_index=True)
    updated_at = models.DateTimeField(auto_now=True)
    delivered_at = models.DateTimeField(
        null=True,
        blank=True,
        help_text='Last time a responsible user submitted evidence'
    )
    reviewed_at = models.DateTimeField(null=True, blank=True)
    closed_at = models.DateTimeField(
        null=True,
        blank=True,
        help_text='Set when a reviewer approves the task'
    )
    cancelled_at = models.DateTimeField(null=True, blank=True)
    cancelled_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='cancelled_tasks',
    )

    # Review loop
    delivery_comment = models.TextField(blank=True)
    review_feedback = models.TextField(blank=True)

    class Meta:
        verbose_name = 'task'
        verbose_name_plural = 'tasks'
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['department', 'status'], name='task_department_status_idx'),
            models.Index(fields=['due_at', 'status'], name='task_due_at_status_idx'),
        ]

    def __str__(self):
        return f"#{self.pk}: {self.title}"

    def save(self, *args, **kwargs):
        if self.due_at is None:
            self.due_at = self.original_due_at
        super().save(*args, **kwargs)

    def is_responsible(self, user):
        return self.responsibles.filter(pk=user.pk).exists()

    # ==========================================================================
    # Snapshot
    # ==========================================================================

    def to_record(self):
        """
        Build an immutable TaskRecord.

        Call on instances fetched with prefetch_related('responsibles',
        'deadline_history') and select_related('department') to avoid a
        query per task.
        """
        return TaskRecord(
            id=self.pk,
            status=self.status,
            original_due_at=self.original_due_at,
            department_id=self.department_id,
            department_name=self.department.name,
            responsibles=tuple(
                Person(id=user.pk, name=user.get_full_name())
                for user in self.responsibles.all()
            ),
            delivered_at=self.delivered_at,
            closed_at=self.closed_at,
            created_at=self.created_at,
            urgency=self.urgency,
            title=self.title,
            deadline_history=tuple(
                change.to_record() for change in self.deadline_history.all()
            ),
        )


class DeadlineChange(models.Model):
    """
    One amendment of a task deadline.

    Rows are append-only: each new_due_at becomes the next row's
    previous_due_at. new_due_at is nullable only so legacy rows can load;
    the resolver falls back to the original deadline for them.
    """

    task = models.ForeignKey(
        Task,
        on_delete=models.CASCADE,
        related_name='deadline_history',
    )
    previous_due_at = models.DateTimeField(null=True, blank=True)
    new_due_at = models.DateTimeField(null=True, blank=True)
    changed_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name='deadline_changes',
    )
    reason = models.TextField()
    changed_at = models.DateTimeField(db_index=True)

    class Meta:
        verbose_name = 'deadline change'
        verbose_name_plural = 'deadline changes'
        ordering = ['changed_at', 'id']

    def __str__(self):
        return f"Deadline of #{self.task_id} moved to {self.new_due_at}"

    def to_record(self):
        return DeadlineChangeRecord(
            previous_due_at=self.previous_due_at,
            new_due_at=self.new_due_at,
            changed_at=self.changed_at,
            reason=self.reason,
            changed_by_id=self.changed_by_id,
            id=self.pk,
        )


class Evidence(models.Model):
    """
    Evidence reference attached on delivery.

    Only the identifier/URL handed back by the evidence store is kept;
    binary content never reaches this database.
    """

    task = models.ForeignKey(
        Task,
        on_delete=models.CASCADE,
        related_name='evidence',
    )
    url = models.CharField(max_length=500)
    uploaded_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name='uploaded_evidence',
    )
    uploaded_at = models.DateTimeField()

    class Meta:
        verbose_name = 'evidence'
        verbose_name_plural = 'evidence'
        ordering = ['uploaded_at', 'id']

    def __str__(self):
        return f"Evidence for #{self.task_id}: {self.url}"
