"""
Admin configuration for tasks app.

Deadline history and evidence are append-only: shown inline, never
edited here. Lifecycle changes go through apps.tasks.services.
"""

from django.contrib import admin
from django.utils import timezone
from django.utils.html import format_html

from .compliance import Verdict, classify, effective_deadline
from .models import Task, DeadlineChange, Evidence


class DeadlineChangeInline(admin.TabularInline):
    """Inline admin for the deadline history on task detail."""
    model = DeadlineChange
    extra = 0
    readonly_fields = ('previous_due_at', 'new_due_at', 'reason', 'changed_by', 'changed_at')
    can_delete = False

    def has_add_permission(self, request, obj=None):
        return False


class EvidenceInline(admin.TabularInline):
    """Inline admin for delivery evidence on task detail."""
    model = Evidence
    extra = 0
    readonly_fields = ('url', 'uploaded_by', 'uploaded_at')
    can_delete = False

    def has_add_permission(self, request, obj=None):
        return False


@admin.register(Task)
class TaskAdmin(admin.ModelAdmin):
    """Admin for Task model."""

    list_display = (
        'id', 'title', 'department', 'assigner', 'status_display',
        'urgency', 'due_at', 'verdict_display', 'created_at'
    )
    list_filter = ('status', 'urgency', 'department', 'created_at', 'due_at')
    search_fields = ('title', 'instructions')
    ordering = ('-created_at',)
    date_hierarchy = 'created_at'

    readonly_fields = (
        'status', 'original_due_at', 'due_at', 'created_at', 'updated_at',
        'delivered_at', 'reviewed_at', 'closed_at', 'cancelled_at', 'cancelled_by',
    )

    fieldsets = (
        (None, {
            'fields': ('title', 'instructions', 'urgency')
        }),
        ('Assignment', {
            'fields': ('department', 'assigner', 'responsibles')
        }),
        ('Status & Deadline', {
            'fields': ('status', 'original_due_at', 'due_at')
        }),
        ('Delivery & Review', {
            'fields': ('delivery_comment', 'review_feedback'),
            'classes': ('collapse',),
        }),
        ('Timestamps', {
            'fields': (
                'created_at', 'updated_at', 'delivered_at', 'reviewed_at',
                'closed_at', 'cancelled_at', 'cancelled_by'
            ),
            'classes': ('collapse',),
        }),
    )

    filter_horizontal = ('responsibles',)
    inlines = [DeadlineChangeInline, EvidenceInline]

    def get_readonly_fields(self, request, obj=None):
        """Ownership is fixed once the task exists."""
        readonly = super().get_readonly_fields(request, obj)
        if obj is not None:
            readonly = tuple(readonly) + ('department', 'assigner')
        return readonly

    def get_queryset(self, request):
        """Optimize with select_related."""
        return super().get_queryset(request).select_related(
            'department', 'assigner', 'cancelled_by'
        ).prefetch_related('deadline_history')

    def status_display(self, obj):
        """Display status with color coding."""
        colors = {
            'pending': '#FFA500',      # Orange
            'in_review': '#3498db',    # Blue
            'done': '#27ae60',         # Green
            'cancelled': '#95a5a6',    # Gray
        }
        color = colors.get(obj.status, '#000')
        return format_html(
            '<span style="color: {}; font-weight: bold;">{}</span>',
            color, obj.get_status_display()
        )
    status_display.short_description = 'Status'
    status_display.admin_order_field = 'status'

    def verdict_display(self, obj):
        """Display the compliance verdict as of now."""
        verdict = classify(obj, timezone.now())
        if verdict == Verdict.NOT_EVALUATED:
            return '-'
        late = verdict in (Verdict.PENDING_LATE, Verdict.DELIVERED_LATE)
        return format_html(
            '<span style="color: {};" title="Deadline {}">{}</span>',
            '#e74c3c' if late else '#27ae60',
            effective_deadline(obj),
            verdict.label,
        )
    verdict_display.short_description = 'Compliance'


@admin.register(DeadlineChange)
class DeadlineChangeAdmin(admin.ModelAdmin):
    """Admin for DeadlineChange model."""

    list_display = ('task', 'previous_due_at', 'new_due_at', 'reason_preview', 'changed_by', 'changed_at')
    list_filter = ('changed_at',)
    search_fields = ('reason', 'task__title')
    ordering = ('-changed_at',)

    readonly_fields = ('task', 'previous_due_at', 'new_due_at', 'reason', 'changed_by', 'changed_at')

    def reason_preview(self, obj):
        """Show truncated reason."""
        return obj.reason[:50] + '...' if len(obj.reason) > 50 else obj.reason
    reason_preview.short_description = 'Reason'

    def has_add_permission(self, request):
        return False
