"""
Admin configuration for activity_log app.

The audit trail is read-only in the admin.
"""

from django.contrib import admin
from .models import TaskActivity


@admin.register(TaskActivity)
class TaskActivityAdmin(admin.ModelAdmin):

    list_display = ('task', 'user', 'action_type', 'description_preview', 'created_at')
    list_filter = ('action_type', 'created_at')
    search_fields = ('task__title', 'description', 'user__email')
    ordering = ('-created_at',)
    date_hierarchy = 'created_at'

    readonly_fields = (
        'task', 'user', 'action_type', 'description',
        'field_name', 'old_value', 'new_value', 'created_at'
    )

    def description_preview(self, obj):
        return obj.description[:80] + '...' if len(obj.description) > 80 else obj.description
    description_preview.short_description = 'Description'

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False

    def get_queryset(self, request):
        return super().get_queryset(request).select_related('task', 'user')
