"""
Service layer for reports app.

Selects the grouping and task scope for the requesting user, loads the
scoped tasks once as TaskRecord snapshots and hands them to the pure
aggregators in kpi.py and rollup.py.
"""

import logging

from django.conf import settings
from django.core.exceptions import PermissionDenied
from django.db.models import Q
from django.utils import timezone

from apps.tasks.models import Task
from .kpi import GroupBy, aggregate
from .rollup import rollup

logger = logging.getLogger(__name__)


def select_grouping(user, department_id=None):
    """
    Decide how a report is grouped and which department it covers.

    Rules:
    - Super Admin without a department: one entry per department
    - Super Admin with a department: one entry per user of that department
    - Admin / Supervisor: one entry per user of their own department
    - User / Guest: one entry per user, over tasks they assigned or own

    Returns:
        (GroupBy, department_id or None)
    """
    if user.is_super_admin():
        if department_id is None:
            return GroupBy.DEPARTMENT, None
        return GroupBy.USER, department_id

    if user.is_department_scoped():
        if not user.department_id:
            raise PermissionDenied("You are not assigned to a department.")
        if department_id is not None and department_id != user.department_id:
            raise PermissionDenied("You can only view reports for your own department.")
        return GroupBy.USER, user.department_id

    return GroupBy.USER, department_id


def get_report_tasks(user, department_id=None):
    """Task queryset a report may aggregate for this user."""
    queryset = Task.objects.select_related('department').prefetch_related(
        'responsibles', 'deadline_history'
    )

    if not (user.is_super_admin() or user.is_department_scoped()):
        queryset = queryset.filter(Q(assigner=user) | Q(responsibles=user)).distinct()

    if department_id is not None:
        queryset = queryset.filter(department_id=department_id)

    return queryset


def _records(queryset):
    return [task.to_record() for task in queryset]


def build_kpi_report(user, scope, now):
    """
    Compliance KPIs for the user's scope.

    Args:
        user: Requesting user
        scope: Validated ReportScopeForm; month and year together filter
            on the current deadline (due_at), a year alone does not filter
        now: Instant pending tasks are judged against

    Returns:
        JSON-ready dict {view, departmentId, general, breakdown}
    """
    group_by, department_id = select_grouping(user, scope.department_id)
    queryset = get_report_tasks(user, department_id)

    window = scope.month_window()
    if window:
        start, end = window
        queryset = queryset.filter(due_at__gte=start, due_at__lt=end)

    records = _records(queryset)
    report = aggregate(records, group_by, now)

    logger.info(
        f"KPI report for {user.email}: view={group_by} department={department_id} "
        f"tasks={len(records)} evaluated={report.totals.total}"
    )
    return report.to_dict(department_id=department_id)


def build_metrics_rollup(user, scope, now):
    """
    Planning-quality rollup for the user's scope.

    The window filters on the registration date (created_at) and covers
    the whole year when no month is given, the current year when no year
    is given either.
    """
    _, department_id = select_grouping(user, scope.department_id)
    queryset = get_report_tasks(user, department_id)

    start, end = scope.window(default_year=timezone.localtime(now).year)
    queryset = queryset.filter(created_at__gte=start, created_at__lt=end)

    records = _records(queryset)
    result = rollup(
        records,
        now,
        due_soon_days=settings.DUE_SOON_DAYS,
        top_reasons=settings.TOP_REASONS_LIMIT,
        ranking_limit=settings.RANKING_LIMIT,
    )

    logger.info(
        f"Metrics rollup for {user.email}: department={department_id} "
        f"window={start.date()}..{end.date()} tasks={len(records)}"
    )
    payload = result.to_dict()
    payload['departmentId'] = department_id
    payload['window'] = {'start': start.isoformat(), 'end': end.isoformat()}
    return payload
