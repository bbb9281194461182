"""
Permission helpers for tasks app.

Role-based access control, applied by the views before calling the
services:
- Super Admin: Every task in every department
- Admin: Tasks of their own department
- Supervisor: Tasks of their own department; reviews tasks they assigned
- User / Guest: Tasks they assigned or are responsible for
"""

from django.db.models import Q

from .models import Task


# =============================================================================
# View Permissions
# =============================================================================

def get_viewable_tasks(user):
    """
    Get queryset of tasks the user can view.

    Returns Task queryset filtered by user's role, with the relations
    needed to build compliance records.
    """
    if not user.is_authenticated:
        return Task.objects.none()

    queryset = Task.objects.select_related(
        'department', 'assigner'
    ).prefetch_related('responsibles', 'deadline_history')

    if user.is_super_admin():
        return queryset

    if user.is_department_scoped() and user.department_id:
        return queryset.filter(
            Q(department_id=user.department_id) |
            Q(assigner=user) |
            Q(responsibles=user)
        ).distinct()

    return queryset.filter(
        Q(assigner=user) | Q(responsibles=user)
    ).distinct()


def can_view_task(user, task):
    """
    Check if user can view a specific task.

    Rules:
    - Super Admin: Can view all tasks
    - Admin / Supervisor: Department tasks + tasks they assigned or own
    - Others: Tasks they assigned or are responsible for
    """
    if not user.is_authenticated:
        return False

    if user.is_super_admin():
        return True

    if user.is_department_scoped() and task.department_id == user.department_id:
        return True

    return task.assigner_id == user.pk or task.is_responsible(user)


# =============================================================================
# Lifecycle Permissions
# =============================================================================

def can_create_in_department(user, department):
    """Only super admins assign outside their own department."""
    if not user.is_authenticated or not user.can_assign_tasks():
        return False
    if user.is_super_admin():
        return True
    return department is not None and department.pk == user.department_id


def can_deliver_task(user, task):
    """Responsible users deliver; super admins may deliver on their behalf."""
    if not user.is_authenticated:
        return False
    if user.is_super_admin():
        return True
    return task.is_responsible(user)


def can_review_task(user, task):
    """
    Check if user can approve or reject a delivery.

    Rules:
    - Super Admin: Any task
    - Admin: Tasks of their department
    - Anyone: Tasks they assigned
    """
    if not user.is_authenticated:
        return False
    if user.is_super_admin():
        return True
    if user.is_admin() and task.department_id == user.department_id:
        return True
    return task.assigner_id == user.pk


def can_amend_deadline(user, task):
    """Same people who review a task may move its deadline."""
    return can_review_task(user, task)


def can_cancel_task(user, task):
    """
    Check if user can cancel a task.

    Rules:
    - Super Admin: Any task
    - Admin: Tasks of their department
    - Supervisor: Tasks they assigned
    """
    if not user.is_authenticated:
        return False
    if user.is_super_admin():
        return True
    if user.is_admin() and task.department_id == user.department_id:
        return True
    return user.is_supervisor() and task.assigner_id == user.pk
