"""
Views for tasks app.

JSON endpoints over the lifecycle services:
- Task list (repository, filtered by role and TaskFilter)
- Task detail with current verdict and effective deadline
- Create, deliver, review (approve/reject), amend deadline, cancel

Error mapping:
- ValidationError → 400
- InvalidTransition → 409
- PermissionDenied → 403
"""

from functools import wraps

from django.conf import settings
from django.contrib.auth.decorators import login_required
from django.core.exceptions import PermissionDenied, ValidationError
from django.http import JsonResponse
from django.shortcuts import get_object_or_404
from django.views.decorators.http import require_GET, require_POST

from .clock import system_clock
from .compliance import classify, effective_deadline, is_due_soon
from .exceptions import InvalidTransition
from .filters import TaskFilter
from .forms import TaskForm, DeliveryForm, ReviewForm, DeadlineForm, CancelForm
from .models import Task
from .permissions import (
    get_viewable_tasks, can_view_task, can_create_in_department,
    can_deliver_task, can_review_task, can_amend_deadline, can_cancel_task,
)
from .services import (
    create_task, deliver_task, approve_task, reject_task,
    amend_deadline, cancel_task,
)
from .workflow import allowed_events


# =============================================================================
# Helpers
# =============================================================================

def _isoformat(value):
    return value.isoformat() if value else None


def task_payload(task, now):
    """Serialize a task with its compliance state at `now`."""
    return {
        'id': task.pk,
        'title': task.title,
        'instructions': task.instructions,
        'urgency': task.urgency,
        'status': task.status,
        'departmentId': task.department_id,
        'assignerId': task.assigner_id,
        'responsibleIds': [user.pk for user in task.responsibles.all()],
        'createdAt': _isoformat(task.created_at),
        'originalDueAt': _isoformat(task.original_due_at),
        'effectiveDueAt': _isoformat(effective_deadline(task)),
        'deliveredAt': _isoformat(task.delivered_at),
        'closedAt': _isoformat(task.closed_at),
        'deliveryComment': task.delivery_comment,
        'reviewFeedback': task.review_feedback,
        'verdict': str(classify(task, now)),
        'dueSoon': is_due_soon(task, now, settings.DUE_SOON_DAYS),
        'allowedEvents': [str(event) for event in allowed_events(task.status)],
        'deadlineHistory': [
            {
                'previousDueAt': _isoformat(change.previous_due_at),
                'newDueAt': _isoformat(change.new_due_at),
                'reason': change.reason,
                'changedBy': change.changed_by_id,
                'changedAt': _isoformat(change.changed_at),
            }
            for change in task.deadline_history.all()
        ],
    }


def _error_response(error, status=400):
    if hasattr(error, 'error_dict'):
        errors = error.message_dict
    else:
        errors = {'__all__': error.messages}
    code = getattr(error, 'code', None)
    return JsonResponse({'error': errors, 'code': code}, status=status)


def lifecycle_endpoint(view_func):
    """Translate lifecycle errors raised by a view into JSON responses."""
    @wraps(view_func)
    def wrapper(request, *args, **kwargs):
        try:
            return view_func(request, *args, **kwargs)
        except InvalidTransition as e:
            return _error_response(e, status=409)
        except ValidationError as e:
            return _error_response(e, status=400)
        except PermissionDenied as e:
            return JsonResponse({'error': str(e) or 'Permission denied'}, status=403)
    return wrapper


def _form_errors(form):
    return JsonResponse({'error': form.errors.get_json_data()}, status=400)


# =============================================================================
# Repository Views
# =============================================================================

@login_required
@require_GET
def task_list(request):
    """
    List tasks visible to the user, filtered by TaskFilter parameters
    (department, responsible, status, urgency, due/created ranges).
    """
    queryset = get_viewable_tasks(request.user)
    task_filter = TaskFilter(request.GET, queryset=queryset)
    if not task_filter.is_valid():
        return _form_errors(task_filter.form)

    now = system_clock.now()
    tasks = task_filter.qs.order_by('due_at', 'pk')
    return JsonResponse({
        'count': len(tasks),
        'results': [task_payload(task, now) for task in tasks],
    })


@login_required
@require_GET
def task_detail(request, pk):
    task = get_object_or_404(
        Task.objects.prefetch_related('responsibles', 'deadline_history'),
        pk=pk
    )
    if not can_view_task(request.user, task):
        return JsonResponse({'error': 'Permission denied'}, status=403)
    return JsonResponse(task_payload(task, system_clock.now()))


# =============================================================================
# Lifecycle Views
# =============================================================================

@login_required
@require_POST
@lifecycle_endpoint
def task_create(request):
    form = TaskForm(request.POST)
    if not form.is_valid():
        return _form_errors(form)

    department = form.cleaned_data['department']
    if not can_create_in_department(request.user, department):
        raise PermissionDenied("You can only assign tasks to your own department.")

    task = create_task(
        title=form.cleaned_data['title'],
        assigner=request.user,
        department=department,
        responsibles=form.cleaned_data['responsibles'],
        original_due_at=form.cleaned_data['original_due_at'],
        now=system_clock.now(),
        urgency=form.cleaned_data.get('urgency') or Task.Urgency.LOW,
        instructions=form.cleaned_data.get('instructions', ''),
    )
    return JsonResponse(task_payload(task, system_clock.now()), status=201)


@login_required
@require_POST
@lifecycle_endpoint
def task_deliver(request, pk):
    """Responsible user submits evidence references and a comment."""
    task = get_object_or_404(Task, pk=pk)
    if not can_deliver_task(request.user, task):
        raise PermissionDenied("You cannot deliver this task.")

    form = DeliveryForm(request.POST)
    if not form.is_valid():
        return _form_errors(form)

    now = system_clock.now()
    deliver_task(
        task,
        request.user,
        comment=form.cleaned_data['comment'],
        now=now,
        evidence_urls=request.POST.getlist('evidence'),
    )
    return JsonResponse(task_payload(task, now))


@login_required
@require_POST
@lifecycle_endpoint
def task_review(request, pk):
    """Approve or reject a task in review."""
    task = get_object_or_404(Task, pk=pk)
    if not can_review_task(request.user, task):
        raise PermissionDenied("You don't have permission to review this task.")

    form = ReviewForm(request.POST)
    if not form.is_valid():
        return _form_errors(form)

    now = system_clock.now()
    if form.cleaned_data['decision'] == ReviewForm.APPROVE:
        approve_task(task, request.user, now=now,
                     feedback=form.cleaned_data['feedback'])
    else:
        reject_task(
            task,
            request.user,
            feedback=form.cleaned_data['feedback'],
            now=now,
            new_due_at=form.cleaned_data['new_due_at'],
        )
    return JsonResponse(task_payload(task, now))


@login_required
@require_POST
@lifecycle_endpoint
def task_amend_deadline(request, pk):
    task = get_object_or_404(Task, pk=pk)
    if not can_amend_deadline(request.user, task):
        raise PermissionDenied("You don't have permission to change this deadline.")

    form = DeadlineForm(request.POST)
    if not form.is_valid():
        return _form_errors(form)

    now = system_clock.now()
    change = amend_deadline(
        task,
        request.user,
        new_due_at=form.cleaned_data['new_due_at'],
        reason=form.cleaned_data['reason'],
        now=now,
    )
    payload = task_payload(task, now)
    payload['changed'] = change is not None
    return JsonResponse(payload, status=201 if change else 200)


@login_required
@require_POST
@lifecycle_endpoint
def task_cancel(request, pk):
    task = get_object_or_404(Task, pk=pk)
    if not can_cancel_task(request.user, task):
        raise PermissionDenied("You don't have permission to cancel this task.")

    form = CancelForm(request.POST)
    if not form.is_valid():
        return _form_errors(form)

    now = system_clock.now()
    cancel_task(task, request.user, now=now, reason=form.cleaned_data['reason'])
    return JsonResponse(task_payload(task, now))
