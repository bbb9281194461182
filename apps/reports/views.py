"""
Views for reports app.

JSON endpoints:
- KPI compliance report (grouped by department or user)
- Planning-quality metrics rollup
"""

from django.contrib.auth.decorators import login_required
from django.core.exceptions import PermissionDenied
from django.http import JsonResponse
from django.views.decorators.http import require_GET

from apps.tasks.clock import system_clock
from .forms import ReportScopeForm
from .services import build_kpi_report, build_metrics_rollup


def _scoped_report(request, builder):
    form = ReportScopeForm(request.GET)
    if not form.is_valid():
        return JsonResponse({'error': form.errors.get_json_data()}, status=400)

    try:
        payload = builder(request.user, form, system_clock.now())
    except PermissionDenied as e:
        return JsonResponse({'error': str(e) or 'Permission denied'}, status=403)
    return JsonResponse(payload)


@login_required
@require_GET
def kpi_view(request):
    """Compliance KPIs: ?month=&year=&department="""
    return _scoped_report(request, build_kpi_report)


@login_required
@require_GET
def metrics_view(request):
    """Planning-quality rollup: ?month=&year=&department="""
    return _scoped_report(request, build_metrics_rollup)
