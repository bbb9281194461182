"""
Task filters using django-filter.

Narrows a task queryset by
- Department
- Responsible user
- Status (multi-select)
- Urgency (multi-select)
- Current deadline range (due_after / due_before)
- Registration range (created_after / created_before)
"""

import django_filters

from .models import Task


class TaskFilter(django_filters.FilterSet):
    """
    Task filter for the repository listing.

    Usage:
        filterset = TaskFilter(request.GET, queryset=queryset)
        tasks = filterset.qs
    """

    department = django_filters.NumberFilter(
        field_name='department_id',
        label='Department'
    )

    responsible = django_filters.NumberFilter(
        field_name='responsibles__id',
        method='filter_responsible',
        label='Responsible'
    )

    status = django_filters.MultipleChoiceFilter(
        choices=Task.Status.choices,
        label='Status'
    )

    urgency = django_filters.MultipleChoiceFilter(
        choices=Task.Urgency.choices,
        label='Urgency'
    )

    due_after = django_filters.IsoDateTimeFilter(
        field_name='due_at',
        lookup_expr='gte',
        label='Due from'
    )
    due_before = django_filters.IsoDateTimeFilter(
        field_name='due_at',
        lookup_expr='lte',
        label='Due to'
    )

    created_after = django_filters.IsoDateTimeFilter(
        field_name='created_at',
        lookup_expr='gte',
        label='Registered from'
    )
    created_before = django_filters.IsoDateTimeFilter(
        field_name='created_at',
        lookup_expr='lte',
        label='Registered to'
    )

    class Meta:
        model = Task
        fields = [
            'department', 'responsible', 'status', 'urgency',
            'due_after', 'due_before', 'created_after', 'created_before',
        ]

    def filter_responsible(self, queryset, name, value):
        """A task with several responsibles must appear once."""
        if value is None:
            return queryset
        return queryset.filter(**{name: value}).distinct()
