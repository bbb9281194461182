"""
Forms for reports app.
"""

from datetime import datetime

from django import forms
from django.utils import timezone

from apps.departments.models import Department


class ReportScopeForm(forms.Form):
    """
    Query parameters shared by the report endpoints.

    month/year pick a calendar window in the configured time zone;
    department narrows the scope (subject to the grouping policy).
    """

    month = forms.IntegerField(required=False, min_value=1, max_value=12)
    year = forms.IntegerField(required=False, min_value=2000, max_value=2100)
    department = forms.ModelChoiceField(
        queryset=Department.objects.all(),
        required=False,
    )

    def clean(self):
        cleaned_data = super().clean()
        if cleaned_data.get('month') and not cleaned_data.get('year'):
            self.add_error('year', 'Year is required when a month is given.')
        return cleaned_data

    @property
    def department_id(self):
        department = self.cleaned_data.get('department')
        return department.pk if department else None

    def window(self, default_year=None):
        """
        Half-open [start, end) datetime range for the selected period.

        Whole month when a month is given, whole year otherwise.
        Returns None when neither year nor default_year is available.
        """
        year = self.cleaned_data.get('year') or default_year
        if not year:
            return None

        month = self.cleaned_data.get('month')
        if month:
            start = datetime(year, month, 1)
            end = datetime(year + 1, 1, 1) if month == 12 else datetime(year, month + 1, 1)
        else:
            start = datetime(year, 1, 1)
            end = datetime(year + 1, 1, 1)

        return timezone.make_aware(start), timezone.make_aware(end)

    def month_window(self):
        """Calendar-month window, or None unless both month and year are given."""
        if not (self.cleaned_data.get('month') and self.cleaned_data.get('year')):
            return None
        return self.window()
