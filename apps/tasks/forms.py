"""
Forms for tasks app.

They only parse and bound request input; lifecycle guards (non-empty
comment, feedback, reason) live in the services so every caller gets the
same ValidationError codes.

Includes:
- TaskForm: Create tasks (title/instructions length limits)
- DeliveryForm: Submit a task for review
- ReviewForm: Approve or reject a delivery
- DeadlineForm: Amend the deadline
- CancelForm: Cancel with optional reason
"""

from django import forms

from .models import Task
from apps.accounts.models import User


class TaskForm(forms.ModelForm):
    """
    Form for creating tasks.

    Title is bounded to 50 characters and instructions to 160.
    """

    responsibles = forms.ModelMultipleChoiceField(
        queryset=User.objects.filter(is_active=True),
    )

    class Meta:
        model = Task
        fields = [
            'title', 'instructions', 'urgency', 'department',
            'responsibles', 'original_due_at',
        ]

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.fields['urgency'].required = False
        self.fields['instructions'].required = False
        self.fields['title'].help_text = 'Brief, descriptive title for the task'
        self.fields['original_due_at'].help_text = (
            'A bare date runs until the end of that day'
        )


class DeliveryForm(forms.Form):
    comment = forms.CharField(required=False)


class ReviewForm(forms.Form):
    """Reviewer decision on a delivered task."""

    APPROVE = 'approve'
    REJECT = 'reject'

    decision = forms.ChoiceField(choices=[
        (APPROVE, 'Approve'),
        (REJECT, 'Reject'),
    ])
    feedback = forms.CharField(required=False)
    new_due_at = forms.DateTimeField(
        required=False,
        help_text='Optional deadline extension granted with a rejection'
    )


class DeadlineForm(forms.Form):
    new_due_at = forms.DateTimeField()
    reason = forms.CharField(required=False)


class CancelForm(forms.Form):
    reason = forms.CharField(required=False)
