"""
Task lifecycle errors.

Guard failures are plain ValidationError instances carrying a code;
transitions that the current status does not allow raise
InvalidTransition.
"""

from django.core.exceptions import ValidationError


class InvalidTransition(ValidationError):
    """Raised when an event is not legal from the task's current status."""

    def __init__(self, status, event):
        self.status = status
        self.event = event
        super().__init__(
            f"Cannot apply '{event}' to a task with status '{status}'.",
            code='invalid_transition',
        )
