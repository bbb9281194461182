"""
Department model for organizational structure.

Departments are flat (no hierarchy/nesting). Every task belongs to
exactly one department, fixed when the task is created.
"""

from django.db import models


class Department(models.Model):
    """
    Represents an organizational department.

    Notes:
    - Departments are flat (no parent/child relationships)
    - Code is a short identifier (e.g., "ENG", "HR")
    - The name is what KPI breakdowns display
    """

    name = models.CharField(
        max_length=100,
        unique=True,
        help_text='Full department name'
    )
    code = models.CharField(
        max_length=10,
        unique=True,
        help_text='Short identifier (e.g., ENG, HR, FIN)'
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = 'department'
        verbose_name_plural = 'departments'
        ordering = ['name']

    def __str__(self):
        return f"{self.name} ({self.code})"

    def save(self, *args, **kwargs):
        # Ensure code is uppercase
        if self.code:
            self.code = self.code.upper()
        super().save(*args, **kwargs)

    @property
    def employee_count(self):
        """Return the number of active users in this department."""
        return self.users.filter(is_active=True).count()
