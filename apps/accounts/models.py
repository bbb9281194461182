"""
Custom User model for task_compliance.

CRITICAL: This file must be created and AUTH_USER_MODEL set before running
any migrations. Changing the User model after migrations is very complex.
"""

from django.contrib.auth.models import AbstractUser, BaseUserManager
from django.db import models


class UserManager(BaseUserManager):
    """
    Custom user manager where email is the unique identifier
    for authentication instead of username.
    """

    use_in_migrations = True

    def create_user(self, email, password=None, **extra_fields):
        """Create and save a regular user with the given email and password."""
        if not email:
            raise ValueError('The Email field must be set')

        email = self.normalize_email(email)
        user = self.model(email=email, **extra_fields)
        user.set_password(password)
        user.save(using=self._db)
        return user

    def create_superuser(self, email, password=None, **extra_fields):
        """Create and save a SuperUser with the given email and password."""
        extra_fields.setdefault('is_staff', True)
        extra_fields.setdefault('is_superuser', True)
        extra_fields.setdefault('is_active', True)
        extra_fields.setdefault('role', User.Role.SUPER_ADMIN)

        if extra_fields.get('is_staff') is not True:
            raise ValueError('Superuser must have is_staff=True.')
        if extra_fields.get('is_superuser') is not True:
            raise ValueError('Superuser must have is_superuser=True.')

        return self.create_user(email, password, **extra_fields)


class User(AbstractUser):
    """
    Custom User model with email authentication and role-based scope.

    Roles:
    - Super Admin: Every department; fleet-level (per-department) KPIs
    - Admin: Assigns and reviews within their own department
    - Supervisor: Assigns within their department, reviews own assignments
    - User: Works on tasks they are responsible for
    - Guest: Like User, may be assigned across departments
    """

    class Role(models.TextChoices):
        SUPER_ADMIN = 'super_admin', 'Super Admin'
        ADMIN = 'admin', 'Admin'
        SUPERVISOR = 'supervisor', 'Supervisor'
        USER = 'user', 'User'
        GUEST = 'guest', 'Guest'

    # Remove username field, use email instead
    username = None
    email = models.EmailField(
        'email address',
        unique=True,
        error_messages={
            'unique': 'A user with that email already exists.',
        },
    )

    # Role and department
    role = models.CharField(
        max_length=20,
        choices=Role.choices,
        default=Role.USER,
        db_index=True,
    )
    department = models.ForeignKey(
        'departments.Department',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='users',
    )

    # Timestamps
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = UserManager()

    USERNAME_FIELD = 'email'
    REQUIRED_FIELDS = ['first_name', 'last_name']

    class Meta:
        verbose_name = 'user'
        verbose_name_plural = 'users'
        ordering = ['first_name', 'last_name']

    def __str__(self):
        return f"{self.get_full_name()} ({self.email})"

    def get_full_name(self):
        """Return the first_name plus the last_name, falling back to the email."""
        full_name = f"{self.first_name} {self.last_name}".strip()
        return full_name or self.email

    # ==========================================================================
    # Role Scope Methods
    # ==========================================================================

    def is_super_admin(self):
        """Check if user sees every department."""
        return self.role == self.Role.SUPER_ADMIN

    def is_admin(self):
        """Check if user is a department Admin."""
        return self.role == self.Role.ADMIN

    def is_supervisor(self):
        return self.role == self.Role.SUPERVISOR

    def is_department_scoped(self):
        """Admins and supervisors see every task of their own department."""
        return self.role in [self.Role.ADMIN, self.Role.SUPERVISOR]

    def can_assign_tasks(self):
        return self.role in [
            self.Role.SUPER_ADMIN,
            self.Role.ADMIN,
            self.Role.SUPERVISOR,
        ]
