"""
Builders shared by the test modules.

Record builders need no database; the model builders create the minimum
rows the lifecycle services need.
"""

from datetime import datetime, timezone as dt_timezone
from itertools import count

from apps.accounts.models import User
from apps.departments.models import Department
from apps.tasks.records import DeadlineChangeRecord, Person, TaskRecord

_sequence = count(1)


def at(day, hour=12, minute=0, month=6, year=2024):
    """Aware UTC datetime; June 2024 unless told otherwise."""
    return datetime(year, month, day, hour, minute, tzinfo=dt_timezone.utc)


def change(previous, new, changed_at, reason='', id=None):
    return DeadlineChangeRecord(
        previous_due_at=previous,
        new_due_at=new,
        changed_at=changed_at,
        reason=reason,
        id=id,
    )


def record(status='pending', original_due_at=None, id=None, department_id=1,
           department_name='Operations', responsibles=((1, 'Ana'),),
           delivered_at=None, closed_at=None, history=(), urgency='low',
           created_at=None):
    return TaskRecord(
        id=id if id is not None else next(_sequence),
        status=status,
        original_due_at=original_due_at or at(10),
        department_id=department_id,
        department_name=department_name,
        responsibles=tuple(Person(id=pk, name=name) for pk, name in responsibles),
        delivered_at=delivered_at,
        closed_at=closed_at,
        created_at=created_at or at(1),
        urgency=urgency,
        deadline_history=tuple(history),
    )


def make_department(name='Operations', code=None):
    return Department.objects.create(name=name, code=code or name[:3])


def make_user(email, role=User.Role.USER, department=None, first_name='', last_name=''):
    return User.objects.create_user(
        email=email,
        password='testpass123',
        role=role,
        department=department,
        first_name=first_name,
        last_name=last_name,
    )
