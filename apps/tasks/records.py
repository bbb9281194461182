"""
Immutable snapshots of tasks for compliance evaluation.

The resolver, classifier, KPI aggregator and metrics rollup only read
attributes, so they accept these records as well as model instances.
Reports build records once (Task.to_record) and never touch the ORM
again while aggregating.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional, Tuple


@dataclass(frozen=True)
class Person:
    """A user as shown in a breakdown: id plus display name."""
    id: int
    name: str = ''


@dataclass(frozen=True)
class DeadlineChangeRecord:
    previous_due_at: Optional[datetime]
    new_due_at: Optional[datetime]
    changed_at: datetime
    reason: str = ''
    changed_by_id: Optional[int] = None
    id: Optional[int] = None


@dataclass(frozen=True)
class TaskRecord:
    """
    Read-only view of a task at one instant.

    deadline_history may arrive in any order; consumers sort it.
    """
    id: int
    status: str
    original_due_at: datetime
    department_id: Optional[int] = None
    department_name: str = ''
    responsibles: Tuple[Person, ...] = ()
    delivered_at: Optional[datetime] = None
    closed_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    urgency: str = 'low'
    title: str = ''
    deadline_history: Tuple[DeadlineChangeRecord, ...] = field(default_factory=tuple)
