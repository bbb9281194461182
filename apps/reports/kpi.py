"""
KPI aggregation.

aggregate() folds a collection of task records into global totals plus a
breakdown keyed by department or by responsible user. The fold never
mutates a report: every step returns a new KPIReport, so two reports over
disjoint task sets can be combined with merge() and give the same result
as aggregating the union.
"""

from dataclasses import dataclass, field, replace
from functools import reduce

from django.db import models

from apps.tasks.compliance import classify, is_evaluated
from .metrics import Metrics


class GroupBy(models.TextChoices):
    DEPARTMENT = 'DEPARTMENT', 'Department'
    USER = 'USER', 'User'


@dataclass(frozen=True)
class BreakdownEntry:
    id: int
    name: str
    metrics: Metrics = field(default_factory=Metrics)

    def add(self, verdict):
        return replace(self, metrics=self.metrics.add(verdict))

    def __add__(self, other):
        if not isinstance(other, BreakdownEntry):
            return NotImplemented
        return replace(self, metrics=self.metrics + other.metrics)

    def to_dict(self):
        return {'id': self.id, 'name': self.name, **self.metrics.to_dict()}


@dataclass(frozen=True)
class KPIReport:
    """
    Totals plus breakdown entries keyed by department or user id.

    `entries` keeps first-seen order; `breakdown` is the presentation
    order (most overdue first, then by name).
    """
    group_by: str
    totals: Metrics = field(default_factory=Metrics)
    entries: dict = field(default_factory=dict)

    @classmethod
    def empty(cls, group_by):
        return cls(group_by=GroupBy(group_by))

    @property
    def breakdown(self):
        return sorted(
            self.entries.values(),
            key=lambda entry: (-entry.metrics.pending_late, entry.name, entry.id),
        )

    def to_dict(self, department_id=None):
        return {
            'view': str(self.group_by),
            'departmentId': department_id,
            'general': self.totals.to_dict(),
            'breakdown': [entry.to_dict() for entry in self.breakdown],
        }


def breakdown_keys(task, group_by):
    """
    (id, name) pairs a task counts against.

    One pair for the owning department, or one per responsible user:
    a task shared by two users counts fully for each of them.
    """
    if group_by == GroupBy.DEPARTMENT:
        return [(task.department_id, task.department_name)]
    return [(person.id, person.name) for person in task.responsibles]


def _step(group_by, now):
    def step(report, task):
        verdict = classify(task, now)
        if not is_evaluated(verdict):
            return report

        entries = dict(report.entries)
        for key, name in breakdown_keys(task, group_by):
            entry = entries.get(key) or BreakdownEntry(id=key, name=name)
            entries[key] = entry.add(verdict)

        return KPIReport(
            group_by=report.group_by,
            totals=report.totals.add(verdict),
            entries=entries,
        )
    return step


def aggregate(tasks, group_by, now):
    """
    Aggregate compliance verdicts.

    Args:
        tasks: Iterable of TaskRecord, already scoped by the caller
        group_by: GroupBy.DEPARTMENT or GroupBy.USER
        now: Instant pending tasks are judged against

    Returns:
        KPIReport; cancelled and non-evaluable tasks count nowhere
    """
    return reduce(_step(GroupBy(group_by), now), tasks, KPIReport.empty(group_by))


def merge(first, second):
    """Combine two reports built with the same grouping."""
    if first.group_by != second.group_by:
        raise ValueError(
            f"Cannot merge a {first.group_by} report with a {second.group_by} report."
        )

    entries = dict(first.entries)
    for key, entry in second.entries.items():
        entries[key] = entries[key] + entry if key in entries else entry

    return KPIReport(
        group_by=first.group_by,
        totals=first.totals + second.totals,
        entries=entries,
    )
