"""
Metrics rollup for historical (monthly/yearly) reporting.

Besides counting tasks by state it measures planning quality: among done
tasks, how often deadlines that were never amended were met, compared
with deadlines that were rescheduled at least once. It also tallies the
reasons given for rescheduling.
"""

import logging
from collections import Counter
from dataclasses import dataclass, field, replace
from functools import reduce

from apps.tasks.compliance import PendingState, effective_deadline, pending_state
from apps.tasks.deadlines import has_history, resolve_original_deadline
from apps.tasks.models import Task
from .metrics import ratio

logger = logging.getLogger(__name__)

UNSPECIFIED_REASON = 'Unspecified'


@dataclass(frozen=True)
class PlanningQuality:
    no_history_total: int = 0
    no_history_success: int = 0
    with_history_total: int = 0
    with_history_success: int = 0

    @property
    def no_history_rate(self):
        return ratio(self.no_history_success, self.no_history_total)

    @property
    def with_history_rate(self):
        return ratio(self.with_history_success, self.with_history_total)

    def to_dict(self):
        return {
            'noHistoryTotal': self.no_history_total,
            'noHistorySuccess': self.no_history_success,
            'withHistoryTotal': self.with_history_total,
            'withHistorySuccess': self.with_history_success,
            'noHistoryRate': self.no_history_rate.to_dict(),
            'withHistoryRate': self.with_history_rate.to_dict(),
        }


@dataclass(frozen=True)
class DoneEvaluation:
    """Outcome of one done task against its original and effective deadlines."""
    has_history: bool
    met_original: bool
    met_effective: bool


def evaluate_done(task):
    """
    Compare closed_at with both deadlines of a done task.

    Returns None when the task is not done or has no closure timestamp.
    """
    if task.status != Task.Status.DONE:
        return None
    if task.closed_at is None:
        logger.warning(f"Task {task.id} is done without closed_at; skipped in rollup")
        return None
    return DoneEvaluation(
        has_history=has_history(task),
        met_original=task.closed_at <= resolve_original_deadline(task),
        met_effective=task.closed_at <= effective_deadline(task),
    )


def _planning_step(quality, task):
    evaluation = evaluate_done(task)
    if evaluation is None:
        return quality
    if evaluation.has_history:
        return replace(
            quality,
            with_history_total=quality.with_history_total + 1,
            with_history_success=quality.with_history_success + evaluation.met_effective,
        )
    # Original and effective deadlines coincide without history
    return replace(
        quality,
        no_history_total=quality.no_history_total + 1,
        no_history_success=quality.no_history_success + evaluation.met_original,
    )


def planning_quality(tasks):
    """Success rates for never-rescheduled vs rescheduled done tasks."""
    return reduce(_planning_step, tasks, PlanningQuality())


def reason_frequencies(tasks):
    """Counter of deadline-change reasons across every task given."""
    reasons = Counter()
    for task in tasks:
        for change in task.deadline_history:
            reason = (change.reason or '').strip() or UNSPECIFIED_REASON
            reasons[reason] += 1
    return reasons


@dataclass(frozen=True)
class RankingEntry:
    id: int
    name: str
    total: int = 0
    on_time: int = 0
    late: int = 0

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'total': self.total,
            'onTime': self.on_time,
            'late': self.late,
        }


@dataclass(frozen=True)
class MetricsRollup:
    tasks: int = 0
    status_counts: dict = field(default_factory=dict)
    planning: PlanningQuality = field(default_factory=PlanningQuality)
    met_original: int = 0
    met_effective: int = 0
    late: int = 0
    overdue_ids: tuple = ()
    due_soon_ids: tuple = ()
    pending_normal: int = 0
    urgency: dict = field(default_factory=dict)
    reasons: Counter = field(default_factory=Counter)
    top_reasons: tuple = ()
    ranking: tuple = ()

    @property
    def deadline_changes(self):
        return sum(self.reasons.values())

    def to_dict(self):
        return {
            'totals': {
                'tasks': self.tasks,
                'done': self.status_counts.get(Task.Status.DONE.value, 0),
                'pending': self.status_counts.get(Task.Status.PENDING.value, 0),
                'inReview': self.status_counts.get(Task.Status.IN_REVIEW.value, 0),
                'cancelled': self.status_counts.get(Task.Status.CANCELLED.value, 0),
                'metOriginal': self.met_original,
                'metEffective': self.met_effective,
                'late': self.late,
                'deadlineChanges': self.deadline_changes,
            },
            'planningQuality': self.planning.to_dict(),
            'pending': {
                'overdue': len(self.overdue_ids),
                'dueSoon': len(self.due_soon_ids),
                'normal': self.pending_normal,
                'overdueIds': list(self.overdue_ids),
                'dueSoonIds': list(self.due_soon_ids),
            },
            'urgency': dict(self.urgency),
            'topReasons': [
                {'reason': reason, 'count': count}
                for reason, count in self.top_reasons
            ],
            'ranking': [entry.to_dict() for entry in self.ranking],
        }


def _urgency_key(task):
    urgency = (getattr(task, 'urgency', '') or '').lower()
    if urgency not in Task.Urgency.values:
        return Task.Urgency.LOW.value
    return urgency


def rollup(tasks, now, due_soon_days=2, top_reasons=5, ranking_limit=8):
    """
    Build the metrics rollup for the tasks of one reporting window.

    Args:
        tasks: Iterable of TaskRecord registered in the window
        now: Instant pending tasks are judged against
        due_soon_days: Days ahead that count as "due soon"
        top_reasons: Size of the top rescheduling reasons table
        ranking_limit: Size of the responsible-user ranking

    Returns:
        MetricsRollup
    """
    tasks = list(tasks)

    status_counts = Counter(str(task.status) for task in tasks)
    urgency = Counter({value: 0 for value in Task.Urgency.values})
    urgency.update(_urgency_key(task) for task in tasks)

    met_original = met_effective = late = 0
    ranking = {}
    for task in tasks:
        evaluation = evaluate_done(task)
        if evaluation is None:
            continue
        met_original += evaluation.met_original
        met_effective += evaluation.met_effective
        late += not evaluation.met_effective
        for person in task.responsibles:
            entry = ranking.get(person.id) or RankingEntry(id=person.id, name=person.name)
            ranking[person.id] = replace(
                entry,
                total=entry.total + 1,
                on_time=entry.on_time + evaluation.met_effective,
                late=entry.late + (not evaluation.met_effective),
            )

    overdue_ids, due_soon_ids, pending_normal = [], [], 0
    for task in tasks:
        if task.status != Task.Status.PENDING:
            continue
        state = pending_state(task, now, due_soon_days)
        if state == PendingState.OVERDUE:
            overdue_ids.append(task.id)
        elif state == PendingState.DUE_SOON:
            due_soon_ids.append(task.id)
        else:
            pending_normal += 1

    reasons = reason_frequencies(tasks)
    ranked = sorted(ranking.values(), key=lambda entry: (-entry.total, entry.name, entry.id))

    return MetricsRollup(
        tasks=len(tasks),
        status_counts=dict(status_counts),
        planning=planning_quality(tasks),
        met_original=met_original,
        met_effective=met_effective,
        late=late,
        overdue_ids=tuple(overdue_ids),
        due_soon_ids=tuple(due_soon_ids),
        pending_normal=pending_normal,
        urgency=dict(urgency),
        reasons=reasons,
        top_reasons=tuple(reasons.most_common(top_reasons)),
        ranking=tuple(ranked[:ranking_limit]),
    )
