"""
Value objects for compliance reporting.

- Metrics: the four KPI buckets plus their total
- Available / NOT_APPLICABLE: tagged ratio result, so a zero denominator
  is never mistaken for a real 0%
"""

from dataclasses import dataclass, replace

from apps.tasks.compliance import Verdict


# Verdict value → Metrics field
BUCKET_FIELDS = {
    Verdict.PENDING_LATE.value: 'pending_late',
    Verdict.PENDING_ON_TIME.value: 'pending_on_time',
    Verdict.DELIVERED_LATE.value: 'delivered_late',
    Verdict.DELIVERED_ON_TIME.value: 'delivered_on_time',
}


@dataclass(frozen=True)
class Metrics:
    pending_late: int = 0
    pending_on_time: int = 0
    delivered_late: int = 0
    delivered_on_time: int = 0

    @property
    def total(self):
        return (
            self.pending_late + self.pending_on_time
            + self.delivered_late + self.delivered_on_time
        )

    def add(self, verdict):
        """Return a copy with one more task in the verdict's bucket."""
        field_name = BUCKET_FIELDS.get(str(verdict))
        if field_name is None:
            return self
        return replace(self, **{field_name: getattr(self, field_name) + 1})

    def __add__(self, other):
        if not isinstance(other, Metrics):
            return NotImplemented
        return Metrics(
            pending_late=self.pending_late + other.pending_late,
            pending_on_time=self.pending_on_time + other.pending_on_time,
            delivered_late=self.delivered_late + other.delivered_late,
            delivered_on_time=self.delivered_on_time + other.delivered_on_time,
        )

    def to_dict(self):
        return {
            'pendingLate': self.pending_late,
            'pendingOnTime': self.pending_on_time,
            'deliveredLate': self.delivered_late,
            'deliveredOnTime': self.delivered_on_time,
            'total': self.total,
        }


class NotApplicable:
    """Ratio whose denominator is zero."""

    available = False
    value = None

    def __repr__(self):
        return 'NOT_APPLICABLE'

    def __eq__(self, other):
        return isinstance(other, NotApplicable)

    def __hash__(self):
        return hash(NotApplicable)

    def to_dict(self):
        return {'available': False, 'value': None, 'display': self.display()}

    def display(self):
        return 'N/A'


NOT_APPLICABLE = NotApplicable()


@dataclass(frozen=True)
class Available:
    """Ratio with a real denominator; value is in [0, 1]."""

    value: float

    available = True

    def to_dict(self):
        return {'available': True, 'value': round(self.value, 4), 'display': self.display()}

    def display(self):
        return f"{self.value * 100:.1f}%"


def ratio(numerator, denominator):
    """Tagged ratio: Available(n/d), or NOT_APPLICABLE when d is zero."""
    if not denominator:
        return NOT_APPLICABLE
    return Available(numerator / denominator)
