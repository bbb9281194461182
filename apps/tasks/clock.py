"""
Source of "now" for compliance evaluation.

Only the request boundary reads the clock; every function below it takes
`now` as an argument.
"""

from django.utils import timezone


class TimeSource:
    """Wall clock, timezone-aware."""

    def now(self):
        return timezone.now()


class FixedTimeSource(TimeSource):
    """Clock frozen at a given instant."""

    def __init__(self, instant):
        self.instant = instant

    def now(self):
        return self.instant


system_clock = TimeSource()
