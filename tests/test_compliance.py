from django.test import SimpleTestCase

from apps.tasks.compliance import (
    PendingState, Verdict, classify, is_due_soon, is_evaluated, pending_state,
)
from tests.builders import at, change, record


class ClassifyTests(SimpleTestCase):

    def test_cancelled_is_not_evaluated(self):
        task = record(status='cancelled', original_due_at=at(10))
        self.assertEqual(classify(task, at(20)), Verdict.NOT_EVALUATED)
        self.assertFalse(is_evaluated(classify(task, at(20))))

    def test_pending_before_deadline_is_on_time(self):
        task = record(original_due_at=at(10))
        self.assertEqual(classify(task, at(9)), Verdict.PENDING_ON_TIME)

    def test_pending_exactly_at_deadline_is_on_time(self):
        task = record(original_due_at=at(10))
        self.assertEqual(classify(task, at(10)), Verdict.PENDING_ON_TIME)

    def test_pending_past_deadline_is_late(self):
        task = record(original_due_at=at(10))
        self.assertEqual(classify(task, at(10, minute=1)), Verdict.PENDING_LATE)

    def test_pending_uses_amended_deadline(self):
        task = record(original_due_at=at(10), history=[
            change(at(10), at(15), changed_at=at(8), id=1),
        ])
        self.assertEqual(classify(task, at(12)), Verdict.PENDING_ON_TIME)

    def test_delivery_time_decides_not_approval_time(self):
        task = record(
            status='done',
            original_due_at=at(10),
            delivered_at=at(9),
            closed_at=at(12),
        )
        self.assertEqual(classify(task, at(20)), Verdict.DELIVERED_ON_TIME)

    def test_delivered_after_deadline_is_late(self):
        task = record(status='in_review', original_due_at=at(10), delivered_at=at(11))
        self.assertEqual(classify(task, at(11)), Verdict.DELIVERED_LATE)

    def test_in_review_verdict_ignores_evaluation_time(self):
        on_time = record(status='in_review', original_due_at=at(10), delivered_at=at(9))
        late = record(status='in_review', original_due_at=at(10), delivered_at=at(11))
        for now in (at(5), at(10), at(28, month=12)):
            with self.subTest(now=now):
                self.assertEqual(classify(on_time, now), Verdict.DELIVERED_ON_TIME)
                self.assertEqual(classify(late, now), Verdict.DELIVERED_LATE)

    def test_done_without_delivery_uses_closed_at(self):
        task = record(status='done', original_due_at=at(10), closed_at=at(10, hour=9))
        self.assertEqual(classify(task, at(20)), Verdict.DELIVERED_ON_TIME)

    def test_submitted_without_timestamps_is_not_evaluated(self):
        task = record(status='in_review', original_due_at=at(10))
        with self.assertLogs('apps.tasks.compliance', level='WARNING'):
            verdict = classify(task, at(20))
        self.assertEqual(verdict, Verdict.NOT_EVALUATED)

    def test_malformed_history_is_reported(self):
        task = record(original_due_at=at(10), history=[
            change(at(10), None, changed_at=at(5), id=1),
        ])
        with self.assertLogs('apps.tasks.compliance', level='WARNING') as logs:
            verdict = classify(task, at(11))
        self.assertEqual(verdict, Verdict.PENDING_LATE)
        self.assertIn('falling back', logs.output[0])


class PendingStateTests(SimpleTestCase):

    def test_deadline_date_passed_is_overdue(self):
        task = record(original_due_at=at(10))
        self.assertEqual(pending_state(task, at(11), days=2), PendingState.OVERDUE)

    def test_deadline_later_today_is_due_soon(self):
        task = record(original_due_at=at(10, hour=18))
        self.assertEqual(pending_state(task, at(10, hour=9), days=2), PendingState.DUE_SOON)

    def test_deadline_within_window_is_due_soon(self):
        task = record(original_due_at=at(12))
        self.assertEqual(pending_state(task, at(10), days=2), PendingState.DUE_SOON)

    def test_deadline_beyond_window_is_normal(self):
        task = record(original_due_at=at(13))
        self.assertEqual(pending_state(task, at(10), days=2), PendingState.NORMAL)

    def test_is_due_soon_excludes_late_and_submitted_tasks(self):
        self.assertTrue(is_due_soon(record(original_due_at=at(11)), at(10), days=2))
        # Earlier the same day: late by the clock, still dated today
        late_today = record(original_due_at=at(10, hour=8))
        self.assertFalse(is_due_soon(late_today, at(10, hour=9), days=2))
        submitted = record(status='in_review', original_due_at=at(11), delivered_at=at(9))
        self.assertFalse(is_due_soon(submitted, at(10), days=2))
