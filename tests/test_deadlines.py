from django.test import SimpleTestCase

from apps.tasks.deadlines import (
    has_history, latest_change, ordered_history, resolve_deadline,
    resolve_effective_deadline, resolve_original_deadline,
)
from tests.builders import at, change, record


class ResolveDeadlineTests(SimpleTestCase):

    def test_without_history_uses_original(self):
        task = record(original_due_at=at(10))
        self.assertEqual(resolve_effective_deadline(task), at(10))
        self.assertFalse(has_history(task))

    def test_latest_change_wins_regardless_of_order(self):
        task = record(original_due_at=at(10), history=[
            change(at(12), at(20), changed_at=at(5), id=2),
            change(at(10), at(12), changed_at=at(3), id=1),
        ])
        self.assertEqual(resolve_effective_deadline(task), at(20))
        self.assertTrue(has_history(task))

    def test_equal_timestamps_resolved_by_highest_id(self):
        task = record(original_due_at=at(10), history=[
            change(at(10), at(15), changed_at=at(4), id=7),
            change(at(10), at(18), changed_at=at(4), id=3),
        ])
        self.assertEqual(resolve_effective_deadline(task), at(15))

    def test_unsaved_record_sorts_before_saved_one(self):
        history = [
            change(at(10), at(15), changed_at=at(4), id=None),
            change(at(10), at(18), changed_at=at(4), id=1),
        ]
        self.assertEqual(latest_change(history).new_due_at, at(18))

    def test_latest_change_without_new_date_falls_back(self):
        task = record(original_due_at=at(10), history=[
            change(at(10), at(12), changed_at=at(3), id=1),
            change(at(12), None, changed_at=at(5), id=2),
        ])
        resolved = resolve_deadline(task)
        self.assertEqual(resolved.due_at, at(10))
        self.assertTrue(resolved.fell_back)

    def test_original_deadline_from_first_change(self):
        task = record(original_due_at=at(11), history=[
            change(at(12), at(14), changed_at=at(6), id=2),
            change(at(10), at(12), changed_at=at(3), id=1),
        ])
        self.assertEqual(resolve_original_deadline(task), at(10))

    def test_original_deadline_without_previous_date(self):
        task = record(original_due_at=at(10), history=[
            change(None, at(14), changed_at=at(3), id=1),
        ])
        self.assertEqual(resolve_original_deadline(task), at(10))

    def test_ordered_history_is_oldest_first(self):
        first = change(at(10), at(12), changed_at=at(3), id=1)
        second = change(at(12), at(14), changed_at=at(6), id=2)
        self.assertEqual(ordered_history([second, first]), [first, second])
        self.assertIsNone(latest_change([]))
