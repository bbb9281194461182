from django.test import SimpleTestCase

from apps.reports.metrics import NOT_APPLICABLE, Available, ratio
from apps.reports.rollup import UNSPECIFIED_REASON, planning_quality, reason_frequencies, rollup
from tests.builders import at, change, record

NOW = at(20)


class RatioTests(SimpleTestCase):

    def test_zero_denominator_is_not_applicable(self):
        result = ratio(0, 0)
        self.assertIs(result, NOT_APPLICABLE)
        self.assertFalse(result.available)
        self.assertEqual(result.display(), 'N/A')
        self.assertEqual(result.to_dict(), {'available': False, 'value': None, 'display': 'N/A'})

    def test_available_ratio(self):
        result = ratio(1, 4)
        self.assertEqual(result, Available(0.25))
        self.assertTrue(result.available)
        self.assertEqual(result.display(), '25.0%')
        self.assertEqual(result.to_dict(), {'available': True, 'value': 0.25, 'display': '25.0%'})


class PlanningQualityTests(SimpleTestCase):

    def test_no_done_tasks_gives_not_applicable_rates(self):
        quality = planning_quality([record(original_due_at=at(10))])
        self.assertIs(quality.no_history_rate, NOT_APPLICABLE)
        self.assertIs(quality.with_history_rate, NOT_APPLICABLE)

    def test_task_without_history_judged_on_original_deadline(self):
        task = record(status='done', original_due_at=at(10), delivered_at=at(9), closed_at=at(12))
        quality = planning_quality([task])
        self.assertEqual(quality.no_history_total, 1)
        self.assertEqual(quality.no_history_success, 0)
        self.assertEqual(quality.no_history_rate, Available(0.0))
        self.assertIs(quality.with_history_rate, NOT_APPLICABLE)

    def test_rescheduled_task_judged_on_effective_deadline(self):
        task = record(
            status='done',
            original_due_at=at(10),
            delivered_at=at(14),
            closed_at=at(15),
            history=[change(at(10), at(15), changed_at=at(11), reason='Rejected: Incomplete', id=1)],
        )
        quality = planning_quality([task])
        self.assertEqual(quality.with_history_total, 1)
        self.assertEqual(quality.with_history_success, 1)
        self.assertEqual(quality.with_history_rate, Available(1.0))
        self.assertIs(quality.no_history_rate, NOT_APPLICABLE)

    def test_done_without_closed_at_is_skipped(self):
        task = record(status='done', original_due_at=at(10), delivered_at=at(9))
        with self.assertLogs('apps.reports.rollup', level='WARNING'):
            quality = planning_quality([task])
        self.assertEqual(quality.no_history_total, 0)


class ReasonFrequencyTests(SimpleTestCase):

    def test_blank_reasons_counted_as_unspecified(self):
        tasks = [
            record(history=[
                change(at(10), at(12), at(3), reason='Supplier delay', id=1),
                change(at(12), at(14), at(4), reason='  ', id=2),
            ]),
            record(status='cancelled', history=[
                change(at(10), at(11), at(3), reason='Supplier delay', id=3),
            ]),
        ]
        reasons = reason_frequencies(tasks)
        self.assertEqual(reasons['Supplier delay'], 2)
        self.assertEqual(reasons[UNSPECIFIED_REASON], 1)


class RollupTests(SimpleTestCase):

    def build(self):
        return [
            # Done on time, never rescheduled
            record(id=1, status='done', original_due_at=at(10), delivered_at=at(9),
                   closed_at=at(10, hour=9), urgency='high', responsibles=((1, 'Ana'),)),
            # Done late against the original, on time after rescheduling
            record(id=2, status='done', original_due_at=at(10), delivered_at=at(14),
                   closed_at=at(14), responsibles=((1, 'Ana'), (2, 'Bruno')),
                   history=[change(at(10), at(15), at(8), reason='Supplier delay', id=1)]),
            # Done late, rescheduled twice
            record(id=3, status='done', original_due_at=at(5), delivered_at=at(13),
                   closed_at=at(13), urgency='urgent', responsibles=((2, 'Bruno'),),
                   history=[
                       change(at(5), at(8), at(4), reason='Supplier delay', id=2),
                       change(at(8), at(11), at(7), reason='', id=3),
                   ]),
            # Pending: overdue, due soon, normal
            record(id=4, original_due_at=at(18), urgency='medium'),
            record(id=5, original_due_at=at(21)),
            record(id=6, original_due_at=at(28)),
            record(id=7, status='cancelled', original_due_at=at(10)),
        ]

    def test_totals(self):
        result = rollup(self.build(), NOW, due_soon_days=2, top_reasons=5, ranking_limit=8)
        totals = result.to_dict()['totals']
        self.assertEqual(totals['tasks'], 7)
        self.assertEqual(totals['done'], 3)
        self.assertEqual(totals['pending'], 3)
        self.assertEqual(totals['cancelled'], 1)
        self.assertEqual(totals['metOriginal'], 1)
        self.assertEqual(totals['metEffective'], 2)
        self.assertEqual(totals['late'], 1)
        self.assertEqual(totals['deadlineChanges'], 3)

    def test_planning_quality(self):
        quality = rollup(self.build(), NOW).planning
        self.assertEqual(quality.no_history_rate, Available(1.0))
        self.assertEqual(quality.with_history_rate, Available(0.5))

    def test_pending_split(self):
        result = rollup(self.build(), NOW, due_soon_days=2)
        self.assertEqual(result.overdue_ids, (4,))
        self.assertEqual(result.due_soon_ids, (5,))
        self.assertEqual(result.pending_normal, 1)

    def test_urgency_tally_counts_unknown_as_low(self):
        urgency = rollup(self.build(), NOW).urgency
        self.assertEqual(urgency, {'high': 1, 'medium': 1, 'low': 5})

    def test_top_reasons(self):
        result = rollup(self.build(), NOW, top_reasons=1)
        self.assertEqual(result.top_reasons, (('Supplier delay', 2),))

    def test_ranking(self):
        result = rollup(self.build(), NOW, ranking_limit=8)
        ranking = [entry.to_dict() for entry in result.ranking]
        self.assertEqual(ranking, [
            {'id': 1, 'name': 'Ana', 'total': 2, 'onTime': 2, 'late': 0},
            {'id': 2, 'name': 'Bruno', 'total': 2, 'onTime': 1, 'late': 1},
        ])
        self.assertEqual(len(rollup(self.build(), NOW, ranking_limit=1).ranking), 1)

    def test_empty_window(self):
        payload = rollup([], NOW).to_dict()
        self.assertEqual(payload['totals']['tasks'], 0)
        self.assertEqual(payload['planningQuality']['noHistoryRate'], {'available': False, 'value': None, 'display': 'N/A'})
        self.assertEqual(payload['topReasons'], [])
