from django.test import SimpleTestCase

from apps.reports.kpi import GroupBy, aggregate, merge
from apps.reports.metrics import Metrics
from apps.tasks.compliance import Verdict
from tests.builders import at, record

NOW = at(12)


def sample_tasks():
    return [
        # Operations
        record(id=1, original_due_at=at(10)),                               # pending late
        record(id=2, original_due_at=at(20)),                               # pending on time
        record(id=3, status='done', original_due_at=at(10),
               delivered_at=at(9), closed_at=at(11)),                      # delivered on time
        # Finance, shared by two users
        record(id=4, department_id=2, department_name='Finance',
               responsibles=((2, 'Bruno'), (3, 'Carla')),
               status='in_review', original_due_at=at(5), delivered_at=at(8)),  # delivered late
        record(id=5, department_id=2, department_name='Finance',
               responsibles=((2, 'Bruno'),), original_due_at=at(11)),      # pending late
        # Excluded
        record(id=6, status='cancelled', original_due_at=at(1)),
    ]


class MetricsTests(SimpleTestCase):

    def test_add_and_total(self):
        metrics = Metrics().add(Verdict.PENDING_LATE).add('delivered_on_time')
        self.assertEqual(metrics.pending_late, 1)
        self.assertEqual(metrics.delivered_on_time, 1)
        self.assertEqual(metrics.total, 2)

    def test_not_evaluated_is_ignored(self):
        self.assertEqual(Metrics().add(Verdict.NOT_EVALUATED), Metrics())

    def test_sum(self):
        total = Metrics(pending_late=1, delivered_late=2) + Metrics(pending_late=3)
        self.assertEqual(total, Metrics(pending_late=4, delivered_late=2))

    def test_to_dict_keys(self):
        self.assertEqual(
            Metrics(pending_on_time=2).to_dict(),
            {'pendingLate': 0, 'pendingOnTime': 2, 'deliveredLate': 0,
             'deliveredOnTime': 0, 'total': 2},
        )


class AggregateTests(SimpleTestCase):

    def test_totals_skip_cancelled(self):
        report = aggregate(sample_tasks(), GroupBy.DEPARTMENT, NOW)
        self.assertEqual(report.totals, Metrics(
            pending_late=2, pending_on_time=1, delivered_late=1, delivered_on_time=1,
        ))

    def test_department_breakdown(self):
        report = aggregate(sample_tasks(), GroupBy.DEPARTMENT, NOW)
        operations = report.entries[1]
        finance = report.entries[2]
        self.assertEqual(operations.name, 'Operations')
        self.assertEqual(operations.metrics.total, 3)
        self.assertEqual(finance.metrics, Metrics(pending_late=1, delivered_late=1))

    def test_shared_task_counts_for_each_responsible(self):
        report = aggregate(sample_tasks(), GroupBy.USER, NOW)
        self.assertEqual(report.entries[2].metrics, Metrics(pending_late=1, delivered_late=1))
        self.assertEqual(report.entries[3].metrics, Metrics(delivered_late=1))
        # Totals count tasks, not task-user pairs
        self.assertEqual(report.totals.total, 5)

    def test_breakdown_sorted_by_pending_late_then_name(self):
        tasks = [
            record(id=10, responsibles=((5, 'Zoe'),), original_due_at=at(1)),
            record(id=11, responsibles=((6, 'Mario'),), original_due_at=at(20)),
            record(id=12, responsibles=((7, 'Lia'),), original_due_at=at(20)),
        ]
        report = aggregate(tasks, GroupBy.USER, NOW)
        self.assertEqual([entry.name for entry in report.breakdown], ['Zoe', 'Lia', 'Mario'])

    def test_empty_input(self):
        report = aggregate([], GroupBy.DEPARTMENT, NOW)
        self.assertEqual(report.totals.total, 0)
        self.assertEqual(report.breakdown, [])

    def test_merge_matches_aggregate_of_union(self):
        tasks = sample_tasks()
        for group_by in GroupBy:
            with self.subTest(group_by=group_by):
                whole = aggregate(tasks, group_by, NOW)
                split = merge(
                    aggregate(tasks[:2], group_by, NOW),
                    aggregate(tasks[2:], group_by, NOW),
                )
                self.assertEqual(split, whole)

    def test_merge_rejects_mixed_grouping(self):
        with self.assertRaises(ValueError):
            merge(aggregate([], GroupBy.USER, NOW), aggregate([], GroupBy.DEPARTMENT, NOW))

    def test_payload_shape(self):
        payload = aggregate(sample_tasks(), GroupBy.DEPARTMENT, NOW).to_dict()
        self.assertEqual(payload['view'], 'DEPARTMENT')
        self.assertIsNone(payload['departmentId'])
        self.assertEqual(payload['general']['total'], 5)
        self.assertEqual(payload['breakdown'][0]['name'], 'Finance')
        self.assertEqual(payload['breakdown'][0]['pendingLate'], 1)
