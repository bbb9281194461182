from django.contrib.admin.sites import site
from django.test import RequestFactory, TestCase

from apps.accounts.models import User
from apps.tasks.models import Task
from apps.tasks.services import create_task
from tests.builders import at, make_department, make_user


class TaskAdminTests(TestCase):

    @classmethod
    def setUpTestData(cls):
        cls.department = make_department('Operations', 'OPS')
        cls.admin = make_user('admin@example.com', User.Role.ADMIN, cls.department)
        cls.task = create_task(
            title='Inventory', assigner=cls.admin, department=cls.department,
            responsibles=[cls.admin], original_due_at=at(10), now=at(1),
        )

    def setUp(self):
        self.model_admin = site._registry[Task]
        self.request = RequestFactory().get('/admin/tasks/task/')
        self.request.user = self.admin

    def test_ownership_read_only_on_change(self):
        readonly = self.model_admin.get_readonly_fields(self.request, self.task)
        self.assertIn('department', readonly)
        self.assertIn('assigner', readonly)

    def test_ownership_editable_on_add(self):
        readonly = self.model_admin.get_readonly_fields(self.request)
        self.assertNotIn('department', readonly)
        self.assertNotIn('assigner', readonly)
