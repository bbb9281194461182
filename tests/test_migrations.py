from io import StringIO

from django.conf import settings
from django.core.management import call_command
from django.test import SimpleTestCase, TestCase


class MigrationStateTests(TestCase):

    def test_models_match_migrations(self):
        output = StringIO()
        call_command('makemigrations', '--check', '--dry-run', stdout=output)
        self.assertIn('No changes detected', output.getvalue())


class TestSettingsTests(SimpleTestCase):

    def test_development_tools_not_installed(self):
        self.assertNotIn('debug_toolbar', settings.INSTALLED_APPS)
        self.assertNotIn('debug_toolbar.middleware.DebugToolbarMiddleware', settings.MIDDLEWARE)
