"""
Django test settings for task_compliance project.

Used by pytest-django (see [tool.pytest.ini_options] in pyproject.toml).
"""

from .base import *

DEBUG = False

ALLOWED_HOSTS = ['testserver', 'localhost']

DATABASES = {
    'default': {
        'ENGINE': 'django.db.backends.sqlite3',
        'NAME': ':memory:',
    }
}

# Deadlines in tests are written in UTC
TIME_ZONE = 'UTC'

# Hashing speed matters more than strength here
PASSWORD_HASHERS = [
    'django.contrib.auth.hashers.MD5PasswordHasher',
]

DUE_SOON_DAYS = 2
TOP_REASONS_LIMIT = 5
RANKING_LIMIT = 8
DEADLINE_END_OF_DAY = True

LOGGING = {
    'version': 1,
    'disable_existing_loggers': False,
    'handlers': {
        'null': {
            'class': 'logging.NullHandler',
        },
    },
    'root': {
        'handlers': ['null'],
        'level': 'WARNING',
    },
}
