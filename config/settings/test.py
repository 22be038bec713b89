"""Test settings for the hotel booking engine.

Used by pytest-django. Runs against a file-backed SQLite database unless
``DB_ENGINE`` points elsewhere and executes Celery tasks inline.

SQLite transactions start with ``BEGIN IMMEDIATE`` so concurrent writers
queue on the database lock instead of failing on lock upgrade; the
threaded reservation tests rely on it.
"""

from .base import *  # noqa: F401,F403

DEBUG = False

SECRET_KEY = 'test-secret-key'

if DATABASES['default']['ENGINE'] == 'django.db.backends.sqlite3':  # noqa: F405
    DATABASES['default']['OPTIONS'] = {'transaction_mode': 'IMMEDIATE', 'timeout': 20}  # noqa: F405
    DATABASES['default']['TEST'] = {'NAME': str(BASE_DIR / 'test_db.sqlite3')}  # noqa: F405

PASSWORD_HASHERS = ['django.contrib.auth.hashers.MD5PasswordHasher']

CELERY_TASK_ALWAYS_EAGER = True
CELERY_TASK_EAGER_PROPAGATES = True
CELERY_BROKER_URL = 'memory://'
CELERY_RESULT_BACKEND = 'cache+memory://'

BOOKING_ENGINE = {
    **BOOKING_ENGINE,  # noqa: F405
    'PROVISIONAL_HOLD_MINUTES': None,
    'NOTIFICATION_WEBHOOK_URL': '',
}
