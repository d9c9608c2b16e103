"""
PATH: backend/settings/test.py

TEST SETTINGS
Used by pytest-django (see pyproject.toml) and `manage.py test --settings=backend.settings.test`.
"""

from __future__ import annotations

from .base import *  # noqa: F403
from .base import REST_FRAMEWORK

DEBUG = False

PASSWORD_HASHERS = ["django.contrib.auth.hashers.MD5PasswordHasher"]

DATABASES = {
    "default": {
        "ENGINE": "django.db.backends.sqlite3",
        "NAME": ":memory:",
    }
}

REST_FRAMEWORK = {
    **REST_FRAMEWORK,
    "DEFAULT_THROTTLE_CLASSES": (),
}

ACCOUNTING_ENFORCE_PERIOD_LOCK = True
DEFAULT_INVOICE_DUE_DAYS = 30
