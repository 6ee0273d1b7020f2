"""
Test settings for the Dispatch Dashboard
Fast, isolated testing environment. The Dispatch API is always mocked.
"""

from .base import *  # noqa: F403

DEBUG = False

SECRET_KEY = "django-test-key-not-secure"
ALLOWED_HOSTS = ["testserver", "localhost", "127.0.0.1"]

DISPATCH_API_URL = "https://api.dispatch.test/v1"
DISPATCH_API_TIMEOUT = 5
DISPATCH_API_KEY = "sk_test_support_key"
DISPATCH_SUPPORT_BRAND_ID = "brand-support"

CACHES = {
    "default": {
        "BACKEND": "django.core.cache.backends.locmem.LocMemCache",
        "LOCATION": "test-cache",
    }
}

SESSION_COOKIE_SECURE = False
CSRF_COOKIE_SECURE = False

# No jitter so revalidation timing is deterministic
SESSION_REVALIDATE_JITTER = 0

LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "handlers": {
        "null": {
            "class": "logging.NullHandler",
        },
    },
    "root": {
        "handlers": ["null"],
        "level": "CRITICAL",
    },
}

TESTING = True
