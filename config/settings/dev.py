"""
Development settings for the Dispatch Dashboard
"""

import os
import sys

from .base import *  # noqa: F403

# Debug mode
DEBUG = True

# Allow all hosts in development
ALLOWED_HOSTS = ["*"]

SECRET_KEY = os.environ.get("SECRET_KEY", "dev-only-secret-key-change-in-production")

# ===============================================================================
# DEBUG TOOLBAR
# ===============================================================================

MIDDLEWARE.insert(1, "debug_toolbar.middleware.DebugToolbarMiddleware")  # noqa: F405
INSTALLED_APPS += ["debug_toolbar"]  # noqa: F405

INTERNAL_IPS = [
    "127.0.0.1",
    "localhost",
]

DEBUG_TOOLBAR_CONFIG = {
    "SHOW_TOOLBAR_CALLBACK": lambda request: DEBUG,
    "SHOW_COLLAPSED": True,
    "IS_RUNNING_TESTS": False,
}

# Disable debug toolbar during tests
is_testing = (
    "test" in sys.argv
    or "pytest" in sys.modules
    or os.environ.get("PYTEST_CURRENT_TEST")
)

if is_testing:
    INSTALLED_APPS = [app for app in INSTALLED_APPS if app != "debug_toolbar"]  # noqa: F405
    MIDDLEWARE = [mw for mw in MIDDLEWARE if "debug_toolbar" not in mw]  # noqa: F405

# Cookies over plain HTTP locally
SESSION_COOKIE_SECURE = False
CSRF_COOKIE_SECURE = False

# Faster feedback loop while developing
NOTIFICATION_POLL_INTERVAL_GLOBAL = int(os.environ.get("NOTIFICATION_POLL_INTERVAL_GLOBAL", "30"))

# Development logging
LOGGING["root"]["level"] = "DEBUG"  # noqa: F405
LOGGING["loggers"]["apps"]["level"] = "DEBUG"  # noqa: F405
