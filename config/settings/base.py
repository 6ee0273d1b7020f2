"""
Django settings for the Dispatch Dashboard - stateless front service for the Dispatch Tickets API.
"""

import os
from pathlib import Path
from typing import Any

# ===============================================================================
# CORE DJANGO SETTINGS
# ===============================================================================

BASE_DIR = Path(__file__).resolve().parent.parent.parent

# Application definition - dashboard apps only
DJANGO_APPS: list[str] = [
    "django.contrib.sessions",  # Session framework (cache-only)
    "django.contrib.messages",  # Toast notifications
    "django.contrib.staticfiles",
]

THIRD_PARTY_APPS: list[str] = [
    "django_extensions",
    "rest_framework",
]

LOCAL_APPS: list[str] = [
    "apps.common",  # Middleware, decorators, logging utilities
    "apps.api_client",  # Dispatch API client and error taxonomy
    "apps.users",  # Session/auth provider (magic link, org switch)
    "apps.notifications",  # Ticket and mention pollers
    "apps.tickets",  # Tickets, comments, watchers, audit logs, dashboard stats
    "apps.brands",  # Brands, customers, companies, statuses
    "apps.team",  # Team members, organization, API keys
    "apps.feature_requests",  # Feature request voting
    "apps.feedback",  # Public CSAT rating by token
    "apps.support",  # Support portal token exchange
    "apps.ecommerce",  # Ecommerce stores and orders
]

INSTALLED_APPS: list[str] = DJANGO_APPS + THIRD_PARTY_APPS + LOCAL_APPS

MIDDLEWARE: list[str] = [
    "django.middleware.security.SecurityMiddleware",
    "django.contrib.sessions.middleware.SessionMiddleware",  # Cache-only sessions
    "django.middleware.common.CommonMiddleware",
    "django.middleware.csrf.CsrfViewMiddleware",
    "django.contrib.messages.middleware.MessageMiddleware",
    "django.middleware.clickjacking.XFrameOptionsMiddleware",
    # Custom middleware last
    "apps.common.middleware.RequestIDMiddleware",
    "apps.common.middleware.SecurityHeadersMiddleware",
    "apps.users.middleware.DispatchSessionMiddleware",  # Session validation against the API
]

ROOT_URLCONF = "config.urls"

TEMPLATES = [
    {
        "BACKEND": "django.template.backends.django.DjangoTemplates",
        "DIRS": [],
        "APP_DIRS": True,
        "OPTIONS": {
            "context_processors": [
                "django.template.context_processors.debug",
                "django.template.context_processors.request",
                "django.contrib.messages.context_processors.messages",
                "apps.common.context_processors.dashboard_context",
            ],
        },
    },
]

WSGI_APPLICATION = "config.wsgi.application"

# ===============================================================================
# DATABASE - NEVER USED (DJANGO REQUIREMENT ONLY)
# ===============================================================================

# Dashboard keeps no business data: everything lives behind the Dispatch API
DATABASES: dict[str, dict[str, Any]] = {
    "default": {
        "ENGINE": "django.db.backends.sqlite3",
        "NAME": ":memory:",
    }
}

# ===============================================================================
# CACHE AND SESSIONS
# ===============================================================================

CACHES = {
    "default": {
        "BACKEND": "django.core.cache.backends.locmem.LocMemCache",
        "LOCATION": "dispatch-dashboard-cache",
    }
}

SESSION_ENGINE = "django.contrib.sessions.backends.cache"
SESSION_CACHE_ALIAS = "default"

MESSAGE_STORAGE = "django.contrib.messages.storage.session.SessionStorage"

# ===============================================================================
# DISPATCH API CONFIGURATION
# ===============================================================================

DISPATCH_API_URL = os.environ.get("DISPATCH_API_URL", "https://dispatch-tickets-api.onrender.com/v1")
DISPATCH_API_TIMEOUT = int(os.environ.get("DISPATCH_API_TIMEOUT", "30"))

# Support portal: server-side API key used to mint portal tokens for the support brand
DISPATCH_API_KEY = os.environ.get("DISPATCH_API_KEY")
DISPATCH_SUPPORT_BRAND_ID = os.environ.get("DISPATCH_SUPPORT_BRAND_ID")

# ===============================================================================
# NOTIFICATION POLLING
# ===============================================================================

NOTIFICATION_POLL_INTERVAL_GLOBAL = 120  # seconds, all brands
NOTIFICATION_POLL_INTERVAL_BRAND = 30  # seconds, single brand
MENTION_POLL_INTERVAL = 60  # seconds
NOTIFICATION_STATE_TTL = 24 * 60 * 60  # Poll state kept for a day of inactivity
BRANDS_CACHE_TTL = 5 * 60

# ===============================================================================
# SESSION CONFIGURATION 🔐
# ===============================================================================

SESSION_COOKIE_AGE_DEFAULT = 24 * 60 * 60  # 24 hours
SESSION_COOKIE_NAME = "dispatch_session"
SESSION_SAVE_EVERY_REQUEST = False

# Revalidation of the API session token (seconds)
SESSION_REVALIDATE_EVERY = 600
SESSION_REVALIDATE_JITTER = 120
SESSION_REFRESH_CACHE_TTL = 15
SESSION_FAIL_OPEN_GRACE = 6 * 60 * 60  # Keep serving cached session during API outages

# ===============================================================================
# INTERNATIONALIZATION
# ===============================================================================

LANGUAGE_CODE = "en"
TIME_ZONE = "UTC"
USE_I18N = True
USE_TZ = True

# ===============================================================================
# STATIC FILES
# ===============================================================================

STATIC_URL = "/static/"
STATIC_ROOT = BASE_DIR / "staticfiles"

# ===============================================================================
# SECURITY SETTINGS
# ===============================================================================

# 🔒 SECURITY: No fallback secrets in base config - must be set in environment
SECRET_KEY = os.environ.get("SECRET_KEY")

DEBUG = os.environ.get("DEBUG", "True").lower() == "true"

ALLOWED_HOSTS = ["localhost", "127.0.0.1"]

SESSION_COOKIE_SECURE = not DEBUG
SESSION_COOKIE_HTTPONLY = True
SESSION_COOKIE_SAMESITE = "Lax"
CSRF_COOKIE_SECURE = not DEBUG
CSRF_COOKIE_HTTPONLY = False  # ✅ Allow JS access for AJAX
CSRF_COOKIE_SAMESITE = "Lax"

SECURE_CONTENT_TYPE_NOSNIFF = True
SECURE_REFERRER_POLICY = "strict-origin-when-cross-origin"
X_FRAME_OPTIONS = "DENY"

# ===============================================================================
# REST FRAMEWORK
# ===============================================================================

REST_FRAMEWORK = {
    "DEFAULT_RENDERER_CLASSES": ["rest_framework.renderers.JSONRenderer"],
    "DEFAULT_PARSER_CLASSES": ["rest_framework.parsers.JSONParser"],
    "DEFAULT_AUTHENTICATION_CLASSES": ["apps.common.authentication.DispatchSessionAuthentication"],
    "DEFAULT_PERMISSION_CLASSES": ["rest_framework.permissions.IsAuthenticated"],
    "UNAUTHENTICATED_USER": None,
    "EXCEPTION_HANDLER": "apps.common.exceptions.dispatch_exception_handler",
}

# ===============================================================================
# LOGGING CONFIGURATION
# ===============================================================================

LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "unified": {
            "()": "colorlog.ColoredFormatter",
            "format": "{asctime} {log_color}{levelname:<8}{reset} {service_name} {name:<40} {message} [{request_id}]",
            "datefmt": "%Y-%m-%d %H:%M:%S",
            "style": "{",
            "log_colors": {
                "DEBUG": "cyan",
                "INFO": "green",
                "WARNING": "yellow",
                "ERROR": "red",
                "CRITICAL": "bold_red",
            },
        },
    },
    "filters": {
        "add_request_id": {
            "()": "apps.common.logging.RequestIDFilter",
        },
        "add_service_name": {
            "()": "apps.common.logging.ServiceNameFilter",
            "service_name": "DASH",
        },
        "redact_secrets": {
            "()": "apps.common.logging.SensitiveDataFilter",
        },
    },
    "handlers": {
        "console": {
            "class": "logging.StreamHandler",
            "formatter": "unified",
            "filters": ["add_request_id", "add_service_name", "redact_secrets"],
        },
    },
    "root": {
        "handlers": ["console"],
        "level": "INFO",
    },
    "loggers": {
        "django": {
            "handlers": ["console"],
            "level": os.environ.get("DJANGO_LOG_LEVEL", "INFO"),
            "propagate": False,
        },
        "apps": {
            "handlers": ["console"],
            "level": "DEBUG" if DEBUG else "INFO",
            "propagate": False,
        },
    },
}

DEFAULT_AUTO_FIELD = "django.db.models.BigAutoField"
