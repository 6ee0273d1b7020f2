# ===============================================================================
# DASHBOARD TEST CONFIGURATION - DATABASE ACCESS BLOCKER ⚠️
# ===============================================================================
# The dashboard is stateless: everything it shows comes from the Dispatch API,
# so any database access during tests is a bug.

from unittest.mock import patch

import pytest
from django.core.cache import cache
from django.core.exceptions import ImproperlyConfigured
from django.db import DEFAULT_DB_ALIAS, connections

# ===============================================================================
# DATABASE ACCESS PREVENTION 🚫
# ===============================================================================

@pytest.fixture(autouse=True)
def block_database_access():
    """Fail loudly if any test reaches for the database."""

    def blocked_ensure_connection():
        raise ImproperlyConfigured(
            "🚨 Dashboard attempted database access! All data must come from the Dispatch API."
        )

    def blocked_cursor():
        raise ImproperlyConfigured(
            "🚨 Dashboard attempted to create a database cursor! All data must come from the Dispatch API."
        )

    with patch.object(connections[DEFAULT_DB_ALIAS], 'ensure_connection', blocked_ensure_connection), \
         patch.object(connections[DEFAULT_DB_ALIAS], 'cursor', blocked_cursor):
        yield


@pytest.fixture(autouse=True)
def clear_cache():
    """Sessions, poll state and refresh results all live in the cache."""
    cache.clear()
    yield
    cache.clear()

