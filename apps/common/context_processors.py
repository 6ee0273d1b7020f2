"""
Context processors for the Dispatch Dashboard
"""

from typing import Any

from django.conf import settings
from django.http import HttpRequest


def dashboard_context(request: HttpRequest) -> dict[str, Any]:
    """Expose the current Dispatch session and polling cadence to templates."""
    session = getattr(request, "dispatch_session", None)
    return {
        "dashboard_version": "1.0.0",
        "dispatch_session": session,
        "user_is_authenticated": session is not None,
        "user_is_connected": bool(session and session.connected),
        "notification_poll_interval": settings.NOTIFICATION_POLL_INTERVAL_GLOBAL,
        "mention_poll_interval": settings.MENTION_POLL_INTERVAL,
    }
