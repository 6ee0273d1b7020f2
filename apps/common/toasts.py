"""
Toast helpers: surface API outcomes to the user through the messages framework.
"""

import logging

from django.contrib import messages
from django.http import HttpRequest
from django.utils.translation import gettext_lazy as _

from apps.api_client.errors import KnownError, classify_error
from apps.api_client.services import DispatchAPIError

logger = logging.getLogger(__name__)

KNOWN_ERROR_MESSAGES: dict[KnownError, str] = {
    KnownError.CUSTOMER_NOT_FOUND: _("Customer not found."),
    KnownError.ALREADY_SUBMITTED: _("Feedback was already submitted."),
    KnownError.EXPIRED: _("This link has expired."),
    KnownError.NOT_IN_ORGANIZATION: _("Connect your account to an organization to continue."),
    KnownError.NOT_FOUND: _("The requested item no longer exists."),
    KnownError.UNAUTHORIZED: _("Your session has expired. Please sign in again."),
}


def toast_api_error(request: HttpRequest, error: DispatchAPIError, fallback: str | None = None) -> KnownError:
    """Queue an error toast for a failed API call and return its classification."""
    kind = classify_error(error)
    text = KNOWN_ERROR_MESSAGES.get(kind) or fallback or error.message or _("Something went wrong. Please try again.")
    messages.error(request, text)
    logger.info(f"🔔 [Toast] error ({kind.value}): {error.message}")
    return kind


def toast_success(request: HttpRequest, text: str) -> None:
    messages.success(request, text)
