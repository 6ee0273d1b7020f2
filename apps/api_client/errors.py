"""
Known Dispatch API error classification.

The API does not expose a structured error taxonomy; a handful of messages
are recognized by substring so the UI can react to them specifically.
"""

from __future__ import annotations

from enum import Enum

from apps.api_client.services import DispatchAPIError

HTTP_UNAUTHORIZED = 401
HTTP_NOT_FOUND = 404


class KnownError(str, Enum):
    CUSTOMER_NOT_FOUND = "customer_not_found"
    ALREADY_SUBMITTED = "already_submitted"
    EXPIRED = "expired"
    NOT_IN_ORGANIZATION = "not_in_organization"
    NOT_FOUND = "not_found"
    UNAUTHORIZED = "unauthorized"
    UNKNOWN = "unknown"


# Checked in order; first match wins
_MESSAGE_MARKERS: tuple[tuple[str, KnownError], ...] = (
    ("customer not found", KnownError.CUSTOMER_NOT_FOUND),
    ("already submitted", KnownError.ALREADY_SUBMITTED),
    ("does not belong to an organization", KnownError.NOT_IN_ORGANIZATION),
    ("expired", KnownError.EXPIRED),
)


def classify_message(message: str | None) -> KnownError:
    lowered = (message or "").lower()
    for marker, kind in _MESSAGE_MARKERS:
        if marker in lowered:
            return kind
    return KnownError.UNKNOWN


def classify_error(error: DispatchAPIError) -> KnownError:
    """Map an API failure onto the few cases the dashboard handles specially."""
    kind = classify_message(error.message)
    if kind is not KnownError.UNKNOWN:
        return kind
    if error.status_code == HTTP_NOT_FOUND:
        return KnownError.NOT_FOUND
    if error.status_code == HTTP_UNAUTHORIZED:
        return KnownError.UNAUTHORIZED
    return KnownError.UNKNOWN
