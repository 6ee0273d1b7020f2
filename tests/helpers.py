"""
Shared helpers for tests: canned Dispatch API responses.
"""

from typing import Any
from unittest.mock import Mock

from django.conf import settings
from django.contrib.messages.storage.fallback import FallbackStorage
from django.contrib.sessions.backends.cache import SessionStore
from django.test import RequestFactory

from apps.users.middleware import store_dispatch_login
from apps.users.schemas import DispatchSession


def make_response(status_code: int = 200, payload: Any = None) -> Mock:
    """A `requests.Response` stand-in carrying a JSON payload."""
    response = Mock()
    response.status_code = status_code
    response.content = b'' if payload is None else b'{}'
    if payload is None:
        response.json.side_effect = ValueError("No JSON")
    else:
        response.json.return_value = payload
    return response


def make_session(**overrides: Any) -> DispatchSession:
    data = {
        'customer_id': 'cust-1',
        'email': 'agent@example.com',
        'organization_id': 'org-1',
        'org_role': 'owner',
        'connected': True,
        'expires_at': None,
    }
    data.update(overrides)
    return DispatchSession(**data)


def signed_in_client(client: Any, token: str = 'session-token', session: DispatchSession | None = None) -> Any:
    """Put a freshly validated Dispatch login into a django.test Client session."""
    request = RequestFactory().get('/')
    request.session = client.session
    store_dispatch_login(request, token, session or make_session())
    request.session.save()
    client.cookies[settings.SESSION_COOKIE_NAME] = request.session.session_key
    return client


def session_request(path: str = '/', method: str = 'get', **kwargs: Any) -> Any:
    """RequestFactory request with a cache session and message storage attached."""
    request = getattr(RequestFactory(), method)(path, **kwargs)
    request.session = SessionStore()
    request.session.create()
    request._messages = FallbackStorage(request)
    return request


MOCK_SESSION_RESPONSE = {
    'valid': True,
    'customerId': 'cust-1',
    'email': 'agent@example.com',
    'organizationId': 'org-1',
    'orgRole': 'owner',
    'connected': True,
    'expiresAt': '2030-01-01T00:00:00Z',
}

MOCK_TICKET_RESPONSE = {
    'id': 'tkt-1',
    'brandId': 'brand-1',
    'title': 'Printer on fire',
    'ticketNumber': 42,
    'status': 'open',
    'priority': 'high',
    'commentCount': 1,
    'createdAt': '2025-01-01T10:00:00Z',
    'updatedAt': '2025-01-01T10:00:00Z',
}
