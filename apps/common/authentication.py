"""
REST framework authentication backed by the Dispatch session.

DispatchSessionMiddleware validates the bearer token stored in the Django
session and attaches the resulting DispatchSession to the request; API views
reuse that instead of authenticating again.
"""

from typing import Any

from rest_framework.authentication import SessionAuthentication
from rest_framework.request import Request


class DispatchSessionAuthentication(SessionAuthentication):
    """Authenticate DRF requests from the middleware-validated Dispatch session."""

    def authenticate(self, request: Request) -> tuple[Any, str] | None:
        django_request = request._request
        session = getattr(django_request, 'dispatch_session', None)
        token = getattr(django_request, 'dispatch_token', None)
        if session is None or not token:
            return None

        # Cookie-carried credentials, so unsafe methods still need a CSRF token
        self.enforce_csrf(request)
        return session, token

    def authenticate_header(self, request: Request) -> str:
        # Makes DRF answer 401 (not 403) for anonymous callers
        return 'Session realm="dispatch"'
