"""
Dispatch Session Middleware
Two-tier validation with jitter, single-flight refresh and fail-open on API outages.
"""

from __future__ import annotations

import logging
import random
from datetime import datetime, timedelta
from typing import Any

from django.conf import settings
from django.http import HttpRequest, HttpResponse, JsonResponse
from django.shortcuts import redirect
from django.utils import timezone as django_timezone
from django.utils.http import urlencode

from apps.api_client.services import SESSION_TOKEN_KEY, DispatchAPIError, SessionExpiredError
from apps.common.decorators import wants_json
from apps.common.logging import set_request_context
from apps.users.schemas import DispatchSession
from apps.users.services import SessionRefresher

logger = logging.getLogger(__name__)

# Django session key holding the last validated DispatchSession as a dict
SESSION_DATA_KEY = 'dispatch_session'


def store_dispatch_login(request: HttpRequest, token: str, session: DispatchSession) -> None:
    """Persist a freshly verified sign-in into the Django session."""
    request.session.cycle_key()
    now = django_timezone.now()
    request.session[SESSION_TOKEN_KEY] = token
    request.session[SESSION_DATA_KEY] = session.to_dict()
    request.session['authenticated_at'] = now.isoformat()
    request.session['validated_at'] = now.isoformat()
    request.session['next_validate_at'] = next_validation_time(now).isoformat()


def replace_session_token(request: HttpRequest, token: str, session: DispatchSession) -> None:
    """Swap the bearer token (organization switch) without restarting the session lifetime."""
    now = django_timezone.now()
    request.session[SESSION_TOKEN_KEY] = token
    request.session[SESSION_DATA_KEY] = session.to_dict()
    request.session['validated_at'] = now.isoformat()
    request.session['next_validate_at'] = next_validation_time(now).isoformat()


def next_validation_time(now: datetime) -> datetime:
    """Next revalidation time, jittered so sessions do not revalidate in lockstep."""
    jitter_seconds = random.randint(0, settings.SESSION_REVALIDATE_JITTER)  # noqa: S311
    return now + timedelta(seconds=settings.SESSION_REVALIDATE_EVERY + jitter_seconds)


class DispatchSessionMiddleware:
    """
    Authenticate every non-public request against the Dispatch API.

    - Tier 1: bearer token present in the Django session (zero latency)
    - Tier 2: jittered periodic revalidation through SessionRefresher, so
      concurrent requests for one token share a single `/auth/session` call
    - Fail-open: when the API is unreachable, a session validated within
      SESSION_FAIL_OPEN_GRACE keeps working
    - A 401 from any API call made by a view clears the token (process_exception)
    """

    PUBLIC_URLS = [
        '/login/',
        '/auth/verify/',
        '/auth/callback/',
        '/rate/',
        '/static/',
        '/status/',
        '/favicon.ico',
    ]

    # Reachable by signed-in users that have not connected an organization yet
    CONNECT_URLS = [
        '/connect/',
        '/logout/',
        '/session/',
    ]

    def __init__(self, get_response: Any) -> None:
        self.get_response = get_response
        self.refresher = SessionRefresher()

    def __call__(self, request: HttpRequest) -> HttpResponse:
        request.dispatch_session = None  # type: ignore[attr-defined]
        request.dispatch_token = None  # type: ignore[attr-defined]

        if self.is_public_url(request.path):
            return self.get_response(request)

        token = request.session.get(SESSION_TOKEN_KEY)
        if not token:
            logger.debug("🔒 [Auth] No session token, authentication required")
            return self.unauthenticated(request)

        if not self._is_session_age_valid(request):
            request.session.flush()
            return self.unauthenticated(request)

        session = self.validate_with_timing(request, token)
        if session is None:
            logger.warning("⚠️ [Auth] Session validation failed, clearing session")
            request.session.flush()
            return self.unauthenticated(request)

        request.dispatch_session = session  # type: ignore[attr-defined]
        request.dispatch_token = token  # type: ignore[attr-defined]
        set_request_context(user_email=session.email)

        if not session.connected and not self.is_connect_url(request.path):
            if wants_json(request):
                return JsonResponse(
                    {'error': 'Organization connection required', 'connect_url': '/connect/'}, status=403
                )
            return redirect('/connect/')

        return self.get_response(request)

    def process_exception(self, request: HttpRequest, exception: Exception) -> HttpResponse | None:
        if isinstance(exception, SessionExpiredError):
            logger.warning(f"⚠️ [Auth] API rejected session token on {request.path}, signing out")
            token = request.session.get(SESSION_TOKEN_KEY)
            if token:
                self.refresher.invalidate(token)
            request.session.flush()
            return self.unauthenticated(request)
        return None

    def is_public_url(self, path: str) -> bool:
        return any(path.startswith(public_url) for public_url in self.PUBLIC_URLS)

    def is_connect_url(self, path: str) -> bool:
        return any(path.startswith(url) for url in self.CONNECT_URLS)

    def unauthenticated(self, request: HttpRequest) -> HttpResponse:
        if wants_json(request):
            return JsonResponse({'error': 'Authentication required'}, status=401)
        return self.redirect_to_login(request)

    def redirect_to_login(self, request: HttpRequest) -> HttpResponse:
        """Redirect to login preserving the originally requested URL."""
        login_url = '/login/'
        if request.path and request.path != '/':
            login_url = f"{login_url}?{urlencode({'next': request.get_full_path()})}"
        return redirect(login_url)

    def validate_with_timing(self, request: HttpRequest, token: str) -> DispatchSession | None:
        """
        Return the session for `token`, revalidating only when due.

        Session fields:
        - dispatch_session: last validated DispatchSession (dict)
        - validated_at: last successful validation
        - next_validate_at: when to revalidate (with jitter)
        """
        now = django_timezone.now()
        cached = request.session.get(SESSION_DATA_KEY)
        next_validate_at = self._get_session_datetime(request, 'next_validate_at')

        if cached and next_validate_at and now <= next_validate_at:
            return DispatchSession.from_dict(cached)

        try:
            session = self.refresher.refresh(token)
        except DispatchAPIError as e:
            return self._fail_open(request, cached, now, e)

        if session is None:
            return None

        request.session[SESSION_DATA_KEY] = session.to_dict()
        request.session['validated_at'] = now.isoformat()
        request.session['next_validate_at'] = next_validation_time(now).isoformat()
        logger.debug(f"✅ [Auth] Session for {session.email} revalidated")
        return session

    def _fail_open(self, request: HttpRequest, cached: dict | None, now: datetime,
                   error: DispatchAPIError) -> DispatchSession | None:
        logger.error(f"🔥 [Auth] Dispatch API error during session validation: {error}")
        validated_at = self._get_session_datetime(request, 'validated_at')
        if not cached or not validated_at:
            return None
        if (now - validated_at).total_seconds() > settings.SESSION_FAIL_OPEN_GRACE:
            logger.warning("🚨 [Auth] Session past fail-open grace window, forcing sign-in")
            return None
        logger.info("🛡️ [Auth] Failing open with last validated session due to API unavailability")
        return DispatchSession.from_dict(cached)

    def _get_session_datetime(self, request: HttpRequest, key: str) -> datetime | None:
        value = request.session.get(key)
        if value:
            try:
                return datetime.fromisoformat(value.replace('Z', '+00:00'))
            except (ValueError, AttributeError):
                pass
        return None

    def _is_session_age_valid(self, request: HttpRequest) -> bool:
        authenticated_at = self._get_session_datetime(request, 'authenticated_at')
        if authenticated_at is None:
            logger.warning("⚠️ [Auth] No authenticated_at timestamp in session")
            return False

        session_age = (django_timezone.now() - authenticated_at).total_seconds()
        if session_age > settings.SESSION_COOKIE_AGE_DEFAULT:
            logger.warning(f"⏰ [Auth] Session exceeded its lifetime ({session_age:.0f}s), forcing sign-in")
            return False
        return True
