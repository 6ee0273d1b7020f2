"""
Authentication services for the Dispatch Dashboard.

The Dispatch API owns identity: the dashboard only exchanges magic-link tokens
for a bearer session token and asks `/auth/session` who that token belongs to.
"""

from __future__ import annotations

import hashlib
import logging
import threading
import time
import weakref
from dataclasses import dataclass

from django.conf import settings
from django.core.cache import cache

from apps.api_client.errors import KnownError, classify_message
from apps.api_client.services import DispatchAPIClient, DispatchAPIError, SessionExpiredError
from apps.users.schemas import DispatchSession, Organization

logger = logging.getLogger(__name__)


@dataclass
class VerifiedLogin:
    """Result of a successful magic-link verification"""

    session_token: str
    session: DispatchSession


class AuthService:
    """
    Wraps the `/auth/*` endpoints.

    Methods that take a session token build their own authenticated client;
    magic-link and verify calls go through a public client.
    """

    def __init__(self, client_class: type[DispatchAPIClient] = DispatchAPIClient) -> None:
        self.client_class = client_class

    def _client(self, token: str | None = None) -> DispatchAPIClient:
        return self.client_class(token=token)

    # ===============================================================================
    # MAGIC LINK SIGN-IN
    # ===============================================================================

    def send_magic_link(self, email: str) -> bool:
        try:
            data = self._client().post('/auth/magic-link', {'email': email})
        except DispatchAPIError as e:
            logger.warning(f"⚠️ [Auth] Magic link request failed: {e}")
            return False
        sent = bool(data) and data.get('success') is True
        if sent:
            logger.info("📧 [Auth] Magic link sent")
        return sent

    def verify_token(self, token: str) -> VerifiedLogin | None:
        """Exchange a magic-link token for a session token."""
        try:
            data = self._client().post('/auth/verify', {'token': token})
        except DispatchAPIError as e:
            logger.warning(f"⚠️ [Auth] Magic link verification failed: {e}")
            return None

        if not data or not data.get('success') or not data.get('sessionToken'):
            return None

        logger.info(f"✅ [Auth] Verified sign-in for {data.get('email')}")
        return VerifiedLogin(session_token=data['sessionToken'], session=DispatchSession.from_api(data))

    def connect_api_key(self, session_token: str, api_key: str) -> bool:
        """Attach the signed-in user to the organization owning `api_key`."""
        try:
            data = self._client(session_token).post('/auth/connect', {'apiKey': api_key})
        except SessionExpiredError:
            raise
        except DispatchAPIError as e:
            logger.warning(f"⚠️ [Auth] API key connection failed: {e}")
            return False
        return bool(data) and bool(data.get('success'))

    # ===============================================================================
    # SESSION LOOKUP
    # ===============================================================================

    def fetch_session(self, session_token: str) -> DispatchSession | None:
        """
        Resolve a session token, propagating transport failures.

        Returns None when the API rejects the token. A user that authenticated
        but belongs to no organization gets an unconnected session so the
        connect flow can run.
        """
        try:
            data = self._client(session_token).get('/auth/session')
        except SessionExpiredError as e:
            if classify_message(e.message) is KnownError.NOT_IN_ORGANIZATION:
                logger.info("🔗 [Auth] Session has no organization, connect required")
                return DispatchSession.unconnected_from_token(session_token)
            return None
        except DispatchAPIError as e:
            if e.status_code is None:
                raise
            logger.warning(f"⚠️ [Auth] Session lookup rejected: {e}")
            return None

        if not data or not data.get('valid'):
            return None
        return DispatchSession.from_api(data)

    def refresh_session(self, session_token: str) -> DispatchSession | None:
        """Like fetch_session, but an unreachable API also counts as no session."""
        try:
            return self.fetch_session(session_token)
        except DispatchAPIError as e:
            logger.error(f"🔥 [Auth] Session refresh failed: {e}")
            return None

    # ===============================================================================
    # ORGANIZATIONS
    # ===============================================================================

    def list_organizations(self, session_token: str) -> list[Organization]:
        data = self._client(session_token).get('/auth/organizations') or []
        if isinstance(data, dict):
            data = data.get('data') or data.get('organizations') or []
        return [Organization.from_api(item) for item in data]

    def switch_organization(self, session_token: str, organization_id: str,
                            current_organization_id: str | None = None) -> str:
        """
        Make `organization_id` the active organization for this user.

        Returns the session token to use from now on: the API may issue a new
        one scoped to the target organization.
        """
        if organization_id == current_organization_id:
            return session_token
        data = self._client(session_token).post(
            '/auth/switch-organization', {'organizationId': organization_id}
        ) or {}
        logger.info(f"🏢 [Auth] Switched organization to {organization_id}")
        return data.get('sessionToken') or session_token


# ===============================================================================
# REFRESH DEDUPLICATION
# ===============================================================================

# One lock per token being refreshed; entries vanish once no thread holds them
_token_locks: weakref.WeakValueDictionary[str, threading.Lock] = weakref.WeakValueDictionary()
_token_locks_guard = threading.Lock()


def _token_digest(token: str) -> str:
    return hashlib.sha256(token.encode()).hexdigest()


def _lock_for(digest: str) -> threading.Lock:
    with _token_locks_guard:
        lock = _token_locks.get(digest)
        if lock is None:
            lock = threading.Lock()
            _token_locks[digest] = lock
        return lock


class SessionRefresher:
    """
    Single-flight wrapper around AuthService.fetch_session.

    Concurrent refreshes of one token share a single `/auth/session` call:
    threads in this process serialize on a per-token lock, other processes
    see the cache flight key and wait for the cached result. Successful lookups are
    cached briefly so followers reuse them; failures are never cached.
    """

    FLIGHT_TIMEOUT = 30
    FLIGHT_WAIT = 2.0
    FLIGHT_POLL = 0.05

    def __init__(self, auth_service: AuthService | None = None, cache_ttl: int | None = None) -> None:
        self.auth_service = auth_service or AuthService()
        self.cache_ttl = cache_ttl if cache_ttl is not None else settings.SESSION_REFRESH_CACHE_TTL

    @staticmethod
    def result_key(token: str) -> str:
        return f"session-refresh:{_token_digest(token)}:result"

    @staticmethod
    def flight_key(token: str) -> str:
        return f"session-refresh:{_token_digest(token)}"

    def refresh(self, token: str) -> DispatchSession | None:
        result_key = self.result_key(token)
        cached = cache.get(result_key)
        if cached is not None:
            return DispatchSession.from_dict(cached)

        digest = _token_digest(token)
        with _lock_for(digest):
            # Another thread may have finished while we waited
            cached = cache.get(result_key)
            if cached is not None:
                return DispatchSession.from_dict(cached)

            flight_key = self.flight_key(token)
            if not cache.add(flight_key, time.time(), timeout=self.FLIGHT_TIMEOUT):
                logger.debug("🔄 [Auth] Session refresh already in flight, waiting")
                cached = self._wait_for_result(result_key)
                if cached is not None:
                    return DispatchSession.from_dict(cached)

            try:
                session = self.auth_service.fetch_session(token)
            finally:
                cache.delete(flight_key)

            if session is not None:
                cache.set(result_key, session.to_dict(), timeout=self.cache_ttl)
            return session

    def _wait_for_result(self, result_key: str) -> dict | None:
        deadline = time.monotonic() + self.FLIGHT_WAIT
        while time.monotonic() < deadline:
            time.sleep(self.FLIGHT_POLL)
            cached = cache.get(result_key)
            if cached is not None:
                return cached
        return None

    def invalidate(self, token: str) -> None:
        cache.delete(self.result_key(token))
