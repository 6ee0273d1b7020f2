"""
Per-session notification poll state, kept in the Django cache.

Each dashboard session has three independent pollers (global, current brand,
mentions); each remembers what it saw last time so the next poll can diff.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field

from django.conf import settings
from django.core.cache import cache
from django.http import HttpRequest

from apps.notifications.snapshots import TicketSnapshot

logger = logging.getLogger(__name__)

SCOPE_GLOBAL = 'global'
SCOPE_BRAND = 'brand'
SCOPE_MENTIONS = 'mentions'
SCOPES = (SCOPE_GLOBAL, SCOPE_BRAND, SCOPE_MENTIONS)

TICKETS_VERSION_SCOPE = 'tickets-version'


@dataclass
class PollState:
    first_load: bool = True
    snapshots: dict[str, TicketSnapshot] = field(default_factory=dict)
    seen_ids: set[str] = field(default_factory=set)
    brand_id: str | None = None
    last_polled_at: float | None = None

    def seconds_until_due(self, interval: int, now: float | None = None) -> int:
        """0 when a poll may run, otherwise how long the caller should wait."""
        if self.last_polled_at is None:
            return 0
        now = time.time() if now is None else now
        remaining = interval - (now - self.last_polled_at)
        return max(0, int(remaining + 0.999))

    def mark_polled(self, now: float | None = None) -> None:
        self.last_polled_at = time.time() if now is None else now


class PollStateStore:
    """Loads and saves PollState for one Django session."""

    def __init__(self, session_key: str, ttl: int | None = None) -> None:
        self.session_key = session_key
        self.ttl = ttl if ttl is not None else settings.NOTIFICATION_STATE_TTL

    @classmethod
    def for_request(cls, request: HttpRequest) -> PollStateStore:
        if not request.session.session_key:
            request.session.save()
        return cls(request.session.session_key)

    def key(self, scope: str) -> str:
        return f"notifications:{self.session_key}:{scope}"

    def load(self, scope: str) -> PollState:
        state = cache.get(self.key(scope))
        return state if isinstance(state, PollState) else PollState()

    def save(self, scope: str, state: PollState) -> None:
        cache.set(self.key(scope), state, timeout=self.ttl)

    def reset(self) -> None:
        cache.delete_many([self.key(scope) for scope in SCOPES])
        logger.debug(f"🔄 [Notifications] Poll state reset for session {self.session_key[:8]}")

    # ---- ticket list version, bumped whenever a poll sees changes ----

    def tickets_version(self) -> int:
        return cache.get(self.key(TICKETS_VERSION_SCOPE), 0)

    def bump_tickets_version(self) -> int:
        key = self.key(TICKETS_VERSION_SCOPE)
        if cache.add(key, 1, timeout=self.ttl):
            return 1
        try:
            return cache.incr(key)
        except ValueError:
            # Expired between add() and incr()
            cache.set(key, 1, timeout=self.ttl)
            return 1


def reset_poll_states(request: HttpRequest) -> None:
    """Forget every poller's snapshot for this session (sign-out, organization switch)."""
    session_key = request.session.session_key
    if session_key:
        PollStateStore(session_key).reset()
