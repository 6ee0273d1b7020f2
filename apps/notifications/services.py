# ===============================================================================
# TICKET NOTIFICATION SERVICES - POLLING, DIFFING, DISPATCH 🔔
# ===============================================================================

"""
Best-effort change notifications built from periodic polls.

Nothing here is pushed by the API: every poll re-reads recent tickets (or
unread mentions), diffs them against the previous poll's snapshot and turns
the differences into toasts. Missed polls simply fold into the next diff.
"""

from __future__ import annotations

import hashlib
import logging
from dataclasses import dataclass, field
from typing import Any

from django.conf import settings
from django.contrib import messages
from django.core.cache import cache
from django.http import HttpRequest

from apps.api_client.schemas import unwrap_list
from apps.api_client.services import DispatchAPIClient, DispatchAPIError, SessionExpiredError
from apps.brands.schemas import Brand
from apps.brands.services import BrandAPIClient
from apps.notifications.schemas import MENTION_TOAST_DURATION_MS, TOAST_DURATION_MS, Mention, Notification
from apps.notifications.snapshots import EventKind, TicketEvent, diff_snapshots, take_snapshot
from apps.notifications.state import PollState
from apps.tickets.schemas import Ticket
from apps.tickets.services import TicketAPIClient

logger = logging.getLogger(__name__)

DESKTOP_PREFERENCE_KEY = 'desktop_notifications_enabled'


@dataclass
class PollResult:
    notifications: list[Notification] = field(default_factory=list)
    changed: bool = False
    seeded: bool = False


# ===============================================================================
# GLOBAL POLLER (ALL BRANDS)
# ===============================================================================

class GlobalTicketPoller:
    """
    Watches recent tickets across every brand the user can access.

    Meant to run once per dashboard session. Comment events are only reported
    when the newest comment was written by the customer, so agents are not
    notified about their own replies.
    """

    TICKETS_PER_BRAND = 20
    CUSTOMER_FALLBACK_NAME = 'Customer'

    def __init__(self, token: str, state: PollState, *, cache_scope: str = '') -> None:
        self.tickets = TicketAPIClient(token=token)
        self.brands = BrandAPIClient(token=token)
        self.state = state
        digest = hashlib.sha256(f"{token}:{cache_scope}".encode()).hexdigest()
        self.brands_cache_key = f"notifications:brands:{digest}"

    def list_brands(self) -> list[Brand]:
        brands = cache.get(self.brands_cache_key)
        if brands is None:
            brands = self.brands.list_brands()
            cache.set(self.brands_cache_key, brands, timeout=settings.BRANDS_CACHE_TTL)
        return brands

    def fetch_recent(self, brands: list[Brand]) -> tuple[list[Ticket], dict[str, str]]:
        """Recent tickets of every brand; a failing brand contributes none."""
        tickets: list[Ticket] = []
        brand_names: dict[str, str] = {}
        for brand in brands:
            brand_names[brand.id] = brand.name
            try:
                page = self.tickets.list_tickets(brand.id, limit=self.TICKETS_PER_BRAND)
            except SessionExpiredError:
                raise
            except DispatchAPIError as e:
                logger.warning(f"⚠️ [Notifications] Skipping brand {brand.id} this poll: {e}")
                continue
            tickets.extend(page.data)
        return tickets, brand_names

    def poll(self) -> PollResult:
        brands = self.list_brands()
        if not brands:
            return PollResult()

        tickets, brand_names = self.fetch_recent(brands)

        if self.state.first_load:
            self.state.first_load = False
            self.state.snapshots = take_snapshot(tickets)
            logger.debug(f"🔔 [Notifications] Seeded global snapshot with {len(tickets)} tickets")
            return PollResult(seeded=True)

        events = diff_snapshots(self.state.snapshots, tickets)
        self.state.snapshots = take_snapshot(tickets)

        notifications = []
        for event in events:
            notification = self.build_notification(event, brand_names)
            if notification is not None:
                notifications.append(notification)

        if events:
            logger.info(f"🔔 [Notifications] {len(events)} ticket changes, {len(notifications)} notifications")
        return PollResult(notifications=notifications, changed=bool(events))

    def build_notification(self, event: TicketEvent, brand_names: dict[str, str]) -> Notification | None:
        ticket = event.ticket
        brand_name = brand_names.get(ticket.brand_id, '')
        prefix = f"[{brand_name}] " if brand_name else ''
        url = f"/brands/{ticket.brand_id}/tickets/{ticket.id}"

        if event.kind is EventKind.NEW:
            return Notification(
                title=f"{prefix}New ticket: {ticket.label}",
                description=ticket.title,
                url=url,
                duration_ms=TOAST_DURATION_MS,
                desktop=True,
            )

        if event.kind is EventKind.COMMENT:
            author = self.customer_reply_author(ticket)
            if author is None:
                return None
            return Notification(
                title=f"{prefix}{ticket.label} reply from {author}",
                description=ticket.title,
                url=url,
                duration_ms=TOAST_DURATION_MS,
                desktop=True,
            )

        # Status changes are toast-only
        return Notification(
            title=f"{prefix}{ticket.label} status changed",
            description=f"{event.old_status} → {ticket.status}",
            url=url,
            duration_ms=TOAST_DURATION_MS,
            desktop=False,
        )

    def customer_reply_author(self, ticket: Ticket) -> str | None:
        """Author name of the newest comment, or None unless a customer wrote it."""
        try:
            comments = self.tickets.list_comments(ticket.brand_id, ticket.id)
        except SessionExpiredError:
            raise
        except DispatchAPIError as e:
            logger.warning(f"⚠️ [Notifications] Could not load comments for {ticket.id}: {e}")
            return None
        if not comments:
            return None
        latest = comments[-1]
        if not latest.is_from_customer:
            return None
        return latest.author_name or self.CUSTOMER_FALLBACK_NAME


# ===============================================================================
# SINGLE BRAND POLLER
# ===============================================================================

class BrandTicketPoller:
    """Faster poll of the brand currently open in the dashboard."""

    TICKETS_PER_POLL = 50

    def __init__(self, token: str, state: PollState, brand_id: str) -> None:
        self.tickets = TicketAPIClient(token=token)
        self.brand_id = brand_id
        self.state = state
        if state.brand_id != brand_id:
            # Switching brands starts over
            state.brand_id = brand_id
            state.first_load = True
            state.snapshots = {}

    def poll(self) -> PollResult:
        tickets = self.tickets.list_tickets(self.brand_id, limit=self.TICKETS_PER_POLL).data

        if self.state.first_load:
            self.state.first_load = False
            self.state.snapshots = take_snapshot(tickets)
            return PollResult(seeded=True)

        events = diff_snapshots(self.state.snapshots, tickets)
        self.state.snapshots = take_snapshot(tickets)
        return PollResult(
            notifications=[self.build_notification(event) for event in events],
            changed=bool(events),
        )

    def build_notification(self, event: TicketEvent) -> Notification:
        ticket = event.ticket
        label = f"#{ticket.ticket_number}"
        url = f"/workspaces/{ticket.brand_id or self.brand_id}/tickets/{ticket.id}"
        if event.kind is EventKind.NEW:
            title, description = f"New ticket: {label}", ticket.title
        elif event.kind is EventKind.COMMENT:
            title, description = f"New comment on {label}", ticket.title
        else:
            title, description = f"{label} status changed", f"{event.old_status} → {ticket.status}"
        return Notification(title=title, description=description, url=url, duration_ms=None)


# ===============================================================================
# MENTIONS
# ===============================================================================

class MentionTracker:
    """Unread @mentions of the current user, with acknowledgement."""

    def __init__(self, token: str, state: PollState | None = None) -> None:
        self.client = DispatchAPIClient(token=token)
        self.state = state if state is not None else PollState()

    def fetch_unread(self) -> list[Mention]:
        """Unread mentions; an unavailable endpoint reads as none."""
        try:
            data = self.client.get('/auth/mentions/unread')
        except SessionExpiredError:
            raise
        except DispatchAPIError as e:
            logger.debug(f"🔕 [Mentions] Unread mentions unavailable: {e}")
            return []
        return [Mention.from_api(item) for item in unwrap_list(data)]

    def poll(self) -> tuple[list[Mention], PollResult]:
        mentions = self.fetch_unread()

        if self.state.first_load:
            # An empty first answer does not count as the baseline
            if mentions:
                self.state.first_load = False
                self.state.seen_ids = {m.id for m in mentions}
            return mentions, PollResult(seeded=bool(mentions))

        new_mentions = [m for m in mentions if m.id not in self.state.seen_ids]
        self.state.seen_ids = {m.id for m in mentions}
        notifications = [self.build_notification(m) for m in new_mentions]
        return mentions, PollResult(notifications=notifications, changed=bool(new_mentions))

    @staticmethod
    def build_notification(mention: Mention) -> Notification:
        title = f"{mention.mentioned_by} mentioned you" if mention.mentioned_by else 'You were mentioned'
        return Notification(
            title=title,
            description=f"{mention.ticket_label}: {mention.ticket_title or 'View ticket'}",
            url=f"/brands/{mention.brand_id}/tickets/{mention.ticket_id}",
            duration_ms=MENTION_TOAST_DURATION_MS,
            desktop=False,
        )

    def acknowledge(self, mention_id: str) -> dict[str, Any]:
        return self._ack(f'/auth/mentions/{mention_id}/ack')

    def acknowledge_ticket(self, ticket_id: str) -> dict[str, Any]:
        """Mark every mention in one ticket read (called when the ticket is opened)."""
        return self._ack(f'/auth/mentions/ack-ticket/{ticket_id}')

    def _ack(self, endpoint: str) -> dict[str, Any]:
        try:
            data = self.client.post(endpoint)
        except SessionExpiredError:
            raise
        except DispatchAPIError as e:
            logger.warning(f"⚠️ [Mentions] Acknowledge failed for {endpoint}: {e}")
            return {'success': False}
        return data if isinstance(data, dict) else {'success': True}


# ===============================================================================
# DISPATCH
# ===============================================================================

class NotificationDispatcher:
    """
    Hands poll results to the browser.

    Every notification becomes a `messages.info` toast; desktop notifications
    are only offered when the user enabled them for this session.
    """

    def __init__(self, request: HttpRequest) -> None:
        self.request = request

    @property
    def desktop_enabled(self) -> bool:
        return bool(self.request.session.get(DESKTOP_PREFERENCE_KEY, False))

    def dispatch(self, notifications: list[Notification]) -> list[dict[str, Any]]:
        desktop_enabled = self.desktop_enabled
        payload = []
        for notification in notifications:
            text = notification.title
            if notification.description:
                text = f"{text}: {notification.description}"
            messages.info(self.request, text)

            item = notification.to_dict()
            item['desktop'] = notification.desktop and desktop_enabled
            payload.append(item)
        return payload
