# ===============================================================================
# NOTIFICATION POLL API VIEWS 🔔
# ===============================================================================

import logging
from collections.abc import Callable
from typing import Any

from django.conf import settings
from rest_framework import status
from rest_framework.decorators import api_view
from rest_framework.request import Request
from rest_framework.response import Response

from apps.notifications.services import (
    DESKTOP_PREFERENCE_KEY,
    BrandTicketPoller,
    GlobalTicketPoller,
    MentionTracker,
    NotificationDispatcher,
    PollResult,
)
from apps.notifications.state import SCOPE_BRAND, SCOPE_GLOBAL, SCOPE_MENTIONS, PollState, PollStateStore

logger = logging.getLogger(__name__)


def _run_poll(request: Request, scope: str, interval: int,
              run: Callable[[PollState], tuple[dict[str, Any], PollResult]]) -> Response:
    """
    Shared throttle + persist + dispatch for every poll endpoint.

    A call that arrives before `interval` has elapsed since the last poll of
    this scope does not reach the API; it only reports when to come back.
    """
    store = PollStateStore.for_request(request)
    state = store.load(scope)

    wait = state.seconds_until_due(interval)
    if wait:
        return Response({
            'notifications': [],
            'next_poll_in': wait,
            'tickets_version': store.tickets_version(),
        })

    state.mark_polled()
    extra, result = run(state)
    store.save(scope, state)

    version = store.bump_tickets_version() if result.changed else store.tickets_version()
    notifications = NotificationDispatcher(request._request).dispatch(result.notifications)
    return Response({
        **extra,
        'notifications': notifications,
        'next_poll_in': interval,
        'tickets_version': version,
        'refresh_tickets': result.changed,
        'seeded': result.seeded,
    })


@api_view(['GET'])
def poll_global(request: Request) -> Response:
    """
    🔔 Global ticket poll

    GET /api/notifications/poll/

    Diffs recent tickets of every brand against this session's last poll.
    """
    session = request.user
    token = request.auth

    def run(state: PollState) -> tuple[dict[str, Any], PollResult]:
        poller = GlobalTicketPoller(token, state, cache_scope=session.organization_id)
        return {}, poller.poll()

    return _run_poll(request, SCOPE_GLOBAL, settings.NOTIFICATION_POLL_INTERVAL_GLOBAL, run)


@api_view(['GET'])
def poll_brand(request: Request, brand_id: str) -> Response:
    """
    🔔 Single brand poll

    GET /api/notifications/brands/<brand_id>/poll/
    """
    token = request.auth

    def run(state: PollState) -> tuple[dict[str, Any], PollResult]:
        return {'brand_id': brand_id}, BrandTicketPoller(token, state, brand_id).poll()

    store = PollStateStore.for_request(request)
    if store.load(SCOPE_BRAND).brand_id != brand_id:
        # A different brand is a fresh poller, not a throttled repeat
        store.save(SCOPE_BRAND, PollState(brand_id=brand_id))

    return _run_poll(request, SCOPE_BRAND, settings.NOTIFICATION_POLL_INTERVAL_BRAND, run)


@api_view(['GET'])
def poll_mentions(request: Request) -> Response:
    """
    🔔 Unread mentions

    GET /api/notifications/mentions/
    """
    token = request.auth

    def run(state: PollState) -> tuple[dict[str, Any], PollResult]:
        mentions, result = MentionTracker(token, state).poll()
        return {
            'unread_count': len(mentions),
            'mentions': [
                {
                    'id': m.id,
                    'ticket_id': m.ticket_id,
                    'brand_id': m.brand_id,
                    'ticket_label': m.ticket_label,
                    'ticket_title': m.ticket_title,
                    'brand_name': m.brand_name,
                    'mentioned_by': m.mentioned_by,
                    'created_at': m.created_at,
                }
                for m in mentions
            ],
        }, result

    return _run_poll(request, SCOPE_MENTIONS, settings.MENTION_POLL_INTERVAL, run)


def _expire_mention_poll(request: Request) -> None:
    """Let the next mentions poll run immediately so the unread count drops."""
    store = PollStateStore.for_request(request)
    state = store.load(SCOPE_MENTIONS)
    state.last_polled_at = None
    store.save(SCOPE_MENTIONS, state)


@api_view(['POST'])
def acknowledge_mention(request: Request, mention_id: str) -> Response:
    result = MentionTracker(request.auth).acknowledge(mention_id)
    if result.get('success'):
        _expire_mention_poll(request)
    return Response(result)


@api_view(['POST'])
def acknowledge_ticket_mentions(request: Request, ticket_id: str) -> Response:
    result = MentionTracker(request.auth).acknowledge_ticket(ticket_id)
    if result.get('success'):
        _expire_mention_poll(request)
    return Response(result)


@api_view(['GET', 'POST'])
def notification_preferences(request: Request) -> Response:
    """
    ⚙️ Desktop notification preference

    POST {"desktop_notifications_enabled": true}
    """
    if request.method == 'POST':
        enabled = request.data.get(DESKTOP_PREFERENCE_KEY)
        if not isinstance(enabled, bool):
            return Response(
                {'error': f'{DESKTOP_PREFERENCE_KEY} must be a boolean'},
                status=status.HTTP_400_BAD_REQUEST,
            )
        request.session[DESKTOP_PREFERENCE_KEY] = enabled
        logger.info(f"⚙️ [Notifications] Desktop notifications {'enabled' if enabled else 'disabled'}")

    return Response({
        DESKTOP_PREFERENCE_KEY: bool(request.session.get(DESKTOP_PREFERENCE_KEY, False)),
        'intervals': {
            'global': settings.NOTIFICATION_POLL_INTERVAL_GLOBAL,
            'brand': settings.NOTIFICATION_POLL_INTERVAL_BRAND,
            'mentions': settings.MENTION_POLL_INTERVAL,
        },
    })
