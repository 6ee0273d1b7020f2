# ===============================================================================
# TICKET API VIEWS - BRAND TICKETS AND CROSS-BRAND DASHBOARD 🎫
# ===============================================================================

import logging
from dataclasses import asdict
from typing import Any

from django.contrib import messages
from django.http import HttpRequest, JsonResponse
from django.utils.translation import gettext as _
from django.views.decorators.http import require_http_methods
from rest_framework import status
from rest_framework.decorators import api_view
from rest_framework.request import Request
from rest_framework.response import Response

from apps.api_client.schemas import Page
from apps.common.decorators import handle_api_errors, require_dispatch_session
from apps.common.payloads import page_size
from apps.notifications.services import MentionTracker
from apps.notifications.state import PollStateStore
from apps.tickets.schemas import BULK_ACTIONS, Ticket
from apps.tickets.services import TicketAPIClient

logger = logging.getLogger(__name__)


def serialize_ticket(ticket: Ticket) -> dict[str, Any]:
    return {**asdict(ticket), 'label': ticket.label}


def serialize_page(page: Page[Ticket]) -> dict[str, Any]:
    return {
        'data': [serialize_ticket(ticket) for ticket in page],
        'pagination': {'has_more': page.has_more, 'next_cursor': page.next_cursor},
    }


# ===============================================================================
# BRAND TICKETS
# ===============================================================================

@api_view(['GET'])
def ticket_list(request: Request, brand_id: str) -> Response:
    """
    📋 Brand ticket list

    GET /api/brands/<brand_id>/tickets/?status=&search=&cursor=&limit=&spam=true
    """
    params = request.query_params
    page = TicketAPIClient(token=request.auth).list_tickets(
        brand_id,
        status=params.get('status'),
        priority=params.get('priority'),
        search=params.get('search'),
        is_spam=True if params.get('spam') == 'true' else None,
        cursor=params.get('cursor'),
        limit=page_size(request),
    )
    return Response(serialize_page(page))


@api_view(['GET'])
def ticket_detail(request: Request, brand_id: str, ticket_id: str) -> Response:
    """🎫 One ticket with its comment thread and watchers"""
    client = TicketAPIClient(token=request.auth)
    ticket = client.get_ticket(brand_id, ticket_id)
    return Response({
        'ticket': serialize_ticket(ticket),
        'comments': [asdict(comment) for comment in client.list_comments(brand_id, ticket_id)],
        'watchers': [asdict(watcher) for watcher in client.list_watchers(brand_id, ticket_id)],
    })


@api_view(['POST'])
def ticket_viewed(request: Request, brand_id: str, ticket_id: str) -> Response:
    """
    👁️ Ticket opened in the dashboard

    POST /api/brands/<brand_id>/tickets/<ticket_id>/viewed/

    Acknowledges every unread mention in the ticket.
    """
    result = MentionTracker(request.auth).acknowledge_ticket(ticket_id)
    logger.debug(f"👁️ [Tickets] Ticket {ticket_id} viewed in brand {brand_id}")
    return Response(result)


@api_view(['POST'])
def ticket_bulk_action(request: Request, brand_id: str) -> Response:
    """
    ⚡ Bulk action

    POST /api/brands/<brand_id>/tickets/bulk/ {"action": "resolve", "ticket_ids": [...]}
    """
    action = request.data.get('action')
    ticket_ids = request.data.get('ticket_ids') or []
    if not isinstance(ticket_ids, list) or not ticket_ids:
        return Response({'error': _('ticket_ids must be a non-empty list')}, status=status.HTTP_400_BAD_REQUEST)

    try:
        result = TicketAPIClient(token=request.auth).bulk_action(brand_id, action, ticket_ids)
    except ValueError:
        return Response(
            {'error': _('Unsupported action'), 'allowed': list(BULK_ACTIONS)},
            status=status.HTTP_400_BAD_REQUEST,
        )

    PollStateStore.for_request(request).bump_tickets_version()
    if result['failed']:
        messages.warning(request._request, _('%(failed)d tickets could not be updated.') % result)
    else:
        messages.success(request._request, _('%(success)d tickets updated.') % result)
    return Response(result)


# ===============================================================================
# CROSS-BRAND DASHBOARD
# ===============================================================================

def _brand_ids(request: Request) -> list[str] | None:
    raw = request.query_params.get('brand_ids') or ''
    ids = [brand_id for brand_id in raw.split(',') if brand_id]
    return ids or None


@api_view(['GET'])
def dashboard_tickets(request: Request) -> Response:
    """GET /api/dashboard/tickets/?brand_ids=a,b&status=open"""
    params = request.query_params
    page = TicketAPIClient(token=request.auth).list_dashboard_tickets(
        brand_ids=_brand_ids(request),
        customer_id=params.get('customer_id'),
        status=params.get('status'),
        priority=params.get('priority'),
        search=params.get('search'),
        cursor=params.get('cursor'),
        limit=page_size(request),
    )
    return Response(serialize_page(page))


@api_view(['GET'])
def dashboard_stats(request: Request) -> Response:
    """GET /api/dashboard/stats/?brand_ids=a,b"""
    stats = TicketAPIClient(token=request.auth).get_dashboard_stats(_brand_ids(request))
    return Response(asdict(stats))


@require_http_methods(["GET"])
@require_dispatch_session
@handle_api_errors
def dashboard_overview(request: HttpRequest) -> JsonResponse:
    """
    🏠 Dashboard landing

    GET /dashboard/

    Session summary plus cross-brand ticket counts.
    """
    session = request.dispatch_session
    stats = TicketAPIClient(token=request.dispatch_token).get_dashboard_stats()
    return JsonResponse({
        'session': session.to_dict(),
        'stats': asdict(stats),
        'tickets_version': PollStateStore.for_request(request).tickets_version(),
    })
