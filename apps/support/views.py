# ===============================================================================
# SUPPORT PORTAL API VIEWS 🛟
# ===============================================================================

import logging
from collections.abc import Callable
from dataclasses import asdict
from functools import wraps
from typing import Any

from rest_framework import status
from rest_framework.decorators import api_view, parser_classes
from rest_framework.parsers import MultiPartParser
from rest_framework.request import Request
from rest_framework.response import Response

from apps.api_client.services import DispatchAPIError
from apps.support.schemas import PortalToken
from apps.support.services import PortalClient, SupportTokenError, issue_support_token, new_idempotency_key

logger = logging.getLogger(__name__)

PORTAL_TOKEN_SESSION_KEY = 'support_portal_token'


def portal_client_for(request: Request) -> PortalClient:
    """PortalClient whose token lives in the dashboard session."""
    session = request.session
    cached = session.get(PORTAL_TOKEN_SESSION_KEY)

    def provide() -> PortalToken:
        token = issue_support_token(request.auth)
        session[PORTAL_TOKEN_SESSION_KEY] = token.to_api()
        return token

    return PortalClient(provide, PortalToken.from_api(cached) if cached else None)


def relay_token_errors(view_func: Callable) -> Callable:
    @wraps(view_func)
    def wrapper(request: Request, *args: Any, **kwargs: Any) -> Response:
        try:
            return view_func(request, *args, **kwargs)
        except SupportTokenError as e:
            return Response({'error': e.message}, status=e.status_code)
        except DispatchAPIError as e:
            if e.status_code == status.HTTP_401_UNAUTHORIZED:
                request.session.pop(PORTAL_TOKEN_SESSION_KEY, None)
            raise
    return wrapper


@api_view(['GET'])
@relay_token_errors
def support_token(request: Request) -> Response:
    """
    🔑 Portal token for the support brand

    GET /api/support/token/ → {token, expiresAt, customerId, email, name}
    """
    token = issue_support_token(request.auth)
    request.session[PORTAL_TOKEN_SESSION_KEY] = token.to_api()
    return Response(token.to_api())


@api_view(['GET', 'POST'])
@relay_token_errors
def support_tickets(request: Request) -> Response:
    """
    🎫 Own support tickets

    GET ?status=&cursor=&limit= lists; POST {title, body?, attachment_ids?} files one.
    """
    client = portal_client_for(request)
    if request.method == 'GET':
        params = request.query_params
        limit = params.get('limit')
        page = client.list_tickets(
            status=params.get('status'),
            cursor=params.get('cursor'),
            limit=int(limit) if limit and limit.isdigit() else None,
        )
        return Response({
            'data': [{**asdict(ticket), 'label': ticket.label} for ticket in page],
            'pagination': {'has_more': page.has_more, 'next_cursor': page.next_cursor},
        })

    title = (request.data.get('title') or '').strip()
    if not title:
        return Response({'error': 'title is required'}, status=status.HTTP_400_BAD_REQUEST)
    ticket = client.create_ticket(
        title,
        request.data.get('body'),
        attachment_ids=request.data.get('attachment_ids') or None,
        idempotency_key=request.headers.get('X-Idempotency-Key') or new_idempotency_key(),
    )
    return Response({**asdict(ticket), 'label': ticket.label}, status=status.HTTP_201_CREATED)


@api_view(['GET'])
@relay_token_errors
def support_ticket_detail(request: Request, ticket_id: str) -> Response:
    ticket = portal_client_for(request).get_ticket(ticket_id)
    return Response({**asdict(ticket), 'label': ticket.label})


@api_view(['POST'])
@relay_token_errors
def support_ticket_comment(request: Request, ticket_id: str) -> Response:
    body = (request.data.get('body') or '').strip()
    if not body:
        return Response({'error': 'body is required'}, status=status.HTTP_400_BAD_REQUEST)
    comment = portal_client_for(request).add_comment(
        ticket_id,
        body,
        idempotency_key=request.headers.get('X-Idempotency-Key') or new_idempotency_key(),
    )
    return Response(asdict(comment), status=status.HTTP_201_CREATED)


@api_view(['POST'])
@parser_classes([MultiPartParser])
@relay_token_errors
def support_attachment_upload(request: Request) -> Response:
    """📎 Multipart `file` upload; returns the attachment to reference on create."""
    upload = request.FILES.get('file')
    if upload is None:
        return Response({'error': 'file is required'}, status=status.HTTP_400_BAD_REQUEST)
    attachment = portal_client_for(request).upload_file(upload.name, upload.content_type, upload.read())
    return Response(asdict(attachment), status=status.HTTP_201_CREATED)
