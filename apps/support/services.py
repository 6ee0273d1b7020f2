# ===============================================================================
# SUPPORT PORTAL SERVICES - TOKEN EXCHANGE AND PORTAL CLIENT 🛟
# ===============================================================================

"""
The dashboard's own support desk runs on Dispatch as well: signed-in users
file tickets as customers of a dedicated support brand.

A portal token for that brand is minted server-side with the deployment's API
key, so the key never reaches the browser.
"""

from __future__ import annotations

import logging
import uuid
from collections.abc import Callable
from datetime import timedelta
from typing import Any

import requests
from django.conf import settings

from apps.api_client.schemas import Page
from apps.api_client.services import DispatchAPIClient, DispatchAPIError, SessionExpiredError
from apps.support.schemas import PortalToken, SupportAttachment, SupportComment, SupportTicket

logger = logging.getLogger(__name__)

TOKEN_REFRESH_WINDOW = timedelta(minutes=5)
DEFAULT_CONTENT_TYPE = 'application/octet-stream'
HTTP_OK = 200
HTTP_MULTIPLE_CHOICES = 300


class SupportTokenError(Exception):
    """Portal token could not be issued; carries the HTTP status to answer with."""

    def __init__(self, message: str, status_code: int) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code


def _display_name(session_data: dict[str, Any]) -> str:
    first = session_data.get('firstName')
    last = session_data.get('lastName')
    if first and last:
        return f"{first} {last}".strip()
    return session_data['email'].split('@')[0]


def issue_support_token(session_token: str | None) -> PortalToken:
    """
    Exchange a dashboard session for a support portal token.

    Raises:
        SupportTokenError: 500 when the support brand is not configured or the
            token request fails, 401 when the session is not valid
    """
    api_key = settings.DISPATCH_API_KEY
    brand_id = settings.DISPATCH_SUPPORT_BRAND_ID
    if not api_key or not brand_id:
        logger.error("🔥 [Support] Support portal not configured: missing DISPATCH_API_KEY or DISPATCH_SUPPORT_BRAND_ID")
        raise SupportTokenError('Support portal not configured', 500)

    if not session_token:
        raise SupportTokenError('Unauthorized', 401)

    try:
        session_data = DispatchAPIClient(token=session_token).get('/auth/session') or {}
    except DispatchAPIError as e:
        if e.status_code is None:
            logger.error(f"🔥 [Support] Session lookup failed: {e}")
            raise SupportTokenError('Internal server error', 500) from e
        raise SupportTokenError('Invalid session', 401) from e

    if not session_data.get('valid') or not session_data.get('email'):
        raise SupportTokenError('Invalid session', 401)

    try:
        data = DispatchAPIClient(token=api_key).post(
            f'/brands/{brand_id}/portal/token',
            {'email': session_data['email'], 'name': _display_name(session_data)},
        )
        token = PortalToken.from_api(data or {})
    except (DispatchAPIError, KeyError) as e:
        logger.error(f"🔥 [Support] Portal token generation failed: {e}")
        raise SupportTokenError('Failed to generate support token', 500) from e

    logger.info(f"🛟 [Support] Issued portal token for {token.email}")
    return token


class PortalClient:
    """
    Customer-side access to the support brand's tickets.

    `token_provider` returns a fresh PortalToken; it is called lazily and again
    whenever the current token is within five minutes of expiring.
    """

    def __init__(self, token_provider: Callable[[], PortalToken], portal_token: PortalToken | None = None) -> None:
        self.token_provider = token_provider
        self.portal_token = portal_token

    def current_token(self) -> PortalToken:
        if self.portal_token is None or self.portal_token.expires_within(TOKEN_REFRESH_WINDOW):
            self.portal_token = self.token_provider()
        return self.portal_token

    def _get(self, endpoint: str, params: dict[str, Any] | None = None) -> Any:
        return self._call(lambda client: client.get(endpoint, params=params))

    def _post(self, endpoint: str, data: Any = None, headers: dict[str, str] | None = None) -> Any:
        return self._call(lambda client: client.post(endpoint, data, headers=headers))

    def _call(self, send: Callable[[DispatchAPIClient], Any]) -> Any:
        client = DispatchAPIClient(token=self.current_token().token)
        try:
            return send(client)
        except SessionExpiredError as e:
            # A rejected portal token says nothing about the dashboard session
            self.portal_token = None
            raise DispatchAPIError(e.message, status_code=e.status_code, code=e.code) from e

    @staticmethod
    def _idempotency_headers(idempotency_key: str | None) -> dict[str, str] | None:
        return {'X-Idempotency-Key': idempotency_key} if idempotency_key else None

    # ===============================================================================
    # TICKETS
    # ===============================================================================

    def list_tickets(self, *, status: str | None = None, cursor: str | None = None,
                     limit: int | None = None) -> Page[SupportTicket]:
        data = self._get('/portal/tickets', params={'status': status, 'cursor': cursor, 'limit': limit})
        return Page.from_api(data or {}, SupportTicket.from_api)

    def get_ticket(self, ticket_id: str) -> SupportTicket:
        return SupportTicket.from_api(self._get(f'/portal/tickets/{ticket_id}'))

    def create_ticket(self, title: str, body: str | None = None, attachment_ids: list[str] | None = None,
                      idempotency_key: str | None = None) -> SupportTicket:
        payload: dict[str, Any] = {'title': title}
        if body:
            payload['body'] = body
        if attachment_ids:
            payload['attachmentIds'] = list(attachment_ids)
        data = self._post('/portal/tickets', payload,
                             headers=self._idempotency_headers(idempotency_key))
        ticket = SupportTicket.from_api(data)
        logger.info(f"🛟 [Support] Created support ticket {ticket.label}")
        return ticket

    def add_comment(self, ticket_id: str, body: str, idempotency_key: str | None = None) -> SupportComment:
        data = self._post(f'/portal/tickets/{ticket_id}/comments', {'body': body},
                             headers=self._idempotency_headers(idempotency_key))
        return SupportComment.from_api(data)

    # ===============================================================================
    # ATTACHMENTS
    # ===============================================================================

    def upload_file(self, filename: str, content_type: str | None, content: bytes) -> SupportAttachment:
        """
        Upload an attachment for a ticket that is about to be created.

        Three steps: register a pending upload, PUT the bytes to the presigned
        URL, then confirm. The returned attachment id goes into
        `create_ticket(attachment_ids=...)`.
        """
        content_type = content_type or DEFAULT_CONTENT_TYPE
        pending = self._post('/portal/tickets/attachments/pending', {
            'filename': filename,
            'contentType': content_type,
            'size': len(content),
        }) or {}
        attachment = SupportAttachment.from_api(pending['attachment'])

        try:
            response = requests.put(
                pending['uploadUrl'],
                data=content,
                headers={'Content-Type': content_type},
                timeout=settings.DISPATCH_API_TIMEOUT,
            )
        except requests.exceptions.RequestException as e:
            logger.error(f"🔥 [Support] Upload of {filename} failed: {e}")
            raise DispatchAPIError(f"Upload failed: {e!s}") from e
        if not HTTP_OK <= response.status_code < HTTP_MULTIPLE_CHOICES:
            raise DispatchAPIError(f"Upload failed: {response.status_code}", status_code=response.status_code)

        confirmed = self._post(f'/portal/tickets/attachments/pending/{attachment.id}/confirm')
        logger.info(f"📎 [Support] Uploaded {filename} ({len(content)} bytes)")
        return SupportAttachment.from_api(confirmed) if confirmed else attachment


def new_idempotency_key() -> str:
    return str(uuid.uuid4())
