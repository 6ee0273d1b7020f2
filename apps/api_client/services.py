"""
Dispatch Tickets API Client (Dashboard → Dispatch API)

All state lives behind the Dispatch Tickets API. Requests are authenticated
with the bearer session token issued by `/auth/verify` and stored in the
Django session under SESSION_TOKEN_KEY. Public endpoints (CSAT feedback by
token) use a client constructed without a token.
"""

# ===============================================================================
# DISPATCH API CLIENT SERVICE - DASHBOARD TO API COMMUNICATION 🔗
# ===============================================================================

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any, TypeVar

import requests
from django.conf import settings

from apps.api_client.schemas import Page
from apps.common.logging import get_request_id

# HTTP status code constants
HTTP_OK = 200
HTTP_NO_CONTENT = 204
HTTP_MULTIPLE_CHOICES = 300
HTTP_UNAUTHORIZED = 401

# Django session key holding the Dispatch bearer token
SESSION_TOKEN_KEY = 'dispatch_session_token'

T = TypeVar('T')

logger = logging.getLogger(__name__)


class DispatchAPIError(Exception):
    """Exception raised when Dispatch API calls fail"""

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        code: str | None = None,
        details: dict[str, Any] | None = None,
        response_data: dict[str, Any] | None = None,
    ):
        self.message = message
        self.status_code = status_code
        self.code = code
        self.details = details or {}
        self.response_data = response_data or {}
        super().__init__(message)


class SessionExpiredError(DispatchAPIError):
    """The bearer token was rejected (HTTP 401); the session must be cleared."""


class DispatchAPIClient:
    """
    Centralized API client for communication with the Dispatch Tickets API.

    Handles:
    - Bearer token authentication
    - Query parameter normalization
    - Error translation into DispatchAPIError / SessionExpiredError
    - Request ID propagation for cross-service log correlation
    """

    def __init__(self, token: str | None = None, base_url: str | None = None, timeout: int | None = None) -> None:
        self.base_url = base_url or settings.DISPATCH_API_URL
        self.timeout = timeout or settings.DISPATCH_API_TIMEOUT
        self.token = token

    # ---- Small helpers to reduce branching/complexity in _make_request ----
    def _build_url(self, endpoint: str) -> str:
        return f"{self.base_url.rstrip('/')}/{endpoint.lstrip('/')}"

    def _build_headers(self, extra: dict[str, str] | None = None) -> dict[str, str]:
        headers = {
            'Content-Type': 'application/json',
            'Accept': 'application/json',
        }
        if self.token:
            headers['Authorization'] = f'Bearer {self.token}'
        request_id = get_request_id()
        if request_id:
            headers['X-Request-ID'] = request_id
        if extra:
            headers.update(extra)
        return headers

    @staticmethod
    def _clean_params(params: dict[str, Any] | None) -> dict[str, str] | None:
        """Drop empty filters; lists become comma-joined, booleans lowercase."""
        if not params:
            return None
        cleaned: dict[str, str] = {}
        for key, value in params.items():
            if value is None or value == '':
                continue
            if isinstance(value, bool):
                cleaned[key] = 'true' if value else 'false'
            elif isinstance(value, list | tuple):
                if not value:
                    continue
                cleaned[key] = ','.join(str(item) for item in value)
            else:
                cleaned[key] = str(value)
        return cleaned or None

    @staticmethod
    def _error_message(error_data: dict[str, Any], status_code: int) -> str:
        message = error_data.get('message') or error_data.get('error')
        if isinstance(message, list):
            # Validation failures come back as a list of field messages
            message = '; '.join(str(m) for m in message)
        return str(message) if message else f'Request failed: {status_code}'

    def _handle_api_response(self, response: requests.Response, endpoint: str) -> Any:
        if HTTP_OK <= response.status_code < HTTP_MULTIPLE_CHOICES:
            if response.status_code == HTTP_NO_CONTENT or not response.content:
                return None
            try:
                return response.json()
            except ValueError:
                return None

        try:
            error_data = response.json()
        except ValueError:
            error_data = {}
        if not isinstance(error_data, dict):
            error_data = {'message': str(error_data)}

        error_cls = SessionExpiredError if response.status_code == HTTP_UNAUTHORIZED else DispatchAPIError
        raise error_cls(
            message=self._error_message(error_data, response.status_code),
            status_code=response.status_code,
            code=error_data.get('code'),
            details=error_data.get('details'),
            response_data=error_data,
        )

    def _make_request(self, method: str, endpoint: str, data: Any = None,
                      params: dict[str, Any] | None = None, headers: dict[str, str] | None = None) -> Any:
        """Make a bearer-authenticated request to the Dispatch API"""
        url = self._build_url(endpoint)

        try:
            response = requests.request(
                method=method,
                url=url,
                headers=self._build_headers(headers),
                json=data,
                params=self._clean_params(params),
                timeout=self.timeout,
            )

            logger.debug(f"🌐 [API Client] {method} {url} -> {response.status_code}")

            return self._handle_api_response(response, endpoint)

        except requests.exceptions.ConnectionError as e:
            logger.error(f"🔥 [API Client] Connection failed to Dispatch API: {url}")
            raise DispatchAPIError("Dispatch API unavailable") from e
        except requests.exceptions.Timeout as e:
            logger.error(f"🔥 [API Client] Timeout connecting to Dispatch API: {url}")
            raise DispatchAPIError("Dispatch API timeout") from e
        except requests.exceptions.RequestException as e:
            logger.error(f"🔥 [API Client] Request error: {e}")
            raise DispatchAPIError(f"Request failed: {e!s}") from e

    # ===============================================================================
    # VERB HELPERS
    # ===============================================================================

    def get(self, endpoint: str, params: dict[str, Any] | None = None) -> Any:
        return self._make_request('GET', endpoint, params=params)

    def post(self, endpoint: str, data: Any = None, headers: dict[str, str] | None = None) -> Any:
        return self._make_request('POST', endpoint, data=data, headers=headers)

    def patch(self, endpoint: str, data: Any = None) -> Any:
        return self._make_request('PATCH', endpoint, data=data)

    def put(self, endpoint: str, data: Any = None) -> Any:
        return self._make_request('PUT', endpoint, data=data)

    def delete(self, endpoint: str, data: Any = None) -> Any:
        return self._make_request('DELETE', endpoint, data=data)

    def get_page(self, endpoint: str, item_factory: Callable[[dict[str, Any]], T],
                 params: dict[str, Any] | None = None) -> Page[T]:
        """GET a cursor-paginated collection (`{data, pagination}`)."""
        return Page.from_api(self.get(endpoint, params=params) or {}, item_factory)
