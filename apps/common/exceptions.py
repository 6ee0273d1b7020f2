"""
DRF exception handling for views backed by the Dispatch API.
"""

import logging
from typing import Any

from rest_framework.response import Response
from rest_framework.views import exception_handler

from apps.api_client.services import DispatchAPIError, SessionExpiredError
from apps.common.decorators import api_error_status

logger = logging.getLogger(__name__)


def dispatch_exception_handler(exc: Exception, context: dict[str, Any]) -> Response | None:
    """
    Relay upstream failures as `{error, code}` JSON.

    SessionExpiredError gets no response here so it propagates to
    DispatchSessionMiddleware, which signs the user out.
    """
    if isinstance(exc, SessionExpiredError):
        return None
    if isinstance(exc, DispatchAPIError):
        request = context.get('request')
        path = request.path if request is not None else '?'
        logger.warning(f"⚠️ [API Views] {path} failed upstream: {exc}")
        payload: dict[str, Any] = {'error': exc.message}
        if exc.code:
            payload['code'] = exc.code
        return Response(payload, status=api_error_status(exc))
    return exception_handler(exc, context)
