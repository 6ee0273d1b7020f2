"""
View decorators for the Dispatch Dashboard.
"""

import logging
from collections.abc import Callable
from functools import wraps
from typing import Any

from django.http import HttpRequest, HttpResponse, JsonResponse
from django.shortcuts import redirect
from django.utils.translation import gettext as _

from apps.api_client.services import DispatchAPIError, SessionExpiredError
from apps.common.toasts import toast_api_error

logger = logging.getLogger(__name__)

HTTP_BAD_GATEWAY = 502
HTTP_SERVICE_UNAVAILABLE = 503
HTTP_CLIENT_ERROR_MIN = 400
HTTP_SERVER_ERROR_MIN = 500


def wants_json(request: HttpRequest) -> bool:
    return (
        request.path.startswith('/api/')
        or 'application/json' in request.headers.get('Accept', '')
    )


def api_error_status(error: DispatchAPIError) -> int:
    """HTTP status to relay for a failed upstream call."""
    if error.status_code is None:
        return HTTP_SERVICE_UNAVAILABLE
    if HTTP_CLIENT_ERROR_MIN <= error.status_code < HTTP_SERVER_ERROR_MIN:
        return error.status_code
    return HTTP_BAD_GATEWAY


def api_error_response(error: DispatchAPIError) -> JsonResponse:
    payload: dict[str, Any] = {'error': error.message}
    if error.code:
        payload['code'] = error.code
    return JsonResponse(payload, status=api_error_status(error))


def require_dispatch_session(view_func: Callable) -> Callable:
    """🔒 Require a validated Dispatch session on the request"""
    @wraps(view_func)
    def wrapper(request: HttpRequest, *args: Any, **kwargs: Any) -> HttpResponse:
        if getattr(request, 'dispatch_session', None) is None:
            if wants_json(request):
                return JsonResponse({'error': _('Authentication required')}, status=401)
            return redirect('/login/')
        return view_func(request, *args, **kwargs)
    return wrapper


def handle_api_errors(view_func: Callable) -> Callable:
    """Translate DispatchAPIError raised by a JSON view into an error response and toast.

    SessionExpiredError is left to DispatchSessionMiddleware, which clears the
    stored token.
    """
    @wraps(view_func)
    def wrapper(request: HttpRequest, *args: Any, **kwargs: Any) -> HttpResponse:
        try:
            return view_func(request, *args, **kwargs)
        except SessionExpiredError:
            raise
        except DispatchAPIError as e:
            logger.warning(f"⚠️ [API Views] {request.method} {request.path} failed upstream: {e}")
            toast_api_error(request, e)
            return api_error_response(e)
    return wrapper
