"""
Request helpers: views accept both JSON bodies and form posts, and list
endpoints share one page-size policy.
"""

import json
from typing import Any

from django.http import HttpRequest
from rest_framework.request import Request

DEFAULT_PAGE_SIZE = 25
MAX_PAGE_SIZE = 100


def read_payload(request: HttpRequest) -> dict[str, Any]:
    """Return the request body as a dict; malformed JSON yields {}."""
    if request.content_type == 'application/json':
        try:
            data = json.loads(request.body or b'{}')
        except (ValueError, UnicodeDecodeError):
            return {}
        return data if isinstance(data, dict) else {}
    return request.POST.dict()


def page_size(request: Request, default: int = DEFAULT_PAGE_SIZE) -> int:
    """`?limit=` clamped to 1..MAX_PAGE_SIZE."""
    try:
        limit = int(request.query_params.get('limit', default))
    except (TypeError, ValueError):
        return default
    return max(1, min(limit, MAX_PAGE_SIZE))
