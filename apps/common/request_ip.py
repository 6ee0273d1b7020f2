"""
IP address utilities for the Dispatch Dashboard
"""

from django.http import HttpRequest
from ipware import get_client_ip


def get_safe_client_ip(request: HttpRequest) -> str:
    """
    Get client IP address from request, honoring proxy headers.
    Falls back to loopback when nothing usable is present.
    """
    client_ip, _is_routable = get_client_ip(request)
    return client_ip or "127.0.0.1"
