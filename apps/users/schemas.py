"""
Session structures for the Dispatch Dashboard.
"""

from __future__ import annotations

import base64
import binascii
import json
from dataclasses import asdict, dataclass
from typing import Any


@dataclass
class DispatchSession:
    """The authenticated identity behind a bearer session token"""

    customer_id: str
    email: str
    organization_id: str
    org_role: str | None = None
    connected: bool = False
    expires_at: str | None = None

    @property
    def is_authenticated(self) -> bool:
        return True

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> DispatchSession:
        return cls(
            customer_id=data.get('customerId') or '',
            email=data.get('email') or '',
            organization_id=data.get('organizationId') or '',
            org_role=data.get('orgRole'),
            connected=bool(data.get('connected')),
            expires_at=data.get('expiresAt'),
        )

    @classmethod
    def unconnected_from_token(cls, token: str) -> DispatchSession:
        """
        Session for a user that authenticated but has no organization yet.
        Identity comes from the JWT payload (read, not verified: the API
        already vouched for the token).
        """
        payload = decode_jwt_payload(token)
        return cls(
            customer_id=str(payload.get('sub') or ''),
            email=str(payload.get('email') or ''),
            organization_id='',
            connected=False,
        )

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> DispatchSession:
        return cls(**data)


@dataclass
class Organization:
    id: str
    name: str

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> Organization:
        return cls(id=data.get('id') or '', name=data.get('name') or '')


def decode_jwt_payload(token: str) -> dict[str, Any]:
    """Return the claims segment of a JWT, or {} when it cannot be read."""
    parts = token.split('.')
    if len(parts) < 2:  # noqa: PLR2004
        return {}
    segment = parts[1] + '=' * (-len(parts[1]) % 4)
    try:
        payload = json.loads(base64.urlsafe_b64decode(segment.encode('ascii')))
    except (binascii.Error, UnicodeError, ValueError):
        return {}
    return payload if isinstance(payload, dict) else {}
