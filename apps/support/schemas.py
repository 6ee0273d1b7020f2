"""
Support portal schemas: the dashboard user acting as a customer of the
support brand.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Any

from django.utils import timezone

from apps.api_client.schemas import parse_api_datetime


@dataclass
class PortalToken:
    token: str
    expires_at: datetime | None
    customer_id: str = ''
    email: str = ''
    name: str | None = None

    def expires_within(self, window: timedelta, now: datetime | None = None) -> bool:
        """True when the token is gone or will be within `window`."""
        if self.expires_at is None:
            return True
        return self.expires_at - (now or timezone.now()) < window

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> PortalToken:
        return cls(
            token=data['token'],
            expires_at=parse_api_datetime(data.get('expiresAt')),
            customer_id=data.get('customerId', ''),
            email=data.get('email', ''),
            name=data.get('name'),
        )

    def to_api(self) -> dict[str, Any]:
        return {
            'token': self.token,
            'expiresAt': self.expires_at.isoformat() if self.expires_at else None,
            'customerId': self.customer_id,
            'email': self.email,
            'name': self.name,
        }


@dataclass
class SupportComment:
    id: str
    body: str
    author_type: str
    author_name: str | None = None
    author_id: str | None = None
    created_at: datetime | None = None

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> SupportComment:
        return cls(
            id=data['id'],
            body=data.get('body', ''),
            author_type=data.get('authorType', 'SYSTEM'),
            author_name=data.get('authorName'),
            author_id=data.get('authorId'),
            created_at=parse_api_datetime(data.get('createdAt')),
        )


@dataclass
class SupportTicket:
    id: str
    ticket_number: int
    title: str
    status: str
    priority: str
    body: str | None = None
    comment_count: int = 0
    brand_name: str = ''
    ticket_prefix: str = ''
    comments: list[SupportComment] = field(default_factory=list)
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def label(self) -> str:
        if self.ticket_prefix:
            return f"{self.ticket_prefix}-{self.ticket_number}"
        return f"#{self.ticket_number}"

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> SupportTicket:
        brand = data.get('brand') or {}
        comments = [SupportComment.from_api(item) for item in data.get('comments') or []]
        return cls(
            id=data['id'],
            ticket_number=data.get('ticketNumber', 0),
            title=data.get('title', ''),
            status=data.get('status', ''),
            priority=data.get('priority', ''),
            body=data.get('body'),
            comment_count=data.get('commentCount') or len(comments),
            brand_name=brand.get('name', ''),
            ticket_prefix=brand.get('ticketPrefix', ''),
            comments=comments,
            created_at=parse_api_datetime(data.get('createdAt')),
            updated_at=parse_api_datetime(data.get('updatedAt')),
        )


@dataclass
class SupportAttachment:
    id: str
    filename: str
    content_type: str
    size: int
    status: str = 'PENDING'

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> SupportAttachment:
        return cls(
            id=data['id'],
            filename=data.get('filename', ''),
            content_type=data.get('contentType', ''),
            size=data.get('size', 0),
            status=data.get('status', 'PENDING'),
        )
