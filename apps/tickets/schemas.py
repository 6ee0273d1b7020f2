"""
Ticket Schemas - API Response Data Structures
Pure Python dataclasses for tickets, comments, watchers and audit logs.
NO DATABASE MODELS - API-only communication.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from apps.api_client.schemas import parse_api_datetime

TICKET_STATUSES = ('open', 'pending', 'resolved', 'closed', 'spam')
BULK_ACTIONS = ('spam', 'resolve', 'close', 'delete')

AUTHOR_TYPE_CUSTOMER = 'CUSTOMER'


@dataclass
class BrandInfo:
    """Brand summary embedded in cross-brand dashboard tickets"""

    id: str
    name: str
    slug: str = ''
    ticket_prefix: str = ''
    icon_url: str | None = None

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> BrandInfo:
        return cls(
            id=data.get('id', ''),
            name=data.get('name', ''),
            slug=data.get('slug', ''),
            ticket_prefix=data.get('ticketPrefix', ''),
            icon_url=data.get('iconUrl'),
        )


@dataclass
class Ticket:
    """Ticket data from the Dispatch API"""

    id: str
    brand_id: str
    title: str
    ticket_number: int | None = None
    body: str | None = None
    status: str | None = None
    priority: str | None = None
    source: str | None = None
    assignee_id: str | None = None
    customer_id: str | None = None
    comment_count: int = 0
    attachment_count: int = 0
    is_spam: bool = False
    custom_fields: dict[str, Any] = field(default_factory=dict)
    metadata: dict[str, Any] = field(default_factory=dict)
    created_at: datetime | None = None
    updated_at: datetime | None = None
    brand: BrandInfo | None = None

    @property
    def label(self) -> str:
        """Human label: `#<number>` when numbered, else the id prefix."""
        if self.ticket_number:
            return f"#{self.ticket_number}"
        return self.id[:8]

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> Ticket:
        brand = data.get('brand')
        return cls(
            id=data['id'],
            brand_id=data.get('brandId') or data.get('workspaceId') or '',
            title=data.get('title', ''),
            ticket_number=data.get('ticketNumber'),
            body=data.get('body'),
            status=data.get('status'),
            priority=data.get('priority'),
            source=data.get('source'),
            assignee_id=data.get('assigneeId'),
            customer_id=data.get('customerId'),
            comment_count=data.get('commentCount') or 0,
            attachment_count=data.get('attachmentCount') or 0,
            is_spam=bool(data.get('isSpam')),
            custom_fields=data.get('customFields') or {},
            metadata=data.get('metadata') or {},
            created_at=parse_api_datetime(data.get('createdAt')),
            updated_at=parse_api_datetime(data.get('updatedAt')),
            brand=BrandInfo.from_api(brand) if isinstance(brand, dict) else None,
        )


@dataclass
class Comment:
    id: str
    ticket_id: str
    body: str
    author: str | None = None
    author_email: str | None = None
    author_type: str | None = None
    is_internal: bool = False
    metadata: dict[str, Any] = field(default_factory=dict)
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def is_from_customer(self) -> bool:
        return self.author_type == AUTHOR_TYPE_CUSTOMER

    @property
    def author_name(self) -> str | None:
        return self.metadata.get('authorName') or None

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> Comment:
        return cls(
            id=data['id'],
            ticket_id=data.get('ticketId', ''),
            body=data.get('body', ''),
            author=data.get('author'),
            author_email=data.get('authorEmail'),
            author_type=data.get('authorType'),
            is_internal=bool(data.get('isInternal')),
            metadata=data.get('metadata') or {},
            created_at=parse_api_datetime(data.get('createdAt')),
            updated_at=parse_api_datetime(data.get('updatedAt')),
        )


@dataclass
class Watcher:
    id: str
    ticket_id: str
    member_id: str
    member_email: str
    member_name: str | None = None
    added_by: str | None = None
    added_at: datetime | None = None
    notify_on_comment: bool = True
    notify_on_status_change: bool = True

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> Watcher:
        return cls(
            id=data['id'],
            ticket_id=data.get('ticketId', ''),
            member_id=data.get('memberId', ''),
            member_email=data.get('memberEmail', ''),
            member_name=data.get('memberName'),
            added_by=data.get('addedBy'),
            added_at=parse_api_datetime(data.get('addedAt')),
            notify_on_comment=data.get('notifyOnComment', True),
            notify_on_status_change=data.get('notifyOnStatusChange', True),
        )


@dataclass
class PerformedBy:
    type: str
    email: str | None = None
    name: str | None = None
    api_key_prefix: str | None = None

    @property
    def display(self) -> str:
        if self.type == 'api':
            return f"API key {self.api_key_prefix}" if self.api_key_prefix else 'API'
        return self.name or self.email or self.type


@dataclass
class AuditLog:
    """One entry of a brand's audit trail"""

    id: str
    brand_id: str
    event: str
    entity_type: str
    entity_id: str
    source: str = ''
    changes: dict[str, dict[str, Any]] = field(default_factory=dict)
    performed_by: PerformedBy | None = None
    metadata: dict[str, Any] = field(default_factory=dict)
    created_at: datetime | None = None

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> AuditLog:
        performer = data.get('performedBy')
        return cls(
            id=data['id'],
            brand_id=data.get('brandId', ''),
            event=data.get('event', ''),
            entity_type=data.get('entityType', ''),
            entity_id=data.get('entityId', ''),
            source=data.get('source', ''),
            changes=data.get('changes') or {},
            performed_by=PerformedBy(
                type=performer.get('type', 'system'),
                email=performer.get('email'),
                name=performer.get('name'),
                api_key_prefix=performer.get('apiKeyPrefix'),
            ) if isinstance(performer, dict) else None,
            metadata=data.get('metadata') or {},
            created_at=parse_api_datetime(data.get('createdAt')),
        )


@dataclass
class BrandStats:
    name: str
    prefix: str
    total: int = 0
    open: int = 0
    pending: int = 0


@dataclass
class DashboardStats:
    """Ticket counts across every brand the user can see"""

    total: int = 0
    open: int = 0
    pending: int = 0
    resolved: int = 0
    closed: int = 0
    by_brand: dict[str, BrandStats] = field(default_factory=dict)

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> DashboardStats:
        return cls(
            total=data.get('total', 0),
            open=data.get('open', 0),
            pending=data.get('pending', 0),
            resolved=data.get('resolved', 0),
            closed=data.get('closed', 0),
            by_brand={
                brand_id: BrandStats(
                    name=stats.get('name', ''),
                    prefix=stats.get('prefix', ''),
                    total=stats.get('total', 0),
                    open=stats.get('open', 0),
                    pending=stats.get('pending', 0),
                )
                for brand_id, stats in (data.get('byBrand') or {}).items()
            },
        )
