"""
Brand Schemas - brands (workspaces), customers, companies and ticket statuses.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from apps.api_client.schemas import parse_api_datetime


@dataclass
class Brand:
    """A brand; the API still calls it a workspace"""

    id: str
    name: str
    slug: str = ''
    account_id: str = ''
    ticket_prefix: str = ''
    next_ticket_number: int | None = None
    url: str | None = None
    icon_url: str | None = None
    from_name: str | None = None
    from_email: str | None = None
    inbound_email_enabled: bool = False
    autoresponse_enabled: bool = False
    settings: dict[str, Any] = field(default_factory=dict)
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> Brand:
        return cls(
            id=data['id'],
            name=data.get('name', ''),
            slug=data.get('slug', ''),
            account_id=data.get('accountId', ''),
            ticket_prefix=data.get('ticketPrefix', ''),
            next_ticket_number=data.get('nextTicketNumber'),
            url=data.get('url'),
            icon_url=data.get('iconUrl'),
            from_name=data.get('fromName'),
            from_email=data.get('fromEmail'),
            inbound_email_enabled=bool(data.get('inboundEmailEnabled')),
            autoresponse_enabled=bool(data.get('autoresponseEnabled')),
            settings=data.get('settings') or {},
            created_at=parse_api_datetime(data.get('createdAt')),
            updated_at=parse_api_datetime(data.get('updatedAt')),
        )


@dataclass
class Company:
    id: str
    brand_id: str
    name: str
    domain: str | None = None
    customer_count: int | None = None
    metadata: dict[str, Any] = field(default_factory=dict)
    created_at: datetime | None = None

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> Company:
        return cls(
            id=data['id'],
            brand_id=data.get('brandId', ''),
            name=data.get('name', ''),
            domain=data.get('domain'),
            customer_count=(data.get('_count') or {}).get('customers'),
            metadata=data.get('metadata') or {},
            created_at=parse_api_datetime(data.get('createdAt')),
        )


@dataclass
class Customer:
    id: str
    email: str
    brand_id: str = ''
    name: str | None = None
    avatar_url: str | None = None
    company_id: str | None = None
    company: Company | None = None
    notify_email: bool = True
    ticket_count: int | None = None
    metadata: dict[str, Any] = field(default_factory=dict)
    created_at: datetime | None = None

    @property
    def display_name(self) -> str:
        return self.name or self.email

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> Customer:
        company = data.get('company')
        return cls(
            id=data['id'],
            email=data.get('email', ''),
            brand_id=data.get('brandId', ''),
            name=data.get('name'),
            avatar_url=data.get('avatarUrl'),
            company_id=data.get('companyId') or (company or {}).get('id'),
            # Search results embed a {id, name} stub rather than a full company
            company=Company.from_api({'brandId': data.get('brandId', ''), **company}) if company else None,
            notify_email=data.get('notifyEmail', True),
            ticket_count=(data.get('_count') or {}).get('tickets'),
            metadata=data.get('metadata') or {},
            created_at=parse_api_datetime(data.get('createdAt')),
        )


@dataclass
class TicketStatus:
    """A brand's configurable ticket status"""

    id: str
    brand_id: str
    name: str
    key: str
    color: str = ''
    description: str | None = None
    is_system: bool = False
    is_active: bool = True
    sort_order: int = 0
    ticket_count: int | None = None

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> TicketStatus:
        return cls(
            id=data['id'],
            brand_id=data.get('brandId', ''),
            name=data.get('name', ''),
            key=data.get('key', ''),
            color=data.get('color', ''),
            description=data.get('description'),
            is_system=bool(data.get('isSystem')),
            is_active=data.get('isActive', True),
            sort_order=data.get('sortOrder', 0),
            ticket_count=data.get('ticketCount'),
        )
