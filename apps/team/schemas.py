"""
Team Schemas - organization members, invites, brand access and API keys.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from apps.api_client.schemas import parse_api_datetime

ORG_ROLES = ('owner', 'admin', 'member')


@dataclass
class BrandAssignment:
    """Which brands a member (or API key) may access"""

    all_brands: bool = True
    brand_ids: list[str] = field(default_factory=list)
    available_brands: list[dict[str, str]] = field(default_factory=list)

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> BrandAssignment:
        return cls(
            all_brands=data.get('allBrands', True),
            brand_ids=list(data.get('brandIds') or []),
            available_brands=[
                {'id': brand.get('id', ''), 'name': brand.get('name', '')}
                for brand in data.get('availableBrands') or []
            ],
        )


@dataclass
class TeamMember:
    id: str
    email: str
    role: str
    status: str = 'active'
    first_name: str | None = None
    last_name: str | None = None
    sent_at: datetime | None = None
    brand_assignment: BrandAssignment | None = None

    @property
    def display_name(self) -> str:
        full_name = ' '.join(part for part in (self.first_name, self.last_name) if part)
        return full_name or self.email.split('@')[0]

    @property
    def is_pending(self) -> bool:
        return self.status == 'pending'

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> TeamMember:
        assignment = data.get('brandAssignment')
        return cls(
            id=data['id'],
            email=data.get('email', ''),
            role=data.get('role', 'member'),
            status=data.get('status', 'active'),
            first_name=data.get('firstName'),
            last_name=data.get('lastName'),
            sent_at=parse_api_datetime(data.get('sentAt')),
            brand_assignment=BrandAssignment.from_api(assignment) if assignment else None,
        )


@dataclass
class Team:
    """Active members and outstanding invites"""

    members: list[TeamMember] = field(default_factory=list)
    invites: list[TeamMember] = field(default_factory=list)

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> Team:
        return cls(
            members=[TeamMember.from_api(m) for m in data.get('members') or []],
            invites=[TeamMember.from_api(m) for m in data.get('invites') or []],
        )


@dataclass
class ApiKey:
    id: str
    name: str
    prefix: str
    all_brands: bool = True
    brand_ids: list[str] = field(default_factory=list)
    created_at: datetime | None = None
    last_used_at: datetime | None = None
    expires_at: datetime | None = None
    # Only present in the create response
    key: str | None = None

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> ApiKey:
        return cls(
            id=data['id'],
            name=data.get('name', ''),
            prefix=data.get('prefix', ''),
            all_brands=data.get('allBrands', True),
            brand_ids=list(data.get('brandIds') or []),
            created_at=parse_api_datetime(data.get('createdAt')),
            last_used_at=parse_api_datetime(data.get('lastUsedAt')),
            expires_at=parse_api_datetime(data.get('expiresAt')),
            key=data.get('key'),
        )
