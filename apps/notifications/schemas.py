"""
Notification structures: unread mentions from the API and the toasts built from polls.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from datetime import datetime
from typing import Any

from apps.api_client.schemas import parse_api_datetime

TOAST_DURATION_MS = 8000
MENTION_TOAST_DURATION_MS = 10000


@dataclass
class Mention:
    """An unread @mention of the current user in a ticket comment"""

    id: str
    ticket_id: str
    brand_id: str
    ticket_number: int | None = None
    ticket_title: str | None = None
    ticket_prefix: str | None = None
    brand_name: str | None = None
    mentioned_by: str | None = None
    created_at: datetime | None = None

    @property
    def ticket_label(self) -> str:
        if self.ticket_prefix and self.ticket_number:
            return f"{self.ticket_prefix}-{self.ticket_number}"
        return 'Ticket'

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> Mention:
        return cls(
            id=data['id'],
            ticket_id=data.get('ticketId', ''),
            brand_id=data.get('brandId', ''),
            ticket_number=data.get('ticketNumber'),
            ticket_title=data.get('ticketTitle'),
            ticket_prefix=data.get('ticketPrefix'),
            brand_name=data.get('brandName'),
            mentioned_by=data.get('mentionedBy'),
            created_at=parse_api_datetime(data.get('createdAt')),
        )


@dataclass
class Notification:
    """One toast (and optionally a desktop notification) for the browser to show"""

    title: str
    description: str
    url: str
    duration_ms: int | None = TOAST_DURATION_MS
    desktop: bool = False

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)
