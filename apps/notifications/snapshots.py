"""
Ticket snapshot diffing.

Polling only ever sees the current page of tickets, so change detection works
by remembering a small per-ticket tuple from the previous poll and comparing.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import datetime
from enum import Enum

from apps.tickets.schemas import Ticket


class EventKind(str, Enum):
    NEW = 'new'
    COMMENT = 'comment'
    STATUS = 'status'


@dataclass(frozen=True)
class TicketSnapshot:
    id: str
    brand_id: str
    status: str | None
    comment_count: int
    updated_at: datetime | None

    @classmethod
    def of(cls, ticket: Ticket) -> TicketSnapshot:
        return cls(
            id=ticket.id,
            brand_id=ticket.brand_id,
            status=ticket.status,
            comment_count=ticket.comment_count or 0,
            updated_at=ticket.updated_at,
        )


@dataclass(frozen=True)
class TicketEvent:
    kind: EventKind
    ticket: Ticket
    old_status: str | None = None


def take_snapshot(tickets: Iterable[Ticket]) -> dict[str, TicketSnapshot]:
    return {ticket.id: TicketSnapshot.of(ticket) for ticket in tickets}


def diff_snapshots(previous: dict[str, TicketSnapshot], tickets: Iterable[Ticket]) -> list[TicketEvent]:
    """
    Compare the current poll against the previous snapshot.

    A ticket may produce both a comment and a status event (in that order).
    A status appearing where there was none before is not a change.
    Tickets missing from the current poll are dropped without an event.
    """
    events: list[TicketEvent] = []
    for ticket in tickets:
        prev = previous.get(ticket.id)
        if prev is None:
            events.append(TicketEvent(EventKind.NEW, ticket))
            continue

        if (ticket.comment_count or 0) > prev.comment_count:
            events.append(TicketEvent(EventKind.COMMENT, ticket))

        if ticket.status != prev.status and prev.status is not None:
            events.append(TicketEvent(EventKind.STATUS, ticket, old_status=prev.status))
    return events
