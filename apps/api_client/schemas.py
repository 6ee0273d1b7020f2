"""
Shared response structures for the Dispatch API.
Pure Python dataclasses - NO DATABASE MODELS.
"""

from __future__ import annotations

from collections.abc import Callable, Iterator
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Generic, TypeVar

from django.utils.dateparse import parse_datetime

T = TypeVar("T")


def parse_api_datetime(value: Any) -> datetime | None:
    """Parse an ISO-8601 timestamp from the API; anything unparseable becomes None."""
    if not value or not isinstance(value, str):
        return None
    try:
        return parse_datetime(value)
    except ValueError:
        return None


@dataclass
class Page(Generic[T]):
    """One page of a cursor-paginated collection"""

    data: list[T] = field(default_factory=list)
    has_more: bool = False
    next_cursor: str | None = None

    @classmethod
    def from_api(cls, payload: dict[str, Any], item_factory: Callable[[dict[str, Any]], T]) -> Page[T]:
        pagination = payload.get("pagination") or {}
        return cls(
            data=[item_factory(item) for item in payload.get("data") or []],
            has_more=bool(pagination.get("hasMore")),
            next_cursor=pagination.get("nextCursor"),
        )

    def __iter__(self) -> Iterator[T]:
        return iter(self.data)

    def __len__(self) -> int:
        return len(self.data)


def iter_pages(fetch: Callable[..., Page[T]], *args: Any, max_pages: int = 50, **filters: Any) -> Iterator[T]:
    """
    Walk every page of a cursor-paginated listing.

    `fetch` is any client method returning a Page and accepting a `cursor`
    keyword, e.g. `iter_pages(client.list_tickets, brand_id, status="open")`.
    """
    cursor = filters.pop("cursor", None)
    for _ in range(max_pages):
        page = fetch(*args, cursor=cursor, **filters)
        yield from page.data
        if not page.has_more or not page.next_cursor:
            return
        cursor = page.next_cursor


def unwrap_list(data: Any) -> list[dict[str, Any]]:
    """Endpoints documented as arrays occasionally answer `{data: [...]}`."""
    if isinstance(data, dict):
        data = data.get("data")
    return data if isinstance(data, list) else []
