"""
Feature request board schemas.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from apps.api_client.schemas import parse_api_datetime

FEATURE_REQUEST_STATUSES = ('open', 'planned', 'in_progress', 'completed', 'closed')


@dataclass
class FeatureRequest:
    id: str
    title: str
    status: str = 'open'
    description: str | None = None
    vote_count: int = 0
    author_id: str = ''
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> FeatureRequest:
        return cls(
            id=data['id'],
            title=data.get('title', ''),
            status=data.get('status', 'open'),
            description=data.get('description'),
            vote_count=data.get('voteCount', 0),
            author_id=data.get('authorId', ''),
            created_at=parse_api_datetime(data.get('createdAt')),
            updated_at=parse_api_datetime(data.get('updatedAt')),
        )


@dataclass
class FeatureActivity:
    """Requests the user voted for and the ones they wrote"""

    voted: list[FeatureRequest] = field(default_factory=list)
    authored: list[FeatureRequest] = field(default_factory=list)

    @property
    def voted_ids(self) -> set[str]:
        return {request.id for request in self.voted}
