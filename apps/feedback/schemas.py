"""
Public CSAT rating form schemas.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any

ALLOWED_RATINGS: dict[str, tuple[int, ...]] = {
    'thumbs': (-1, 1),  # thumbs down, thumbs up
    'scale5': (1, 2, 3, 4, 5),
    'scale10': (1, 2, 3, 4, 5, 6, 7, 8, 9, 10),
}

COMMENT_MAX_LENGTH = 1000

# Page states of the rating form
STATE_READY = 'ready'
STATE_SUCCESS = 'success'
STATE_SUBMITTED = 'submitted'
STATE_EXPIRED = 'expired'
STATE_ERROR = 'error'


@dataclass
class RatingForm:
    id: str
    rating_type: str
    ticket_title: str
    ticket_number: int | None
    public_id: str
    brand_name: str

    @property
    def allowed_ratings(self) -> tuple[int, ...]:
        return ALLOWED_RATINGS.get(self.rating_type, ())

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> RatingForm:
        ticket = data.get('ticket') or {}
        brand = data.get('brand') or {}
        return cls(
            id=data.get('id', ''),
            rating_type=data.get('ratingType', 'thumbs'),
            ticket_title=ticket.get('title', ''),
            ticket_number=ticket.get('ticketNumber'),
            public_id=ticket.get('publicId', ''),
            brand_name=brand.get('name', ''),
        )


@dataclass
class RatingOutcome:
    """What the rating page should show"""

    state: str
    form: RatingForm | None = None
    message: str = ''

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {'state': self.state, 'message': self.message}
        if self.form is not None:
            data['form'] = {**asdict(self.form), 'allowed_ratings': list(self.form.allowed_ratings)}
        return data
