# ===============================================================================
# CSAT FEEDBACK SERVICE - PUBLIC RATING BY TOKEN ⭐
# ===============================================================================

import logging

from django.utils.translation import gettext as _

from apps.api_client.errors import KnownError, classify_error
from apps.api_client.services import DispatchAPIClient, DispatchAPIError
from apps.feedback.schemas import (
    ALLOWED_RATINGS,
    COMMENT_MAX_LENGTH,
    STATE_ERROR,
    STATE_EXPIRED,
    STATE_READY,
    STATE_SUBMITTED,
    STATE_SUCCESS,
    RatingForm,
    RatingOutcome,
)

logger = logging.getLogger(__name__)


def outcome_for_error(error: DispatchAPIError, fallback: str) -> RatingOutcome:
    """Map an API rejection onto a page state."""
    kind = classify_error(error)
    if kind is KnownError.ALREADY_SUBMITTED:
        return RatingOutcome(STATE_SUBMITTED, message=_('You have already submitted feedback for this ticket.'))
    if kind is KnownError.EXPIRED:
        return RatingOutcome(STATE_EXPIRED, message=_('This feedback request has expired.'))
    if kind is KnownError.NOT_FOUND:
        return RatingOutcome(STATE_ERROR, message=_('This feedback request was not found.'))
    return RatingOutcome(STATE_ERROR, message=error.message or fallback)


class FeedbackService:
    """
    Customer-facing rating form reached from the CSAT email.

    The feedback token is the only credential, so every call goes through an
    unauthenticated client.
    """

    def __init__(self, client: DispatchAPIClient | None = None) -> None:
        self.client = client or DispatchAPIClient(token=None)

    def get_form(self, token: str) -> RatingOutcome:
        try:
            data = self.client.get(f'/feedback/{token}')
        except DispatchAPIError as e:
            logger.info(f"⭐ [Feedback] Rating form unavailable: {e}")
            return outcome_for_error(e, _('Something went wrong'))
        return RatingOutcome(STATE_READY, form=RatingForm.from_api(data or {}))

    @staticmethod
    def validate_rating(rating_type: str, rating: object) -> bool:
        if isinstance(rating, bool) or not isinstance(rating, int):
            return False
        return rating in ALLOWED_RATINGS.get(rating_type, ())

    def submit(self, token: str, rating: int, comment: str | None = None,
               rating_type: str | None = None) -> RatingOutcome:
        """
        Submit a rating.

        When `rating_type` is known the rating is checked locally first;
        otherwise the form is fetched to learn it.
        """
        form = None
        if rating_type is None:
            current = self.get_form(token)
            if current.state != STATE_READY:
                return current
            form = current.form
            rating_type = form.rating_type

        if not self.validate_rating(rating_type, rating):
            allowed = ALLOWED_RATINGS.get(rating_type, ())
            if rating_type == 'thumbs':
                message = _('Rating must be thumbs up (1) or thumbs down (-1).')
            elif allowed:
                message = _('Rating must be between %(low)d and %(high)d.') % {
                    'low': min(allowed), 'high': max(allowed),
                }
            else:
                message = _('Unknown rating type.')
            return RatingOutcome(STATE_ERROR, form=form, message=message)

        payload: dict[str, object] = {'rating': rating}
        comment = (comment or '').strip()
        if comment:
            payload['comment'] = comment[:COMMENT_MAX_LENGTH]

        try:
            result = self.client.post(f'/feedback/{token}', payload) or {}
        except DispatchAPIError as e:
            logger.warning(f"⚠️ [Feedback] Submit rejected: {e}")
            return outcome_for_error(e, _('Failed to submit feedback'))

        logger.info(f"✅ [Feedback] Rating {rating} ({rating_type}) recorded as {result.get('id')}")
        return RatingOutcome(STATE_SUCCESS, message=result.get('message') or _('Thank you for your feedback!'))
