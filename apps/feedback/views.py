# ===============================================================================
# PUBLIC RATING VIEW ⭐
# ===============================================================================

from django.http import HttpRequest, JsonResponse
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_http_methods

from apps.common.payloads import read_payload
from apps.feedback.schemas import STATE_ERROR, STATE_EXPIRED, STATE_READY, STATE_SUBMITTED, STATE_SUCCESS
from apps.feedback.services import FeedbackService

HTTP_STATUS_BY_STATE = {
    STATE_READY: 200,
    STATE_SUCCESS: 200,
    STATE_SUBMITTED: 409,
    STATE_EXPIRED: 410,
    STATE_ERROR: 400,
}


def _coerce_rating(value: object) -> object:
    """Form posts carry the rating as text."""
    if isinstance(value, str) and value.strip().lstrip('-').isdigit():
        return int(value)
    return value


@csrf_exempt  # Reached from an email link without a dashboard session
@require_http_methods(["GET", "POST"])
def rate_view(request: HttpRequest, token: str) -> JsonResponse:
    """
    ⭐ CSAT rating page

    GET /rate/<token>/ loads the form; POST {rating, comment?} submits it.
    """
    service = FeedbackService()
    if request.method == 'GET':
        outcome = service.get_form(token)
    else:
        payload = read_payload(request)
        outcome = service.submit(token, _coerce_rating(payload.get('rating')), payload.get('comment'))
    return JsonResponse(outcome.to_dict(), status=HTTP_STATUS_BY_STATE.get(outcome.state, 400))
