# ===============================================================================
# FEATURE REQUEST API VIEWS 💡
# ===============================================================================

from dataclasses import asdict
from typing import Any

from django.utils.translation import gettext as _
from rest_framework import status
from rest_framework.decorators import api_view
from rest_framework.request import Request
from rest_framework.response import Response

from apps.common.payloads import page_size
from apps.feature_requests.schemas import FEATURE_REQUEST_STATUSES, FeatureRequest
from apps.feature_requests.services import FeatureRequestAPIClient

SORT_OPTIONS = ('votes', 'newest', 'oldest')


def serialize_request(request_item: FeatureRequest, voted_ids: set[str]) -> dict[str, Any]:
    return {**asdict(request_item), 'voted': request_item.id in voted_ids}


@api_view(['GET', 'POST'])
def feature_requests(request: Request) -> Response:
    """
    💡 Feature request board

    GET ?status=&sort_by=votes|newest|oldest&limit= lists requests, each flagged with
    whether the current user voted for it. POST {title, description?} submits one.
    """
    client = FeatureRequestAPIClient(token=request.auth)
    if request.method == 'POST':
        title = (request.data.get('title') or '').strip()
        if not title:
            return Response({'error': _('title is required')}, status=status.HTTP_400_BAD_REQUEST)
        created = client.create_request(title, (request.data.get('description') or '').strip() or None)
        return Response(serialize_request(created, set()), status=status.HTTP_201_CREATED)

    params = request.query_params
    status_filter = params.get('status')
    sort_by = params.get('sort_by')
    items = client.list_requests(
        status=status_filter if status_filter in FEATURE_REQUEST_STATUSES else None,
        sort_by=sort_by if sort_by in SORT_OPTIONS else None,
        limit=page_size(request),
    )
    voted_ids = client.get_activity().voted_ids
    return Response({'data': [serialize_request(item, voted_ids) for item in items]})


@api_view(['POST', 'DELETE'])
def feature_request_vote(request: Request, request_id: str) -> Response:
    """POST votes, DELETE withdraws the vote."""
    client = FeatureRequestAPIClient(token=request.auth)
    success = client.vote(request_id) if request.method == 'POST' else client.unvote(request_id)
    return Response({'success': success})


@api_view(['GET'])
def feature_request_activity(request: Request) -> Response:
    """The user's own requests and the ones they voted for."""
    activity = FeatureRequestAPIClient(token=request.auth).get_activity()
    return Response({
        'voted': [asdict(item) for item in activity.voted],
        'authored': [asdict(item) for item in activity.authored],
    })
