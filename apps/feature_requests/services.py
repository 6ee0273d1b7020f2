# ===============================================================================
# FEATURE REQUESTS API CLIENT SERVICE 💡
# ===============================================================================

import logging
from typing import Any

from apps.api_client.services import DispatchAPIClient
from apps.feature_requests.schemas import FeatureActivity, FeatureRequest

logger = logging.getLogger(__name__)


class FeatureRequestAPIClient(DispatchAPIClient):
    """Product feedback board: list, submit and vote on feature requests."""

    def list_requests(self, *, status: str | None = None, sort_by: str | None = None,
                      limit: int | None = None) -> list[FeatureRequest]:
        data = self.get('/auth/feature-requests', params={'status': status, 'sortBy': sort_by, 'limit': limit}) or {}
        return [FeatureRequest.from_api(item) for item in data.get('requests') or []]

    def create_request(self, title: str, description: str | None = None) -> FeatureRequest:
        payload: dict[str, Any] = {'title': title}
        if description:
            payload['description'] = description
        request = FeatureRequest.from_api(self.post('/auth/feature-requests', payload))
        logger.info(f"💡 [Feature Requests] Submitted {request.id}: {title}")
        return request

    def vote(self, request_id: str) -> bool:
        return bool((self.post(f'/auth/feature-requests/{request_id}/vote') or {}).get('success'))

    def unvote(self, request_id: str) -> bool:
        return bool((self.delete(f'/auth/feature-requests/{request_id}/vote') or {}).get('success'))

    def get_activity(self) -> FeatureActivity:
        data = self.get('/auth/feature-requests/activity') or {}
        return FeatureActivity(
            voted=[FeatureRequest.from_api(item) for item in data.get('voted') or []],
            authored=[FeatureRequest.from_api(item) for item in data.get('authored') or []],
        )
