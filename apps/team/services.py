# ===============================================================================
# TEAM API CLIENT SERVICE - MEMBERS, ORGANIZATION, API KEYS 👥
# ===============================================================================

import logging
from typing import Any

from apps.api_client.schemas import unwrap_list
from apps.api_client.services import DispatchAPIClient
from apps.team.schemas import ORG_ROLES, ApiKey, BrandAssignment, Team
from apps.users.schemas import Organization

logger = logging.getLogger(__name__)


def _validate_role(role: str) -> None:
    if role not in ORG_ROLES:
        raise ValueError(f"Invalid role: {role!r} (expected one of {', '.join(ORG_ROLES)})")


class TeamAPIClient(DispatchAPIClient):
    """
    Organization administration for the signed-in user.

    Member and organization endpoints live under `/auth/`; API keys belong to
    the account at `/accounts/me/api-keys`.
    """

    # ===============================================================================
    # MEMBERS & INVITES
    # ===============================================================================

    def get_team(self) -> Team:
        return Team.from_api(self.get('/auth/members') or {})

    def invite_member(self, email: str, role: str = 'member') -> dict[str, Any]:
        """
        Invite someone to the organization.

        Raises:
            ValueError: role is not owner, admin or member
        """
        _validate_role(role)
        result = self.post('/auth/members/invite', {'email': email, 'role': role}) or {}
        logger.info(f"✉️ [Team API] Invited {email} as {role}")
        return result

    def resend_invite(self, member_id: str) -> dict[str, Any]:
        return self.post(f'/auth/members/{member_id}/resend-invite') or {}

    def update_member_role(self, member_id: str, role: str) -> dict[str, Any]:
        _validate_role(role)
        result = self.patch(f'/auth/members/{member_id}', {'role': role}) or {}
        logger.info(f"✅ [Team API] Member {member_id} is now {role}")
        return result

    def remove_member(self, member_id: str) -> dict[str, Any]:
        result = self.delete(f'/auth/members/{member_id}') or {}
        logger.info(f"🗑️ [Team API] Removed member {member_id}")
        return result

    def get_brand_assignments(self, member_id: str) -> BrandAssignment:
        return BrandAssignment.from_api(self.get(f'/auth/members/{member_id}/brands') or {})

    def update_brand_assignments(self, member_id: str, *, all_brands: bool,
                                 brand_ids: list[str] | None = None) -> BrandAssignment:
        data: dict[str, Any] = {'allBrands': all_brands}
        if not all_brands:
            data['brandIds'] = list(brand_ids or [])
        return BrandAssignment.from_api(self.put(f'/auth/members/{member_id}/brands', data) or {})

    # ===============================================================================
    # ORGANIZATION
    # ===============================================================================

    def get_organization(self) -> Organization:
        return Organization.from_api(self.get('/auth/organization') or {})

    def rename_organization(self, name: str) -> dict[str, Any]:
        return self.patch('/auth/organization', {'name': name}) or {}

    # ===============================================================================
    # API KEYS
    # ===============================================================================

    def list_api_keys(self) -> list[ApiKey]:
        return [ApiKey.from_api(item) for item in unwrap_list(self.get('/accounts/me/api-keys'))]

    def create_api_key(self, name: str | None = None, *, all_brands: bool = True,
                       brand_ids: list[str] | None = None) -> ApiKey:
        """Create a key; the returned ApiKey carries the secret exactly once."""
        data: dict[str, Any] = {'allBrands': all_brands}
        if name:
            data['name'] = name
        if not all_brands:
            data['brandIds'] = list(brand_ids or [])
        api_key = ApiKey.from_api(self.post('/accounts/me/api-keys', data))
        logger.info(f"🔑 [Team API] Created API key {api_key.prefix}")
        return api_key

    def update_api_key_scope(self, key_id: str, *, all_brands: bool,
                             brand_ids: list[str] | None = None) -> dict[str, Any]:
        data: dict[str, Any] = {'allBrands': all_brands}
        if not all_brands:
            data['brandIds'] = list(brand_ids or [])
        return self.patch(f'/accounts/me/api-keys/{key_id}/scope', data) or {}

    def revoke_api_key(self, key_id: str) -> dict[str, Any]:
        result = self.delete(f'/accounts/me/api-keys/{key_id}') or {}
        logger.info(f"🔑 [Team API] Revoked API key {key_id}")
        return result
