# ===============================================================================
# TEAM API VIEWS - MEMBERS, INVITES, ORGANIZATION, API KEYS 👥
# ===============================================================================

import logging
from dataclasses import asdict
from typing import Any

from django.contrib import messages
from django.utils.translation import gettext as _
from rest_framework import status
from rest_framework.decorators import api_view
from rest_framework.request import Request
from rest_framework.response import Response

from apps.team.schemas import ORG_ROLES, TeamMember
from apps.team.services import TeamAPIClient

logger = logging.getLogger(__name__)


def serialize_member(member: TeamMember) -> dict[str, Any]:
    return {**asdict(member), 'display_name': member.display_name, 'is_pending': member.is_pending}


def _invalid_role() -> Response:
    return Response({'error': _('Invalid role'), 'allowed': list(ORG_ROLES)}, status=status.HTTP_400_BAD_REQUEST)


def _brand_scope(request: Request) -> tuple[bool, list[str]]:
    """`{all_brands, brand_ids}` from the body; a missing flag means every brand."""
    all_brands = request.data.get('all_brands', True) is not False
    brand_ids = request.data.get('brand_ids') or []
    return all_brands, [str(brand_id) for brand_id in brand_ids] if isinstance(brand_ids, list) else []


# ===============================================================================
# MEMBERS & INVITES
# ===============================================================================

@api_view(['GET'])
def team_members(request: Request) -> Response:
    """GET /api/team/members/ → {members, invites}"""
    team = TeamAPIClient(token=request.auth).get_team()
    return Response({
        'members': [serialize_member(member) for member in team.members],
        'invites': [serialize_member(invite) for invite in team.invites],
    })


@api_view(['POST'])
def team_invite(request: Request) -> Response:
    """
    ✉️ Invite a teammate

    POST /api/team/invites/ {"email": "...", "role": "member"}
    """
    email = (request.data.get('email') or '').strip()
    if not email:
        return Response({'error': _('email is required')}, status=status.HTTP_400_BAD_REQUEST)
    try:
        result = TeamAPIClient(token=request.auth).invite_member(email, request.data.get('role') or 'member')
    except ValueError:
        return _invalid_role()
    messages.success(request._request, _('Invitation sent to %(email)s.') % {'email': email})
    return Response(result, status=status.HTTP_201_CREATED)


@api_view(['POST'])
def team_resend_invite(request: Request, member_id: str) -> Response:
    return Response(TeamAPIClient(token=request.auth).resend_invite(member_id))


@api_view(['PATCH', 'DELETE'])
def team_member_detail(request: Request, member_id: str) -> Response:
    """PATCH {"role": ...} changes the role; DELETE removes the member."""
    client = TeamAPIClient(token=request.auth)
    if request.method == 'DELETE':
        return Response(client.remove_member(member_id))
    try:
        return Response(client.update_member_role(member_id, request.data.get('role') or ''))
    except ValueError:
        return _invalid_role()


@api_view(['GET', 'PUT'])
def team_member_brands(request: Request, member_id: str) -> Response:
    """Brands a member can access; PUT {all_brands, brand_ids} restricts them."""
    client = TeamAPIClient(token=request.auth)
    if request.method == 'GET':
        return Response(asdict(client.get_brand_assignments(member_id)))
    all_brands, brand_ids = _brand_scope(request)
    if not all_brands and not brand_ids:
        return Response({'error': _('brand_ids is required when all_brands is false')},
                        status=status.HTTP_400_BAD_REQUEST)
    assignment = client.update_brand_assignments(member_id, all_brands=all_brands, brand_ids=brand_ids)
    return Response(asdict(assignment))


# ===============================================================================
# ORGANIZATION
# ===============================================================================

@api_view(['GET', 'PATCH'])
def organization(request: Request) -> Response:
    client = TeamAPIClient(token=request.auth)
    if request.method == 'GET':
        return Response(asdict(client.get_organization()))
    name = (request.data.get('name') or '').strip()
    if not name:
        return Response({'error': _('name is required')}, status=status.HTTP_400_BAD_REQUEST)
    return Response(client.rename_organization(name))


# ===============================================================================
# API KEYS
# ===============================================================================

@api_view(['GET', 'POST'])
def api_keys(request: Request) -> Response:
    """
    🔑 Account API keys

    GET lists keys (prefix only). POST {name?, all_brands?, brand_ids?} creates
    one; the response is the only time the full `key` is returned.
    """
    client = TeamAPIClient(token=request.auth)
    if request.method == 'GET':
        return Response({'data': [asdict(api_key) for api_key in client.list_api_keys()]})

    all_brands, brand_ids = _brand_scope(request)
    api_key = client.create_api_key(request.data.get('name') or None, all_brands=all_brands, brand_ids=brand_ids)
    return Response(asdict(api_key), status=status.HTTP_201_CREATED)


@api_view(['PATCH', 'DELETE'])
def api_key_detail(request: Request, key_id: str) -> Response:
    """PATCH {all_brands, brand_ids} rescopes the key; DELETE revokes it."""
    client = TeamAPIClient(token=request.auth)
    if request.method == 'DELETE':
        return Response(client.revoke_api_key(key_id))
    all_brands, brand_ids = _brand_scope(request)
    return Response(client.update_api_key_scope(key_id, all_brands=all_brands, brand_ids=brand_ids))
