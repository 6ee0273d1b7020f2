"""
Tests for AuthService: magic link sign-in, session lookup and organizations.
"""

import base64
import json
from unittest.mock import Mock

import pytest

from apps.api_client.services import DispatchAPIError, SessionExpiredError
from apps.users.schemas import DispatchSession, decode_jwt_payload
from apps.users.services import AuthService
from tests.helpers import MOCK_SESSION_RESPONSE


def _jwt(claims: dict) -> str:
    def segment(data: dict) -> str:
        return base64.urlsafe_b64encode(json.dumps(data).encode()).decode().rstrip('=')
    return f"{segment({'alg': 'HS256'})}.{segment(claims)}.signature"


@pytest.fixture
def api():
    return Mock()


@pytest.fixture
def auth(api):
    return AuthService(client_class=Mock(return_value=api))


class TestMagicLink:
    def test_sent_only_on_explicit_success(self, auth, api) -> None:
        api.post.return_value = {'success': True}
        assert auth.send_magic_link('agent@example.com') is True
        api.post.assert_called_once_with('/auth/magic-link', {'email': 'agent@example.com'})

        api.post.return_value = {'success': 'yes'}
        assert auth.send_magic_link('agent@example.com') is False

    def test_api_error_is_not_sent(self, auth, api) -> None:
        api.post.side_effect = DispatchAPIError('rate limited', status_code=429)
        assert auth.send_magic_link('agent@example.com') is False

    def test_verify_token(self, auth, api) -> None:
        api.post.return_value = {**MOCK_SESSION_RESPONSE, 'success': True, 'sessionToken': 'sess-1'}

        login = auth.verify_token('magic-1')

        assert login.session_token == 'sess-1'
        assert login.session.email == 'agent@example.com'
        assert login.session.organization_id == 'org-1'
        api.post.assert_called_once_with('/auth/verify', {'token': 'magic-1'})

    def test_verify_without_session_token(self, auth, api) -> None:
        api.post.return_value = {'success': True}
        assert auth.verify_token('magic-1') is None

    def test_verify_rejected(self, auth, api) -> None:
        api.post.side_effect = DispatchAPIError('Link expired', status_code=400)
        assert auth.verify_token('magic-1') is None


class TestConnect:
    def test_connect_api_key(self, auth, api) -> None:
        api.post.return_value = {'success': True}
        assert auth.connect_api_key('sess-1', 'sk_live_abc') is True
        api.post.assert_called_once_with('/auth/connect', {'apiKey': 'sk_live_abc'})

    def test_invalid_key(self, auth, api) -> None:
        api.post.side_effect = DispatchAPIError('Invalid API key', status_code=400)
        assert auth.connect_api_key('sess-1', 'bad') is False

    def test_expired_session_propagates(self, auth, api) -> None:
        api.post.side_effect = SessionExpiredError('expired', status_code=401)
        with pytest.raises(SessionExpiredError):
            auth.connect_api_key('sess-1', 'sk_live_abc')


class TestFetchSession:
    def test_valid_session(self, auth, api) -> None:
        api.get.return_value = MOCK_SESSION_RESPONSE
        session = auth.fetch_session('sess-1')
        assert session == DispatchSession(
            customer_id='cust-1',
            email='agent@example.com',
            organization_id='org-1',
            org_role='owner',
            connected=True,
            expires_at='2030-01-01T00:00:00Z',
        )

    def test_invalid_flag(self, auth, api) -> None:
        api.get.return_value = {'valid': False}
        assert auth.fetch_session('sess-1') is None

    def test_rejected_token(self, auth, api) -> None:
        api.get.side_effect = SessionExpiredError('Invalid session', status_code=401)
        assert auth.fetch_session('sess-1') is None

    def test_user_without_organization_is_unconnected(self, auth, api) -> None:
        token = _jwt({'sub': 'cust-9', 'email': 'new@example.com'})
        api.get.side_effect = SessionExpiredError('User does not belong to an organization', status_code=401)

        session = auth.fetch_session(token)

        assert session.connected is False
        assert session.customer_id == 'cust-9'
        assert session.email == 'new@example.com'
        assert session.organization_id == ''

    def test_transport_error_propagates(self, auth, api) -> None:
        api.get.side_effect = DispatchAPIError('Dispatch API unavailable')
        with pytest.raises(DispatchAPIError):
            auth.fetch_session('sess-1')

    def test_refresh_session_swallows_transport_error(self, auth, api) -> None:
        api.get.side_effect = DispatchAPIError('Dispatch API unavailable')
        assert auth.refresh_session('sess-1') is None

    def test_other_http_error_is_no_session(self, auth, api) -> None:
        api.get.side_effect = DispatchAPIError('Server error', status_code=500)
        assert auth.fetch_session('sess-1') is None


class TestOrganizations:
    def test_list_accepts_wrapped_payload(self, auth, api) -> None:
        api.get.return_value = {'organizations': [{'id': 'org-1', 'name': 'Acme'}, {'id': 'org-2', 'name': 'Globex'}]}
        organizations = auth.list_organizations('sess-1')
        assert [org.name for org in organizations] == ['Acme', 'Globex']

    def test_switch_returns_new_token(self, auth, api) -> None:
        api.post.return_value = {'sessionToken': 'sess-2'}
        assert auth.switch_organization('sess-1', 'org-2', 'org-1') == 'sess-2'
        api.post.assert_called_once_with('/auth/switch-organization', {'organizationId': 'org-2'})

    def test_switch_keeps_token_when_none_issued(self, auth, api) -> None:
        api.post.return_value = {'success': True}
        assert auth.switch_organization('sess-1', 'org-2', 'org-1') == 'sess-1'

    def test_switch_to_current_is_noop(self, auth, api) -> None:
        assert auth.switch_organization('sess-1', 'org-1', 'org-1') == 'sess-1'
        api.post.assert_not_called()


class TestJWTPayload:
    def test_decode(self) -> None:
        assert decode_jwt_payload(_jwt({'sub': 'x'})) == {'sub': 'x'}

    def test_garbage(self) -> None:
        assert decode_jwt_payload('not-a-jwt') == {}
        assert decode_jwt_payload('a.!!!.c') == {}
