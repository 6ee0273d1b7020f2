"""
Tests for DispatchSessionMiddleware: revalidation timing, fail-open, the
connect gate and sign-out on rejected tokens.
"""

from datetime import timedelta
from unittest.mock import patch

from django.test import Client, SimpleTestCase, override_settings
from django.utils import timezone

from apps.api_client.services import SESSION_TOKEN_KEY, DispatchAPIError, SessionExpiredError
from apps.tickets.schemas import DashboardStats
from apps.users.middleware import SESSION_DATA_KEY
from tests.helpers import make_session, signed_in_client

FETCH_SESSION = 'apps.users.services.AuthService.fetch_session'
DASHBOARD_STATS = 'apps.tickets.services.TicketAPIClient.get_dashboard_stats'


class TestSessionMiddleware(SimpleTestCase):
    def setUp(self):
        self.client = Client()

    def _age_session(self, **fields):
        """Rewrite session timestamps (ISO strings) by the given offsets from now."""
        session = self.client.session
        now = timezone.now()
        for key, delta in fields.items():
            session[key] = (now + delta).isoformat()
        session.save()

    # ---- anonymous ----

    def test_anonymous_page_redirects_with_next(self):
        response = self.client.get('/dashboard/')
        self.assertEqual(response.status_code, 302)
        self.assertEqual(response['Location'], '/login/?next=%2Fdashboard%2F')

    def test_anonymous_api_gets_401(self):
        response = self.client.get('/api/dashboard/stats/')
        self.assertEqual(response.status_code, 401)
        self.assertEqual(response.json(), {'error': 'Authentication required'})

    def test_public_urls_skip_validation(self):
        response = self.client.get('/status/')
        self.assertEqual(response.status_code, 200)

    # ---- validation timing ----

    @patch(DASHBOARD_STATS, return_value=DashboardStats(total=3))
    @patch(FETCH_SESSION)
    def test_recently_validated_session_is_trusted(self, mock_fetch, _stats):
        signed_in_client(self.client)

        response = self.client.get('/dashboard/', HTTP_ACCEPT='application/json')

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()['stats']['total'], 3)
        mock_fetch.assert_not_called()

    @patch(DASHBOARD_STATS, return_value=DashboardStats())
    @patch(FETCH_SESSION)
    def test_due_session_is_revalidated(self, mock_fetch, _stats):
        mock_fetch.return_value = make_session(org_role='admin')
        signed_in_client(self.client)
        self._age_session(next_validate_at=timedelta(seconds=-1))

        response = self.client.get('/dashboard/', HTTP_ACCEPT='application/json')

        self.assertEqual(response.status_code, 200)
        mock_fetch.assert_called_once_with('session-token')
        self.assertEqual(self.client.session[SESSION_DATA_KEY]['org_role'], 'admin')

    @patch(FETCH_SESSION, return_value=None)
    def test_rejected_session_is_flushed(self, _fetch):
        signed_in_client(self.client)
        self._age_session(next_validate_at=timedelta(seconds=-1))

        response = self.client.get('/api/dashboard/stats/')

        self.assertEqual(response.status_code, 401)
        self.assertNotIn(SESSION_TOKEN_KEY, self.client.session)

    @override_settings(SESSION_COOKIE_AGE_DEFAULT=60)
    @patch(FETCH_SESSION)
    def test_session_lifetime_enforced(self, mock_fetch):
        signed_in_client(self.client)
        self._age_session(authenticated_at=timedelta(minutes=-5))

        response = self.client.get('/api/dashboard/stats/')

        self.assertEqual(response.status_code, 401)
        mock_fetch.assert_not_called()

    # ---- fail-open ----

    @patch(DASHBOARD_STATS, return_value=DashboardStats())
    @patch(FETCH_SESSION, side_effect=DispatchAPIError('Dispatch API unavailable'))
    def test_fail_open_within_grace(self, _fetch, _stats):
        signed_in_client(self.client)
        self._age_session(next_validate_at=timedelta(seconds=-1), validated_at=timedelta(hours=-1))

        response = self.client.get('/dashboard/', HTTP_ACCEPT='application/json')

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()['session']['email'], 'agent@example.com')

    @patch(FETCH_SESSION, side_effect=DispatchAPIError('Dispatch API unavailable'))
    def test_fail_closed_after_grace(self, _fetch):
        signed_in_client(self.client)
        self._age_session(next_validate_at=timedelta(seconds=-1), validated_at=timedelta(hours=-7))

        response = self.client.get('/api/dashboard/stats/')

        self.assertEqual(response.status_code, 401)

    # ---- connect gate ----

    def test_unconnected_user_is_sent_to_connect(self):
        signed_in_client(self.client, session=make_session(organization_id='', connected=False))

        page = self.client.get('/dashboard/')
        self.assertEqual(page.status_code, 302)
        self.assertEqual(page['Location'], '/connect/')

        api = self.client.get('/api/dashboard/stats/')
        self.assertEqual(api.status_code, 403)
        self.assertEqual(api.json()['connect_url'], '/connect/')

        connect = self.client.get('/connect/')
        self.assertEqual(connect.status_code, 200)
        self.assertEqual(connect.json(), {'connected': False, 'email': 'agent@example.com'})

    # ---- token rejected mid-request ----

    @patch(DASHBOARD_STATS, side_effect=SessionExpiredError('Invalid token', status_code=401))
    def test_rejected_token_during_api_view_signs_out(self, _stats):
        signed_in_client(self.client)

        response = self.client.get('/api/dashboard/stats/')

        self.assertEqual(response.status_code, 401)
        self.assertNotIn(SESSION_TOKEN_KEY, self.client.session)

    @patch(DASHBOARD_STATS, side_effect=SessionExpiredError('Invalid token', status_code=401))
    def test_rejected_token_during_page_redirects(self, _stats):
        signed_in_client(self.client)

        response = self.client.get('/dashboard/')

        self.assertEqual(response.status_code, 302)
        self.assertTrue(response['Location'].startswith('/login/'))
