"""
Tests for the team API views.
"""

from unittest.mock import patch

from django.test import Client, SimpleTestCase

from apps.team.schemas import ApiKey, BrandAssignment, Team, TeamMember
from tests.helpers import signed_in_client

CLIENT = 'apps.team.views.TeamAPIClient'


class TestTeamViews(SimpleTestCase):
    def setUp(self):
        self.client = signed_in_client(Client())

    @patch(f'{CLIENT}.get_team')
    def test_members_and_invites(self, mock_team):
        mock_team.return_value = Team(
            members=[TeamMember(id='m1', email='sam@example.com', role='owner', first_name='Sam')],
            invites=[TeamMember(id='i1', email='kim@example.com', role='member', status='pending')],
        )

        data = self.client.get('/api/team/members/').json()

        self.assertEqual(data['members'][0]['display_name'], 'Sam')
        self.assertTrue(data['invites'][0]['is_pending'])

    @patch('apps.team.services.TeamAPIClient.post')
    def test_invite_rejects_unknown_role_before_calling_api(self, mock_post):
        response = self.client.post('/api/team/invites/', data={'email': 'new@example.com', 'role': 'root'},
                                    content_type='application/json')

        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()['allowed'], ['owner', 'admin', 'member'])
        mock_post.assert_not_called()

    @patch(f'{CLIENT}.invite_member', return_value={'success': True})
    def test_invite(self, mock_invite):
        response = self.client.post('/api/team/invites/', data={'email': 'new@example.com'},
                                    content_type='application/json')

        self.assertEqual(response.status_code, 201)
        mock_invite.assert_called_once_with('new@example.com', 'member')

    def test_invite_requires_email(self):
        response = self.client.post('/api/team/invites/', data={}, content_type='application/json')
        self.assertEqual(response.status_code, 400)

    @patch(f'{CLIENT}.remove_member', return_value={'success': True})
    def test_remove_member(self, mock_remove):
        response = self.client.delete('/api/team/members/m1/')
        self.assertEqual(response.json(), {'success': True})
        mock_remove.assert_called_once_with('m1')

    @patch(f'{CLIENT}.update_brand_assignments')
    def test_restrict_member_brands(self, mock_update):
        mock_update.return_value = BrandAssignment(all_brands=False, brand_ids=['b1'])

        response = self.client.put('/api/team/members/m1/brands/', data={'all_brands': False, 'brand_ids': ['b1']},
                                   content_type='application/json')

        self.assertEqual(response.json()['brand_ids'], ['b1'])
        mock_update.assert_called_once_with('m1', all_brands=False, brand_ids=['b1'])

    def test_restricting_to_no_brands_is_rejected(self):
        response = self.client.put('/api/team/members/m1/brands/', data={'all_brands': False},
                                   content_type='application/json')
        self.assertEqual(response.status_code, 400)

    @patch(f'{CLIENT}.create_api_key')
    def test_create_api_key_returns_secret(self, mock_create):
        mock_create.return_value = ApiKey(id='k1', name='CI', prefix='dk_live_ab', key='dk_live_abcdef')

        response = self.client.post('/api/team/api-keys/', data={'name': 'CI'}, content_type='application/json')

        self.assertEqual(response.status_code, 201)
        self.assertEqual(response.json()['key'], 'dk_live_abcdef')
        mock_create.assert_called_once_with('CI', all_brands=True, brand_ids=[])

    @patch(f'{CLIENT}.revoke_api_key', return_value={'success': True})
    def test_revoke_api_key(self, mock_revoke):
        self.client.delete('/api/team/api-keys/k1/')
        mock_revoke.assert_called_once_with('k1')

    def test_requires_session(self):
        self.assertEqual(Client().get('/api/team/members/').status_code, 401)
