"""
Tests for the ticket API views.
"""

from unittest.mock import patch

from django.test import Client, SimpleTestCase

from apps.api_client.schemas import Page
from apps.api_client.services import DispatchAPIError
from apps.tickets.schemas import Ticket
from tests.helpers import signed_in_client

CLIENT = 'apps.tickets.views.TicketAPIClient'


class TestTicketViews(SimpleTestCase):
    def setUp(self):
        self.client = signed_in_client(Client())

    @patch(f'{CLIENT}.list_tickets')
    def test_list_clamps_page_size(self, mock_list):
        mock_list.return_value = Page(data=[Ticket(id='t1', brand_id='b1', title='x', ticket_number=3)],
                                      has_more=True, next_cursor='n2')

        data = self.client.get('/api/brands/b1/tickets/', {'limit': '500', 'spam': 'true'}).json()

        self.assertEqual(data['data'][0]['label'], '#3')
        self.assertEqual(data['pagination'], {'has_more': True, 'next_cursor': 'n2'})
        self.assertEqual(mock_list.call_args.kwargs['limit'], 100)
        self.assertTrue(mock_list.call_args.kwargs['is_spam'])

    @patch(f'{CLIENT}.bulk_action', return_value={'success': 2, 'failed': 0})
    def test_bulk_action(self, _bulk):
        response = self.client.post('/api/brands/b1/tickets/bulk/', data={'action': 'close', 'ticket_ids': ['a', 'b']},
                                    content_type='application/json')
        self.assertEqual(response.json(), {'success': 2, 'failed': 0})

    def test_bulk_action_rejects_unknown_action(self):
        response = self.client.post('/api/brands/b1/tickets/bulk/', data={'action': 'archive', 'ticket_ids': ['a']},
                                    content_type='application/json')
        self.assertEqual(response.status_code, 400)
        self.assertIn('resolve', response.json()['allowed'])

    def test_bulk_action_requires_ids(self):
        response = self.client.post('/api/brands/b1/tickets/bulk/', data={'action': 'close', 'ticket_ids': []},
                                    content_type='application/json')
        self.assertEqual(response.status_code, 400)

    @patch('apps.notifications.services.MentionTracker.acknowledge_ticket', return_value={'success': True})
    def test_viewed_acknowledges_mentions(self, mock_ack):
        response = self.client.post('/api/brands/b1/tickets/t1/viewed/')
        self.assertEqual(response.json(), {'success': True})
        mock_ack.assert_called_once_with('t1')

    @patch(f'{CLIENT}.get_ticket', side_effect=DispatchAPIError('Ticket not found', status_code=404))
    def test_upstream_error_is_relayed(self, _get):
        response = self.client.get('/api/brands/b1/tickets/missing/')
        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.json(), {'error': 'Ticket not found'})
