"""
Tests for the e-commerce API views.
"""

from decimal import Decimal
from unittest.mock import patch

from django.test import Client, SimpleTestCase

from apps.api_client.schemas import Page
from apps.ecommerce.schemas import EcommerceOrder, EcommerceOrderItem, EcommerceStore
from tests.helpers import signed_in_client

CLIENT = 'apps.ecommerce.views.EcommerceAPIClient'


def _order() -> EcommerceOrder:
    return EcommerceOrder(
        id='o1', store_id='s1', brand_id='b1', platform_order_id='1001', order_number='#1001',
        status='PAID', total=Decimal('100.10'), refund_total=Decimal('20.05'),
        items=[EcommerceOrderItem(id='i1', name='Mug', quantity=2, unit_price=Decimal('45.00'))],
    )


class TestEcommerceViews(SimpleTestCase):
    def setUp(self):
        self.client = signed_in_client(Client())

    @patch(f'{CLIENT}.list_orders')
    def test_order_amounts_are_exact_strings(self, mock_list):
        mock_list.return_value = Page(data=[_order()])

        data = self.client.get('/api/brands/b1/ecommerce/orders/', {'customer_id': 'c1'}).json()

        order = data['data'][0]
        self.assertEqual(order['total'], '100.10')
        self.assertEqual(order['net_total'], '80.05')
        self.assertEqual(order['items'][0]['unit_price'], '45.00')
        self.assertIsNone(order['subtotal'])
        self.assertEqual(mock_list.call_args.args, ('b1',))
        self.assertEqual(mock_list.call_args.kwargs['customer_id'], 'c1')

    @patch(f'{CLIENT}.get_ticket_orders')
    def test_ticket_orders(self, mock_orders):
        mock_orders.return_value = [_order()]
        data = self.client.get('/api/brands/b1/ecommerce/orders/by-ticket/t1/').json()
        self.assertEqual(data['data'][0]['order_number'], '#1001')
        mock_orders.assert_called_once_with('b1', 't1')

    @patch(f'{CLIENT}.connect_store')
    def test_connect_store(self, mock_connect):
        mock_connect.return_value = EcommerceStore(id='s1', brand_id='b1', name='Shop', platform='SHOPIFY')

        response = self.client.post('/api/brands/b1/ecommerce/stores/connect/',
                                    data={'platform': 'shopify', 'code': 'oauth-code'},
                                    content_type='application/json')

        self.assertEqual(response.status_code, 201)
        self.assertEqual(mock_connect.call_args.args, ('b1', 'SHOPIFY'))
        self.assertFalse(response.json()['has_errors'])

    @patch('apps.ecommerce.services.EcommerceAPIClient.post')
    def test_unknown_platform_is_rejected(self, mock_post):
        response = self.client.post('/api/brands/b1/ecommerce/stores/connect/', data={'platform': 'etsy'},
                                    content_type='application/json')

        self.assertEqual(response.status_code, 400)
        self.assertIn('SHOPIFY', response.json()['allowed'])
        mock_post.assert_not_called()

    @patch(f'{CLIENT}.link_order', return_value={'success': True})
    def test_link_order(self, mock_link):
        response = self.client.post('/api/brands/b1/ecommerce/orders/o1/link/', data={'ticket_id': 't1'},
                                    content_type='application/json')

        self.assertEqual(response.status_code, 201)
        mock_link.assert_called_once_with('b1', 'o1', 't1', link_type=None)

    def test_link_requires_ticket(self):
        response = self.client.post('/api/brands/b1/ecommerce/orders/o1/link/', data={},
                                    content_type='application/json')
        self.assertEqual(response.status_code, 400)

    @patch(f'{CLIENT}.unlink_order', return_value={'success': True})
    def test_unlink_order(self, mock_unlink):
        self.client.delete('/api/brands/b1/ecommerce/orders/o1/link/t1/')
        mock_unlink.assert_called_once_with('b1', 'o1', 't1')
