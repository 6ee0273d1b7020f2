"""
Tests for EcommerceAPIClient: stores, orders and products.
"""

from decimal import Decimal
from unittest.mock import patch

import pytest

from apps.ecommerce.schemas import EcommerceOrder, parse_money
from apps.ecommerce.services import EcommerceAPIClient
from tests.helpers import make_response

REQUEST_PATH = 'apps.api_client.services.requests.request'

ORDER_DATA = {
    'id': 'o1', 'storeId': 's1', 'brandId': 'b1', 'platformOrderId': 1001, 'orderNumber': '#1001',
    'status': 'REFUNDED', 'currency': 'EUR', 'subtotal': '90.00', 'total': '100.10', 'refundTotal': '20.05',
    'items': [{'id': 'i1', 'name': 'Mug', 'quantity': 2, 'unitPrice': '45.00', 'totalPrice': '90.00'}],
    'tickets': [{'ticketId': 't1', 'linkType': 'AUTOMATIC'}],
}


@pytest.fixture
def client():
    return EcommerceAPIClient(token='tok')


def test_order_money_is_decimal() -> None:
    order = EcommerceOrder.from_api(ORDER_DATA)
    assert order.total == Decimal('100.10')
    assert order.net_total == Decimal('80.05')
    assert order.items[0].unit_price == Decimal('45.00')
    assert order.tickets[0].link_type == 'AUTOMATIC'
    assert order.platform_order_id == '1001'


def test_parse_money_rejects_garbage() -> None:
    assert parse_money('12.5') == Decimal('12.5')
    assert parse_money('n/a') is None
    assert parse_money(None) is None


def test_connect_store_validates_platform(client) -> None:
    with pytest.raises(ValueError):
        client.connect_store('b1', 'etsy')


@patch(REQUEST_PATH)
def test_connect_store_sends_only_given_credentials(mock_request, client) -> None:
    mock_request.return_value = make_response(201, {'id': 's1', 'brandId': 'b1', 'name': 'Shop', 'platform': 'SHOPIFY'})

    store = client.connect_store('b1', 'SHOPIFY', code='oauth-code', redirect_uri='https://dash/cb')

    assert mock_request.call_args.kwargs['json'] == {
        'platform': 'SHOPIFY', 'code': 'oauth-code', 'redirectUri': 'https://dash/cb',
    }
    assert mock_request.call_args.kwargs['url'].endswith('/brands/b1/ecommerce/stores/connect')
    assert store.status == 'PENDING_SETUP'


@patch(REQUEST_PATH)
def test_list_orders_filters(mock_request, client) -> None:
    mock_request.return_value = make_response(200, {'data': [ORDER_DATA], 'pagination': {'hasMore': False}})

    page = client.list_orders('b1', status='REFUNDED', customer_id='c1', limit=25)

    assert mock_request.call_args.kwargs['params'] == {'status': 'REFUNDED', 'customerId': 'c1', 'limit': '25'}
    assert page.data[0].id == 'o1'


@patch(REQUEST_PATH)
def test_orders_by_ticket(mock_request, client) -> None:
    mock_request.return_value = make_response(200, [ORDER_DATA])

    [order] = client.get_ticket_orders('b1', 't1')

    assert order.order_number == '#1001'
    assert mock_request.call_args.kwargs['url'].endswith('/brands/b1/ecommerce/orders/by-ticket/t1')


@patch(REQUEST_PATH)
def test_link_and_unlink(mock_request, client) -> None:
    mock_request.return_value = make_response(200, {'success': True})

    client.link_order('b1', 'o1', 't1', link_type='MANUAL')
    assert mock_request.call_args.kwargs['json'] == {'ticketId': 't1', 'linkType': 'MANUAL'}

    client.unlink_order('b1', 'o1', 't1')
    assert mock_request.call_args.kwargs['method'] == 'DELETE'
    assert mock_request.call_args.kwargs['url'].endswith('/orders/o1/link/t1')


def test_link_type_validated(client) -> None:
    with pytest.raises(ValueError):
        client.link_order('b1', 'o1', 't1', link_type='GUESS')


@patch(REQUEST_PATH)
def test_list_products(mock_request, client) -> None:
    mock_request.return_value = make_response(200, {'data': [
        {'id': 'p1', 'storeId': 's1', 'name': 'Mug', 'price': '9.99', 'isActive': False},
    ]})

    page = client.list_products('b1', is_active=False)

    assert mock_request.call_args.kwargs['params'] == {'isActive': 'false'}
    assert page.data[0].price == Decimal('9.99')
    assert page.data[0].is_active is False
