# ===============================================================================
# E-COMMERCE API VIEWS - STORES, ORDERS, PRODUCTS 🛒
# ===============================================================================

from dataclasses import asdict
from decimal import Decimal
from typing import Any

from django.utils.translation import gettext as _
from rest_framework import status
from rest_framework.decorators import api_view
from rest_framework.request import Request
from rest_framework.response import Response

from apps.api_client.schemas import Page
from apps.common.payloads import page_size
from apps.ecommerce.schemas import LINK_TYPES, PLATFORMS, EcommerceOrder, EcommerceProduct, EcommerceStore
from apps.ecommerce.services import EcommerceAPIClient

ORDER_MONEY_FIELDS = ('subtotal', 'shipping_total', 'tax_total', 'discount_total', 'total', 'refund_total')
ITEM_MONEY_FIELDS = ('unit_price', 'total_price')


def _money(value: Decimal | None) -> str | None:
    # Strings keep the exact amount; floats would not
    return None if value is None else str(value)


def serialize_store(store: EcommerceStore) -> dict[str, Any]:
    return {**asdict(store), 'has_errors': store.has_errors}


def serialize_order(order: EcommerceOrder) -> dict[str, Any]:
    data = asdict(order)
    for name in ORDER_MONEY_FIELDS:
        data[name] = _money(data[name])
    data['net_total'] = _money(order.net_total)
    for item in data['items']:
        for name in ITEM_MONEY_FIELDS:
            item[name] = _money(item[name])
    return data


def serialize_product(product: EcommerceProduct) -> dict[str, Any]:
    return {**asdict(product), 'price': _money(product.price)}


def _page(page: Page, serialize: Any) -> dict[str, Any]:
    return {
        'data': [serialize(item) for item in page],
        'pagination': {'has_more': page.has_more, 'next_cursor': page.next_cursor},
    }


# ===============================================================================
# STORES
# ===============================================================================

@api_view(['GET'])
def store_list(request: Request, brand_id: str) -> Response:
    stores = EcommerceAPIClient(token=request.auth).list_stores(brand_id)
    return Response({'data': [serialize_store(store) for store in stores]})


@api_view(['POST'])
def store_connect(request: Request, brand_id: str) -> Response:
    """
    🔌 Connect a shop

    POST /api/brands/<brand_id>/ecommerce/stores/connect/
    {"platform": "SHOPIFY", "code": ..., "redirect_uri": ...} or
    {"platform": "BIGCOMMERCE", "access_token": ..., "store_hash": ...}
    """
    data = request.data
    platform = (data.get('platform') or '').upper()
    try:
        store = EcommerceAPIClient(token=request.auth).connect_store(
            brand_id,
            platform,
            code=data.get('code'),
            redirect_uri=data.get('redirect_uri'),
            access_token=data.get('access_token'),
            store_hash=data.get('store_hash'),
        )
    except ValueError:
        return Response({'error': _('Unsupported platform'), 'allowed': list(PLATFORMS)},
                        status=status.HTTP_400_BAD_REQUEST)
    return Response(serialize_store(store), status=status.HTTP_201_CREATED)


@api_view(['DELETE'])
def store_disconnect(request: Request, brand_id: str, store_id: str) -> Response:
    return Response(EcommerceAPIClient(token=request.auth).disconnect_store(brand_id, store_id))


@api_view(['POST'])
def store_sync(request: Request, brand_id: str, store_id: str) -> Response:
    return Response(EcommerceAPIClient(token=request.auth).sync_store(brand_id, store_id))


# ===============================================================================
# ORDERS
# ===============================================================================

@api_view(['GET'])
def order_list(request: Request, brand_id: str) -> Response:
    """GET /api/brands/<brand_id>/ecommerce/orders/?status=&customer_id=&search=&store_id=&cursor=&limit="""
    params = request.query_params
    page = EcommerceAPIClient(token=request.auth).list_orders(
        brand_id,
        status=params.get('status'),
        customer_id=params.get('customer_id'),
        search=params.get('search'),
        store_id=params.get('store_id'),
        cursor=params.get('cursor'),
        limit=page_size(request),
    )
    return Response(_page(page, serialize_order))


@api_view(['GET'])
def order_detail(request: Request, brand_id: str, order_id: str) -> Response:
    return Response(serialize_order(EcommerceAPIClient(token=request.auth).get_order(brand_id, order_id)))


@api_view(['GET'])
def customer_orders(request: Request, brand_id: str, customer_id: str) -> Response:
    orders = EcommerceAPIClient(token=request.auth).get_customer_orders(brand_id, customer_id)
    return Response({'data': [serialize_order(order) for order in orders]})


@api_view(['GET'])
def ticket_orders(request: Request, brand_id: str, ticket_id: str) -> Response:
    """Orders linked to a ticket, shown in the ticket sidebar."""
    orders = EcommerceAPIClient(token=request.auth).get_ticket_orders(brand_id, ticket_id)
    return Response({'data': [serialize_order(order) for order in orders]})


@api_view(['POST'])
def order_link(request: Request, brand_id: str, order_id: str) -> Response:
    """POST {"ticket_id": ..., "link_type": "MANUAL"?} links an order to a ticket."""
    ticket_id = (request.data.get('ticket_id') or '').strip()
    if not ticket_id:
        return Response({'error': _('ticket_id is required')}, status=status.HTTP_400_BAD_REQUEST)
    try:
        result = EcommerceAPIClient(token=request.auth).link_order(
            brand_id, order_id, ticket_id, link_type=request.data.get('link_type') or None,
        )
    except ValueError:
        return Response({'error': _('Unsupported link type'), 'allowed': list(LINK_TYPES)},
                        status=status.HTTP_400_BAD_REQUEST)
    return Response(result, status=status.HTTP_201_CREATED)


@api_view(['DELETE'])
def order_unlink(request: Request, brand_id: str, order_id: str, ticket_id: str) -> Response:
    return Response(EcommerceAPIClient(token=request.auth).unlink_order(brand_id, order_id, ticket_id))


# ===============================================================================
# PRODUCTS
# ===============================================================================

@api_view(['GET'])
def product_list(request: Request, brand_id: str) -> Response:
    params = request.query_params
    active = params.get('active')
    page = EcommerceAPIClient(token=request.auth).list_products(
        brand_id,
        store_id=params.get('store_id'),
        search=params.get('search'),
        is_active={'true': True, 'false': False}.get(active or ''),
        cursor=params.get('cursor'),
        limit=page_size(request),
    )
    return Response(_page(page, serialize_product))
