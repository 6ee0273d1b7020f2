"""
E-commerce store, order and product schemas.

Money amounts arrive as decimal strings and are kept as Decimal.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal, InvalidOperation
from typing import Any

from apps.api_client.schemas import parse_api_datetime

PLATFORMS = ('BIGCOMMERCE', 'SHOPIFY', 'WOOCOMMERCE')
LINK_TYPES = ('MANUAL', 'AUTOMATIC', 'API')


def parse_money(value: Any) -> Decimal | None:
    if value is None or value == '':
        return None
    try:
        return Decimal(str(value))
    except InvalidOperation:
        return None


@dataclass
class EcommerceStore:
    id: str
    brand_id: str
    name: str
    platform: str
    store_url: str = ''
    store_id: str | None = None
    status: str = 'PENDING_SETUP'
    last_sync_at: datetime | None = None
    error_message: str | None = None
    error_count: int = 0
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def has_errors(self) -> bool:
        return self.status == 'ERROR' or self.error_count > 0

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> EcommerceStore:
        return cls(
            id=data['id'],
            brand_id=data.get('brandId', ''),
            name=data.get('name', ''),
            platform=data.get('platform', ''),
            store_url=data.get('storeUrl') or '',
            store_id=data.get('storeId'),
            status=data.get('status', 'PENDING_SETUP'),
            last_sync_at=parse_api_datetime(data.get('lastSyncAt')),
            error_message=data.get('errorMessage'),
            error_count=data.get('errorCount') or 0,
            created_at=parse_api_datetime(data.get('createdAt')),
            updated_at=parse_api_datetime(data.get('updatedAt')),
        )


@dataclass
class EcommerceOrderItem:
    id: str
    name: str
    quantity: int = 1
    sku: str | None = None
    variant_name: str | None = None
    unit_price: Decimal | None = None
    total_price: Decimal | None = None
    product_id: str | None = None

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> EcommerceOrderItem:
        return cls(
            id=data.get('id', ''),
            name=data.get('name', ''),
            quantity=data.get('quantity') or 1,
            sku=data.get('sku'),
            variant_name=data.get('variantName'),
            unit_price=parse_money(data.get('unitPrice')),
            total_price=parse_money(data.get('totalPrice')),
            product_id=data.get('productId'),
        )


@dataclass
class EcommerceOrderLink:
    """A ticket linked to an order"""

    ticket_id: str
    link_type: str = 'MANUAL'
    created_by: str | None = None
    created_at: datetime | None = None

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> EcommerceOrderLink:
        return cls(
            ticket_id=data.get('ticketId', ''),
            link_type=data.get('linkType') or 'MANUAL',
            created_by=data.get('createdBy'),
            created_at=parse_api_datetime(data.get('createdAt')),
        )


@dataclass
class EcommerceOrder:
    id: str
    store_id: str
    brand_id: str
    platform_order_id: str
    order_number: str
    status: str
    currency: str = 'USD'
    customer_id: str | None = None
    customer_email: str | None = None
    customer_name: str | None = None
    subtotal: Decimal | None = None
    shipping_total: Decimal | None = None
    tax_total: Decimal | None = None
    discount_total: Decimal | None = None
    total: Decimal | None = None
    refund_total: Decimal | None = None
    payment_status: str | None = None
    fulfillment_status: str | None = None
    items: list[EcommerceOrderItem] = field(default_factory=list)
    tickets: list[EcommerceOrderLink] = field(default_factory=list)
    platform_created_at: datetime | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def net_total(self) -> Decimal | None:
        if self.total is None:
            return None
        return self.total - (self.refund_total or Decimal('0'))

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> EcommerceOrder:
        return cls(
            id=data['id'],
            store_id=data.get('storeId', ''),
            brand_id=data.get('brandId', ''),
            platform_order_id=str(data.get('platformOrderId', '')),
            order_number=str(data.get('orderNumber', '')),
            status=data.get('status', ''),
            currency=data.get('currency') or 'USD',
            customer_id=data.get('customerId'),
            customer_email=data.get('customerEmail'),
            customer_name=data.get('customerName'),
            subtotal=parse_money(data.get('subtotal')),
            shipping_total=parse_money(data.get('shippingTotal')),
            tax_total=parse_money(data.get('taxTotal')),
            discount_total=parse_money(data.get('discountTotal')),
            total=parse_money(data.get('total')),
            refund_total=parse_money(data.get('refundTotal')),
            payment_status=data.get('paymentStatus'),
            fulfillment_status=data.get('fulfillmentStatus'),
            items=[EcommerceOrderItem.from_api(item) for item in data.get('items') or []],
            tickets=[EcommerceOrderLink.from_api(link) for link in data.get('tickets') or []],
            platform_created_at=parse_api_datetime(data.get('platformCreatedAt')),
            created_at=parse_api_datetime(data.get('createdAt')),
            updated_at=parse_api_datetime(data.get('updatedAt')),
        )


@dataclass
class EcommerceProduct:
    id: str
    store_id: str
    name: str
    brand_id: str = ''
    sku: str | None = None
    price: Decimal | None = None
    currency: str = 'USD'
    is_active: bool = True
    image_url: str | None = None

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> EcommerceProduct:
        return cls(
            id=data['id'],
            store_id=data.get('storeId', ''),
            brand_id=data.get('brandId', ''),
            name=data.get('name', ''),
            sku=data.get('sku'),
            price=parse_money(data.get('price')),
            currency=data.get('currency') or 'USD',
            is_active=data.get('isActive', True),
            image_url=data.get('imageUrl'),
        )
