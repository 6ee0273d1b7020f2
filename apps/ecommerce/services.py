# ===============================================================================
# E-COMMERCE API CLIENT SERVICE - STORES, ORDERS, PRODUCTS 🛒
# ===============================================================================

import logging
from typing import Any

from apps.api_client.schemas import Page, unwrap_list
from apps.api_client.services import DispatchAPIClient
from apps.ecommerce.schemas import LINK_TYPES, PLATFORMS, EcommerceOrder, EcommerceProduct, EcommerceStore

logger = logging.getLogger(__name__)


class EcommerceAPIClient(DispatchAPIClient):
    """Connected shops of a brand and the orders linked to its tickets."""

    @staticmethod
    def _base(brand_id: str) -> str:
        return f'/brands/{brand_id}/ecommerce'

    # ===============================================================================
    # STORES
    # ===============================================================================

    def list_stores(self, brand_id: str) -> list[EcommerceStore]:
        return [EcommerceStore.from_api(item) for item in unwrap_list(self.get(f'{self._base(brand_id)}/stores'))]

    def connect_store(self, brand_id: str, platform: str, *, code: str | None = None,
                      redirect_uri: str | None = None, access_token: str | None = None,
                      store_hash: str | None = None) -> EcommerceStore:
        """
        Connect a shop to the brand.

        SHOPIFY connects with an OAuth `code` + `redirect_uri`; BIGCOMMERCE with
        `access_token` + `store_hash`.

        Raises:
            ValueError: unknown platform
        """
        if platform not in PLATFORMS:
            raise ValueError(f"Unsupported platform: {platform!r}")

        payload: dict[str, Any] = {'platform': platform}
        optional = {'code': code, 'redirectUri': redirect_uri, 'accessToken': access_token, 'storeHash': store_hash}
        payload.update({key: value for key, value in optional.items() if value})

        store = EcommerceStore.from_api(self.post(f'{self._base(brand_id)}/stores/connect', payload))
        logger.info(f"🛒 [Ecommerce API] Connected {platform} store {store.id} to brand {brand_id}")
        return store

    def disconnect_store(self, brand_id: str, store_id: str) -> dict[str, Any]:
        result = self.delete(f'{self._base(brand_id)}/stores/{store_id}') or {}
        logger.info(f"🛒 [Ecommerce API] Disconnected store {store_id}")
        return result

    def sync_store(self, brand_id: str, store_id: str) -> dict[str, Any]:
        return self.post(f'{self._base(brand_id)}/stores/{store_id}/sync') or {}

    # ===============================================================================
    # ORDERS
    # ===============================================================================

    def list_orders(self, brand_id: str, *, status: str | None = None, customer_id: str | None = None,
                    search: str | None = None, store_id: str | None = None,
                    cursor: str | None = None, limit: int | None = None) -> Page[EcommerceOrder]:
        return self.get_page(
            f'{self._base(brand_id)}/orders',
            EcommerceOrder.from_api,
            params={
                'status': status,
                'customerId': customer_id,
                'search': search,
                'storeId': store_id,
                'cursor': cursor,
                'limit': limit,
            },
        )

    def get_order(self, brand_id: str, order_id: str) -> EcommerceOrder:
        return EcommerceOrder.from_api(self.get(f'{self._base(brand_id)}/orders/{order_id}'))

    def get_customer_orders(self, brand_id: str, customer_id: str) -> list[EcommerceOrder]:
        data = self.get(f'{self._base(brand_id)}/orders/by-customer/{customer_id}')
        return [EcommerceOrder.from_api(item) for item in unwrap_list(data)]

    def get_ticket_orders(self, brand_id: str, ticket_id: str) -> list[EcommerceOrder]:
        data = self.get(f'{self._base(brand_id)}/orders/by-ticket/{ticket_id}')
        return [EcommerceOrder.from_api(item) for item in unwrap_list(data)]

    def link_order(self, brand_id: str, order_id: str, ticket_id: str,
                   link_type: str | None = None) -> dict[str, Any]:
        payload = {'ticketId': ticket_id}
        if link_type:
            if link_type not in LINK_TYPES:
                raise ValueError(f"Unsupported link type: {link_type!r}")
            payload['linkType'] = link_type
        result = self.post(f'{self._base(brand_id)}/orders/{order_id}/link', payload) or {}
        logger.info(f"🔗 [Ecommerce API] Linked order {order_id} to ticket {ticket_id}")
        return result

    def unlink_order(self, brand_id: str, order_id: str, ticket_id: str) -> dict[str, Any]:
        return self.delete(f'{self._base(brand_id)}/orders/{order_id}/link/{ticket_id}') or {}

    # ===============================================================================
    # PRODUCTS
    # ===============================================================================

    def list_products(self, brand_id: str, *, store_id: str | None = None, search: str | None = None,
                      is_active: bool | None = None, cursor: str | None = None,
                      limit: int | None = None) -> Page[EcommerceProduct]:
        return self.get_page(
            f'{self._base(brand_id)}/products',
            EcommerceProduct.from_api,
            params={'storeId': store_id, 'search': search, 'isActive': is_active, 'cursor': cursor, 'limit': limit},
        )
