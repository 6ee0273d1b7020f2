# ===============================================================================
# BRANDS API CLIENT SERVICE - BRANDS, CUSTOMERS, COMPANIES, STATUSES 🏷️
# ===============================================================================

import logging
from typing import Any

from apps.api_client.errors import KnownError, classify_error
from apps.api_client.schemas import Page, unwrap_list
from apps.api_client.services import DispatchAPIClient, DispatchAPIError
from apps.brands.schemas import Brand, Company, Customer, TicketStatus

logger = logging.getLogger(__name__)


class BrandAPIClient(DispatchAPIClient):
    """
    Brand administration API client.

    Brands are served from `/workspaces`; everything else is nested under
    `/brands/<brand_id>/`.
    """

    # ===============================================================================
    # BRANDS
    # ===============================================================================

    def list_brands(self) -> list[Brand]:
        return [Brand.from_api(item) for item in unwrap_list(self.get('/workspaces'))]

    def get_brand(self, brand_id: str) -> Brand:
        return Brand.from_api(self.get(f'/workspaces/{brand_id}'))

    def create_brand(self, name: str, **fields: Any) -> Brand:
        brand = Brand.from_api(self.post('/workspaces', {'name': name, **fields}))
        logger.info(f"✅ [Brands API] Created brand {brand.name} ({brand.id})")
        return brand

    def update_brand(self, brand_id: str, **changes: Any) -> Brand:
        return Brand.from_api(self.patch(f'/workspaces/{brand_id}', changes))

    def delete_brand(self, brand_id: str) -> None:
        self.delete(f'/workspaces/{brand_id}')
        logger.info(f"🗑️ [Brands API] Deleted brand {brand_id}")

    # ===============================================================================
    # CUSTOMERS
    # ===============================================================================

    def list_customers(self, brand_id: str, *, search: str | None = None, company_id: str | None = None,
                       cursor: str | None = None, limit: int | None = None) -> Page[Customer]:
        params = {'search': search, 'companyId': company_id, 'cursor': cursor, 'limit': limit}
        return self.get_page(f'/brands/{brand_id}/customers', Customer.from_api, params=params)

    def get_customer(self, brand_id: str, customer_id: str) -> Customer | None:
        """Fetch one customer; a customer the API no longer knows is None."""
        try:
            return Customer.from_api(self.get(f'/brands/{brand_id}/customers/{customer_id}'))
        except DispatchAPIError as e:
            if classify_error(e) is KnownError.CUSTOMER_NOT_FOUND:
                logger.info(f"⚠️ [Brands API] Customer {customer_id} not found in brand {brand_id}")
                return None
            raise

    def create_customer(self, brand_id: str, email: str, **fields: Any) -> Customer:
        return Customer.from_api(self.post(f'/brands/{brand_id}/customers', {'email': email, **fields}))

    def update_customer(self, brand_id: str, customer_id: str, **changes: Any) -> Customer:
        return Customer.from_api(self.patch(f'/brands/{brand_id}/customers/{customer_id}', changes))

    def delete_customer(self, brand_id: str, customer_id: str) -> None:
        self.delete(f'/brands/{brand_id}/customers/{customer_id}')

    def search_customers(self, brand_id: str, query: str) -> list[Customer]:
        data = self.get(f'/brands/{brand_id}/customers/search', params={'q': query})
        return [Customer.from_api(item) for item in unwrap_list(data)]

    # ===============================================================================
    # COMPANIES
    # ===============================================================================

    def list_companies(self, brand_id: str, *, search: str | None = None, cursor: str | None = None,
                       limit: int | None = None) -> Page[Company]:
        params = {'search': search, 'cursor': cursor, 'limit': limit}
        return self.get_page(f'/brands/{brand_id}/companies', Company.from_api, params=params)

    def get_company(self, brand_id: str, company_id: str) -> Company:
        return Company.from_api(self.get(f'/brands/{brand_id}/companies/{company_id}'))

    def create_company(self, brand_id: str, name: str, domain: str | None = None, **fields: Any) -> Company:
        data = {'name': name, **fields}
        if domain:
            data['domain'] = domain
        return Company.from_api(self.post(f'/brands/{brand_id}/companies', data))

    def update_company(self, brand_id: str, company_id: str, **changes: Any) -> Company:
        return Company.from_api(self.patch(f'/brands/{brand_id}/companies/{company_id}', changes))

    def delete_company(self, brand_id: str, company_id: str) -> None:
        self.delete(f'/brands/{brand_id}/companies/{company_id}')

    # ===============================================================================
    # TICKET STATUSES
    # ===============================================================================

    def list_statuses(self, brand_id: str) -> list[TicketStatus]:
        return [TicketStatus.from_api(item) for item in unwrap_list(self.get(f'/brands/{brand_id}/statuses'))]

    def get_status_stats(self, brand_id: str) -> list[TicketStatus]:
        """Statuses with their `ticket_count` filled in."""
        return [TicketStatus.from_api(item) for item in unwrap_list(self.get(f'/brands/{brand_id}/statuses/stats'))]

    def get_status(self, brand_id: str, status_id: str) -> TicketStatus:
        return TicketStatus.from_api(self.get(f'/brands/{brand_id}/statuses/{status_id}'))

    def create_status(self, brand_id: str, name: str, key: str, color: str | None = None,
                      description: str | None = None) -> TicketStatus:
        data = {'name': name, 'key': key}
        if color:
            data['color'] = color
        if description:
            data['description'] = description
        return TicketStatus.from_api(self.post(f'/brands/{brand_id}/statuses', data))

    def update_status(self, brand_id: str, status_id: str, **changes: Any) -> TicketStatus:
        return TicketStatus.from_api(self.patch(f'/brands/{brand_id}/statuses/{status_id}', changes))

    def delete_status(self, brand_id: str, status_id: str) -> None:
        """Soft-delete a custom status; the API refuses system statuses."""
        self.delete(f'/brands/{brand_id}/statuses/{status_id}')

    def reorder_statuses(self, brand_id: str, status_ids: list[str]) -> list[TicketStatus]:
        data = self.post(f'/brands/{brand_id}/statuses/reorder', {'statusIds': list(status_ids)})
        return [TicketStatus.from_api(item) for item in unwrap_list(data)]
