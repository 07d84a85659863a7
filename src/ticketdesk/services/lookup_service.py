"""
Read-only customer and site lookups used for display names.
"""

from typing import List

from sqlalchemy.ext.asyncio import AsyncSession

from ticketdesk.core.decorators import critical_database_operation
from ticketdesk.core.exceptions import NotFound
from ticketdesk.crud import CustomerCRUD, SiteCRUD
from ticketdesk.db import Customer, Site


class LookupService:

    @staticmethod
    @critical_database_operation("get_customer")
    async def get_customer(db: AsyncSession, customer_id: int) -> Customer:
        customer = await CustomerCRUD.find_by_id(db, customer_id)
        if customer is None:
            raise NotFound(f"customer {customer_id} not found")
        return customer

    @staticmethod
    @critical_database_operation("get_site")
    async def get_site(db: AsyncSession, site_id: int) -> Site:
        site = await SiteCRUD.find_by_id(db, site_id)
        if site is None:
            raise NotFound(f"site {site_id} not found")
        return site

    @staticmethod
    @critical_database_operation("list_customer_sites")
    async def list_customer_sites(db: AsyncSession, customer_id: int) -> List[Site]:
        """Sites of one customer, by name. Feeds the site picker on ticket creation."""
        await LookupService.get_customer(db, customer_id)
        return await SiteCRUD.list_for_customer(db, customer_id)
