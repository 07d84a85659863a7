"""
Customer and site lookups.
"""
from typing import List

from sqlalchemy.ext.asyncio import AsyncSession

from ticketdesk.crud.base_repository import BaseCRUD
from ticketdesk.db import Customer, Site


class CustomerCRUD(BaseCRUD[Customer]):
    model = Customer


class SiteCRUD(BaseCRUD[Site]):
    model = Site

    @classmethod
    async def list_for_customer(cls, db: AsyncSession, customer_id: int) -> List[Site]:
        return await cls.find_all(
            db, filters={"customer_id": customer_id}, order_by=Site.site_name
        )
