"""
Read-only customer and site lookups.
"""

from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from ticketdesk.core.database import get_session
from ticketdesk.core.dependencies import get_requester
from ticketdesk.schemas import CustomerRead, SiteRead
from ticketdesk.services import LookupService

router = APIRouter(dependencies=[Depends(get_requester)])


@router.get("/customers/{customer_id}", response_model=CustomerRead)
async def get_customer(customer_id: int, db: AsyncSession = Depends(get_session)):
    return await LookupService.get_customer(db, customer_id)


@router.get("/customers/{customer_id}/sites", response_model=List[SiteRead])
async def list_customer_sites(customer_id: int, db: AsyncSession = Depends(get_session)):
    return await LookupService.list_customer_sites(db, customer_id)


@router.get("/sites/{site_id}", response_model=SiteRead)
async def get_site(site_id: int, db: AsyncSession = Depends(get_session)):
    return await LookupService.get_site(db, site_id)
