"""
Ticket API endpoints.

Every call carries the requester in the X-User-Id / X-User-Role headers.
Visibility: the elevated role sees every ticket, everyone else sees what
they created or are assigned to. A ticket outside the requester's
visibility is reported as 404.

Status changes go through the status engine; the response is the ticket as
persisted, never an optimistic copy.
"""

import logging
from typing import List

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from ticketdesk.core.database import get_session
from ticketdesk.core.dependencies import get_requester
from ticketdesk.core.security import Requester
from ticketdesk.schemas import (
    TicketAssigneeUpdate,
    TicketCounts,
    TicketCreate,
    TicketRead,
    TicketStatusUpdate,
)
from ticketdesk.services import TicketService

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("", response_model=List[TicketRead])
async def list_tickets(
    db: AsyncSession = Depends(get_session),
    requester: Requester = Depends(get_requester),
):
    """Tickets visible to the requester, newest first."""
    return await TicketService.list_tickets(db, requester)


@router.get("/counts", response_model=TicketCounts)
async def count_tickets(
    db: AsyncSession = Depends(get_session),
    requester: Requester = Depends(get_requester),
):
    """Total and per-status counts over the requester's visible tickets."""
    return await TicketService.count_tickets(db, requester)


@router.get("/{ticket_id}", response_model=TicketRead)
async def get_ticket(
    ticket_id: int,
    db: AsyncSession = Depends(get_session),
    requester: Requester = Depends(get_requester),
):
    return await TicketService.get_visible_ticket(db, ticket_id, requester)


@router.post("", response_model=TicketRead, status_code=status.HTTP_201_CREATED)
async def create_ticket(
    payload: TicketCreate,
    db: AsyncSession = Depends(get_session),
    requester: Requester = Depends(get_requester),
):
    """
    Create a ticket authored by the requester.

    **Location rules:**
    - PreSales / Others: free-text manualCustomer / manualSite, no ids
    - On-Site Visit / Remote Support: customerId and siteId of that customer
    - Others: no contact person or mobile number

    **Raises:**
        422: Missing fields or location rules violated
        403: Non-elevated requester set assignedToId
    """
    return await TicketService.create_ticket(db, payload, requester)


@router.patch("/{ticket_id}/status", response_model=TicketRead)
async def change_ticket_status(
    ticket_id: int,
    payload: TicketStatusUpdate,
    db: AsyncSession = Depends(get_session),
    requester: Requester = Depends(get_requester),
):
    """
    Move a ticket to a new status.

    **Raises:**
        403: not authorized for this transition
        409: illegal transition from <current> to <target>
        404: ticket missing or not visible
    """
    return await TicketService.change_status(db, ticket_id, payload.status, requester)


@router.patch("/{ticket_id}/assignee", response_model=TicketRead)
async def assign_ticket(
    ticket_id: int,
    payload: TicketAssigneeUpdate,
    db: AsyncSession = Depends(get_session),
    requester: Requester = Depends(get_requester),
):
    """Set or clear the assignee (elevated role only)."""
    return await TicketService.assign_ticket(db, ticket_id, payload.assigned_to_id, requester)


@router.delete("/{ticket_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_ticket(
    ticket_id: int,
    db: AsyncSession = Depends(get_session),
    requester: Requester = Depends(get_requester),
):
    """Delete a CLOSED ticket and its thread (elevated role only)."""
    await TicketService.delete_ticket(db, ticket_id, requester)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
