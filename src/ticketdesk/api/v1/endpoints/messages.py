"""
Ticket thread endpoints.

**Rate Limiting:** posting is limited per requester (RATE_LIMIT_MESSAGE_LIMIT).
"""

import logging
from typing import List

from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from ticketdesk.core.config import settings
from ticketdesk.core.database import get_session
from ticketdesk.core.dependencies import get_requester
from ticketdesk.core.rate_limit import limiter
from ticketdesk.core.security import Requester
from ticketdesk.schemas import TicketMessageCreate, TicketMessageRead
from ticketdesk.services import MessageService

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/{ticket_id}/messages", response_model=List[TicketMessageRead])
async def list_messages(
    ticket_id: int,
    db: AsyncSession = Depends(get_session),
    requester: Requester = Depends(get_requester),
):
    """Full thread, oldest first."""
    return await MessageService.list_messages(db, ticket_id, requester)


@router.post(
    "/{ticket_id}/messages",
    response_model=TicketMessageRead,
    status_code=status.HTTP_201_CREATED,
)
@limiter.limit(settings.rate_limit.message_limit)
async def post_message(
    request: Request,  # Must be present for rate limiter
    ticket_id: int,
    payload: TicketMessageCreate,
    db: AsyncSession = Depends(get_session),
    requester: Requester = Depends(get_requester),
):
    """
    Append a message from the requester.

    Content is sanitized; content that is empty afterwards is rejected (422).
    """
    return await MessageService.post_message(db, ticket_id, payload, requester)
