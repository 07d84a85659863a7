"""
Ticket message CRUD.
"""
from typing import List

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ticketdesk.crud.base_repository import BaseCRUD
from ticketdesk.db import TicketMessage


class TicketMessageCRUD(BaseCRUD[TicketMessage]):
    """CRUD for TicketMessage database operations."""

    model = TicketMessage

    @classmethod
    async def list_for_ticket(cls, db: AsyncSession, ticket_id: int) -> List[TicketMessage]:
        """Full thread in chronological order (oldest first, id breaks ties)."""
        stmt = (
            select(TicketMessage)
            .where(TicketMessage.ticket_id == ticket_id)
            .order_by(TicketMessage.created_at.asc(), TicketMessage.id.asc())
        )
        result = await db.execute(stmt)
        return list(result.scalars().all())
