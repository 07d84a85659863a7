"""
Ticket CRUD for database operations.

Handles visibility-scoped queries, status counts and the conditional
writes the status engine relies on.
"""
from typing import Dict, List, Optional, Set

from sqlalchemy import delete, func, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from ticketdesk.crud.base_repository import BaseCRUD
from ticketdesk.db import Ticket, TicketMessage, TicketStatus, utc_now


class TicketCRUD(BaseCRUD[Ticket]):
    """CRUD for Ticket database operations."""

    model = Ticket

    @staticmethod
    def _visible_to(stmt, user_id: int, elevated: bool):
        """Elevated users see every ticket; others only what they created or are assigned."""
        if elevated:
            return stmt
        return stmt.where(
            or_(Ticket.created_by_id == user_id, Ticket.assigned_to_id == user_id)
        )

    @classmethod
    async def list_visible(
        cls,
        db: AsyncSession,
        user_id: int,
        *,
        elevated: bool = False,
    ) -> List[Ticket]:
        """
        Tickets visible to a user, newest first.

        Ties on created_at are broken by id so the order is stable.
        """
        stmt = cls._visible_to(select(Ticket), user_id, elevated).order_by(
            Ticket.created_at.desc(), Ticket.id.desc()
        )
        result = await db.execute(stmt)
        return list(result.scalars().all())

    @classmethod
    async def find_visible(
        cls,
        db: AsyncSession,
        ticket_id: int,
        user_id: int,
        *,
        elevated: bool = False,
    ) -> Optional[Ticket]:
        stmt = cls._visible_to(select(Ticket).where(Ticket.id == ticket_id), user_id, elevated)
        result = await db.execute(stmt)
        return result.scalar_one_or_none()

    @classmethod
    async def reload(cls, db: AsyncSession, ticket_id: int) -> Optional[Ticket]:
        """Re-read a ticket from the database, overwriting any stale copy in the session."""
        stmt = (
            select(Ticket)
            .where(Ticket.id == ticket_id)
            .execution_options(populate_existing=True)
        )
        result = await db.execute(stmt)
        return result.scalar_one_or_none()

    @classmethod
    async def count_by_status(
        cls,
        db: AsyncSession,
        user_id: int,
        *,
        elevated: bool = False,
    ) -> Dict[str, int]:
        """Visible ticket count per status value. Statuses with no tickets are omitted."""
        stmt = cls._visible_to(
            select(Ticket.status, func.count(Ticket.id)), user_id, elevated
        ).group_by(Ticket.status)
        result = await db.execute(stmt)
        return {status: count for status, count in result.all()}

    @classmethod
    async def codes_with_prefix(cls, db: AsyncSession, base_code: str) -> Set[str]:
        """Existing codes equal to base_code or carrying a numeric suffix on it."""
        stmt = select(Ticket.ticket_code).where(
            or_(Ticket.ticket_code == base_code, Ticket.ticket_code.like(f"{base_code}-%"))
        )
        result = await db.execute(stmt)
        return set(result.scalars().all())

    @classmethod
    async def compare_and_set_status(
        cls,
        db: AsyncSession,
        ticket_id: int,
        *,
        expected: TicketStatus,
        new: TicketStatus,
    ) -> bool:
        """
        Move a ticket to ``new`` only if it is still in ``expected``.

        Returns:
            True if the row was updated, False if it is gone or was changed meanwhile
        """
        stmt = (
            update(Ticket)
            .where(Ticket.id == ticket_id, Ticket.status == expected.value)
            .values(status=new.value, updated_at=utc_now())
            .execution_options(synchronize_session=False)
        )
        result = await db.execute(stmt)
        return result.rowcount == 1

    @classmethod
    async def set_assignee(
        cls,
        db: AsyncSession,
        ticket_id: int,
        assignee_id: Optional[int],
    ) -> bool:
        stmt = (
            update(Ticket)
            .where(Ticket.id == ticket_id)
            .values(assigned_to_id=assignee_id, updated_at=utc_now())
            .execution_options(synchronize_session=False)
        )
        result = await db.execute(stmt)
        return result.rowcount == 1

    @classmethod
    async def delete_closed(cls, db: AsyncSession, ticket_id: int) -> bool:
        """
        Delete a CLOSED ticket together with its thread.

        Both statements are conditional on the ticket still being CLOSED, so a
        concurrent reopen leaves the thread untouched.

        Returns:
            True if the ticket was deleted
        """
        closed_ticket = select(Ticket.id).where(
            Ticket.id == ticket_id, Ticket.status == TicketStatus.CLOSED.value
        )
        await db.execute(
            delete(TicketMessage)
            .where(TicketMessage.ticket_id.in_(closed_ticket))
            .execution_options(synchronize_session=False)
        )
        result = await db.execute(
            delete(Ticket)
            .where(Ticket.id == ticket_id, Ticket.status == TicketStatus.CLOSED.value)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1
