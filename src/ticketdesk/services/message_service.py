"""
Ticket thread service.

Threads are append-only: messages are listed and posted, never edited or
deleted on their own.
"""

import logging
from typing import List

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ticketdesk.core.decorators import (
    critical_database_operation,
    log_database_operation,
    transactional_database_operation,
)
from ticketdesk.core.exceptions import ValidationError
from ticketdesk.core.logging_config import TicketLogger
from ticketdesk.core.metrics import ticket_messages_posted
from ticketdesk.core.sanitizer import sanitize_message_content
from ticketdesk.core.security import Requester
from ticketdesk.crud import TicketMessageCRUD
from ticketdesk.db import Ticket, TicketMessage
from ticketdesk.schemas import TicketMessageCreate
from ticketdesk.services.ticket_service import TicketService

logger = logging.getLogger(__name__)
ticket_logger = TicketLogger("thread")

EMPTY_MESSAGE = "message content must not be empty"


class MessageService:
    """Service for ticket thread messages."""

    @staticmethod
    @critical_database_operation("list_messages")
    async def list_messages(
        db: AsyncSession,
        ticket_id: int,
        requester: Requester,
    ) -> List[TicketMessage]:
        """
        Full thread in store order.

        Raises:
            NotFound: Ticket missing or outside the requester's visibility
        """
        await TicketService.get_visible_ticket(db, ticket_id, requester)
        return await TicketMessageCRUD.list_for_ticket(db, ticket_id)

    @staticmethod
    @transactional_database_operation("post_message")
    @log_database_operation("message creation", level="debug")
    async def post_message(
        db: AsyncSession,
        ticket_id: int,
        payload: TicketMessageCreate,
        requester: Requester,
    ) -> TicketMessage:
        """
        Append a message from the requester to a ticket's thread.

        Raises:
            NotFound: Ticket missing or outside the requester's visibility
            ValidationError: Nothing left after sanitizing, or content too long
        """
        content = sanitize_message_content(payload.content)
        if not content:
            raise ValidationError(EMPTY_MESSAGE)

        await TicketService.get_visible_ticket(db, ticket_id, requester)

        # Hold the ticket row so a concurrent delete cannot orphan this message
        await db.execute(select(Ticket.id).where(Ticket.id == ticket_id).with_for_update())

        message = await TicketMessageCRUD.create(
            db,
            obj_in={
                "ticket_id": ticket_id,
                "sender_id": requester.user_id,
                "content": content,
            },
        )

        ticket_logger.message_posted(ticket_id, message.id, requester.user_id)
        ticket_messages_posted.inc()
        return message
