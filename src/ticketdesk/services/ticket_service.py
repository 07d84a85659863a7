"""
Ticket service.

Creation, visibility-scoped reads, status changes, assignment and deletion.
Every status write is re-validated by the status engine and persisted as a
compare-and-set, so of two racing actors only one can win.
"""

import logging
from datetime import datetime
from typing import List, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from ticketdesk.core.config import settings
from ticketdesk.core.decorators import (
    critical_database_operation,
    log_database_operation,
    transactional_database_operation,
)
from ticketdesk.core.exceptions import (
    AuthorizationRejection,
    IllegalTransitionRejection,
    NotFound,
    TransitionRejection,
    ValidationError,
)
from ticketdesk.core.logging_config import TicketLogger
from ticketdesk.core.metrics import tickets_created, tickets_deleted, track_transition
from ticketdesk.core.security import Requester
from ticketdesk.crud import CustomerCRUD, SiteCRUD, TicketCRUD
from ticketdesk.db import Ticket, TicketStatus, utc_now
from ticketdesk.schemas import TicketCounts, TicketCreate
from ticketdesk.services import status_engine

logger = logging.getLogger(__name__)
ticket_logger = TicketLogger("lifecycle")

ASSIGN_NOT_AUTHORIZED = "not authorized to assign tickets"


def ticket_not_found(ticket_id: int) -> NotFound:
    return NotFound(f"ticket {ticket_id} not found", ticket_id=ticket_id)


def format_ticket_code(created_at: datetime, prefix: Optional[str] = None) -> str:
    """PREFIX-YYMMDDHHMMSS, e.g. EN-SR-250711103000."""
    return f"{prefix or settings.ticket.code_prefix}-{created_at:%y%m%d%H%M%S}"


class TicketService:
    """Service for the ticket lifecycle."""

    @staticmethod
    async def generate_ticket_code(db: AsyncSession, created_at: datetime) -> str:
        """
        Build a unique ticket code from the creation time.

        Codes created within the same second get a -2, -3, ... suffix.
        """
        base_code = format_ticket_code(created_at)
        taken = await TicketCRUD.codes_with_prefix(db, base_code)
        if base_code not in taken:
            return base_code

        suffix = 2
        while f"{base_code}-{suffix}" in taken:
            suffix += 1
        return f"{base_code}-{suffix}"

    @staticmethod
    async def _validate_location(db: AsyncSession, payload: TicketCreate) -> None:
        """Structured categories must reference an existing site of an existing customer."""
        if payload.category.uses_manual_location:
            return

        customer = await CustomerCRUD.find_by_id(db, payload.customer_id)
        if customer is None:
            raise ValidationError(f"customer {payload.customer_id} does not exist")

        site = await SiteCRUD.find_by_id(db, payload.site_id)
        if site is None:
            raise ValidationError(f"site {payload.site_id} does not exist")
        if site.customer_id != customer.id:
            raise ValidationError(
                f"site {payload.site_id} does not belong to customer {payload.customer_id}"
            )

    @staticmethod
    @transactional_database_operation("create_ticket")
    @log_database_operation("ticket creation", level="debug")
    async def create_ticket(
        db: AsyncSession,
        payload: TicketCreate,
        requester: Requester,
    ) -> Ticket:
        """
        Create a ticket in OPEN status authored by the requester.

        Raises:
            ValidationError: Unknown customer/site, or site not owned by customer
            AuthorizationRejection: Non-elevated requester set an assignee
        """
        if payload.assigned_to_id is not None and not requester.is_elevated:
            raise AuthorizationRejection(ASSIGN_NOT_AUTHORIZED)

        await TicketService._validate_location(db, payload)

        created_at = utc_now()
        ticket_code = await TicketService.generate_ticket_code(db, created_at)

        ticket = await TicketCRUD.create(
            db,
            obj_in={
                **payload.model_dump(exclude={"category", "priority"}),
                "category": payload.category.value,
                "priority": payload.priority.value,
                "ticket_code": ticket_code,
                "created_by_id": requester.user_id,
                "status": TicketStatus.OPEN.value,
                "created_at": created_at,
                "updated_at": created_at,
            },
        )

        ticket_logger.ticket_created(ticket.id, ticket.ticket_code, requester.user_id, ticket.category)
        tickets_created.labels(category=ticket.category).inc()
        return ticket

    @staticmethod
    @critical_database_operation("get_ticket")
    async def get_visible_ticket(
        db: AsyncSession,
        ticket_id: int,
        requester: Requester,
    ) -> Ticket:
        """
        Raises:
            NotFound: Ticket missing or outside the requester's visibility
        """
        ticket = await TicketCRUD.find_visible(
            db, ticket_id, requester.user_id, elevated=requester.is_elevated
        )
        if ticket is None:
            raise ticket_not_found(ticket_id)
        return ticket

    @staticmethod
    @critical_database_operation("list_tickets")
    async def list_tickets(db: AsyncSession, requester: Requester) -> List[Ticket]:
        return await TicketCRUD.list_visible(
            db, requester.user_id, elevated=requester.is_elevated
        )

    @staticmethod
    @critical_database_operation("count_tickets")
    async def count_tickets(db: AsyncSession, requester: Requester) -> TicketCounts:
        by_status = await TicketCRUD.count_by_status(
            db, requester.user_id, elevated=requester.is_elevated
        )
        return TicketCounts(
            total=sum(by_status.values()),
            open=by_status.get(TicketStatus.OPEN.value, 0),
            in_progress=by_status.get(TicketStatus.IN_PROGRESS.value, 0),
            resolved=by_status.get(TicketStatus.RESOLVED.value, 0),
            closed=by_status.get(TicketStatus.CLOSED.value, 0),
            reopened=by_status.get(TicketStatus.REOPENED.value, 0),
        )

    @staticmethod
    def _reject(ticket: Ticket, target: TicketStatus, requester: Requester, error: TransitionRejection):
        ticket_logger.transition_rejected(
            ticket.id, ticket.status, target.value, requester.user_id, error.message
        )
        track_transition(ticket.status, target.value, error.code)
        return error

    @staticmethod
    @transactional_database_operation("change_ticket_status")
    async def change_status(
        db: AsyncSession,
        ticket_id: int,
        target: TicketStatus,
        requester: Requester,
    ) -> Ticket:
        """
        Move a ticket to ``target`` through the status engine.

        The write only succeeds if the status is still the one that was
        validated. If another actor changed or deleted the ticket in between,
        the request is rejected instead of merged.

        Raises:
            NotFound: Ticket missing, invisible, or deleted concurrently
            AuthorizationRejection: Requester may not make this transition
            IllegalTransitionRejection: Not in the table, or lost a race
        """
        target = TicketStatus(target)
        ticket = await TicketService.get_visible_ticket(db, ticket_id, requester)
        current = TicketStatus(ticket.status)

        decision = status_engine.evaluate_transition(
            current, target, requester, ticket.created_by_id
        )
        if not decision.allowed:
            raise TicketService._reject(
                ticket, target, requester, decision.rejection(decision.reason)
            )

        applied = await TicketCRUD.compare_and_set_status(
            db, ticket_id, expected=current, new=target
        )
        fresh = await TicketCRUD.reload(db, ticket_id)
        if fresh is None:
            raise ticket_not_found(ticket_id)

        if not applied:
            decision = status_engine.evaluate_transition(
                fresh.status, target, requester, fresh.created_by_id
            )
            error = (
                decision.rejection(decision.reason)
                if not decision.allowed
                else IllegalTransitionRejection(
                    status_engine.illegal_transition_reason(current, target)
                )
            )
            logger.info(
                f"Status write lost a race | Ticket ID: {ticket_id} | "
                f"Expected: {current.value} | Found: {fresh.status}"
            )
            raise TicketService._reject(fresh, target, requester, error)

        ticket_logger.transition_accepted(ticket_id, current.value, target.value, requester.user_id)
        track_transition(current.value, target.value, "accepted")
        return fresh

    @staticmethod
    @transactional_database_operation("assign_ticket")
    async def assign_ticket(
        db: AsyncSession,
        ticket_id: int,
        assignee_id: Optional[int],
        requester: Requester,
    ) -> Ticket:
        """Set or clear the assignee. Elevated role only; status is untouched."""
        if not requester.is_elevated:
            raise AuthorizationRejection(ASSIGN_NOT_AUTHORIZED)

        if not await TicketCRUD.set_assignee(db, ticket_id, assignee_id):
            raise ticket_not_found(ticket_id)

        ticket = await TicketCRUD.reload(db, ticket_id)
        ticket_logger.ticket_assigned(ticket_id, assignee_id, requester.user_id)
        return ticket

    @staticmethod
    @transactional_database_operation("delete_ticket")
    async def delete_ticket(
        db: AsyncSession,
        ticket_id: int,
        requester: Requester,
    ) -> None:
        """
        Delete a CLOSED ticket and its thread.

        Raises:
            NotFound: Ticket missing or invisible
            AuthorizationRejection: Requester is not elevated
            IllegalTransitionRejection: Ticket is not CLOSED
        """
        ticket = await TicketService.get_visible_ticket(db, ticket_id, requester)
        status_engine.ensure_delete(ticket, requester)
        ticket_code = ticket.ticket_code

        if not await TicketCRUD.delete_closed(db, ticket_id):
            if await TicketCRUD.reload(db, ticket_id) is None:
                raise ticket_not_found(ticket_id)
            raise IllegalTransitionRejection(status_engine.DELETE_REQUIRES_CLOSED)

        ticket_logger.ticket_deleted(ticket_id, ticket_code, requester.user_id)
        tickets_deleted.inc()
