"""
Store interfaces consumed by the ticket session controller.

The production implementation is TicketStoreClient (HTTP); tests use
in-memory fakes. Every method takes the requester explicitly and raises
the typed errors from core.exceptions.
"""

from typing import List, Optional, Protocol

from ticketdesk.core.security import Requester
from ticketdesk.db.enums import TicketStatus
from ticketdesk.schemas import (
    CustomerRead,
    SiteRead,
    TicketCounts,
    TicketCreate,
    TicketMessageRead,
    TicketRead,
)


class TicketStore(Protocol):
    async def list_tickets(self, requester: Requester) -> List[TicketRead]:
        """Visible tickets, newest first."""
        ...

    async def count_tickets(self, requester: Requester) -> TicketCounts:
        ...

    async def get_ticket(self, ticket_id: int, requester: Requester) -> TicketRead:
        ...

    async def create_ticket(self, payload: TicketCreate, requester: Requester) -> TicketRead:
        ...

    async def update_status(
        self, ticket_id: int, status: TicketStatus, requester: Requester
    ) -> TicketRead:
        """Single-field status update; the store re-validates the transition."""
        ...

    async def assign_ticket(
        self, ticket_id: int, assignee_id: Optional[int], requester: Requester
    ) -> TicketRead:
        ...

    async def delete_ticket(self, ticket_id: int, requester: Requester) -> None:
        ...


class MessageStore(Protocol):
    async def list_messages(self, ticket_id: int, requester: Requester) -> List[TicketMessageRead]:
        """Thread in (created_at, id) order."""
        ...

    async def create_message(
        self, ticket_id: int, content: str, requester: Requester
    ) -> TicketMessageRead:
        ...


class LookupStore(Protocol):
    async def get_customer(self, customer_id: int, requester: Requester) -> CustomerRead:
        ...

    async def get_site(self, site_id: int, requester: Requester) -> SiteRead:
        ...
