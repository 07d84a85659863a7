"""
Ticket session controller.

Owns one user's view of the ticket list and of the ticket thread that is
currently open, and mediates every write. The rules it keeps:

- every write is followed by a full re-read; the local state is what the
  store returned, never an optimistic patch
- status changes and deletions are checked with the status engine first,
  and a local rejection is never sent
- every store call is bounded by a timeout that surfaces as TransportError;
  nothing is retried automatically
- a list or thread read that completes after a newer one, or after the
  thread was closed or switched, is discarded
- a NotFound on the open ticket closes the thread view
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, List, Optional, Tuple, TypeVar, Union

from pydantic import ValidationError as PydanticValidationError

from ticketdesk.core.config import settings
from ticketdesk.core.exceptions import (
    AuthorizationRejection,
    IllegalTransitionRejection,
    NotFound,
    TicketDeskError,
    TransportError,
    ValidationError,
)
from ticketdesk.core.security import Requester
from ticketdesk.db.enums import TicketCategory, TicketStatus
from ticketdesk.schemas import TicketCounts, TicketCreate, TicketRead, describe_validation_error
from ticketdesk.services import status_engine
from ticketdesk.services.ticket_view import ThreadView, TicketView, build_ticket_view

from .stores import LookupStore, MessageStore, TicketStore

logger = logging.getLogger(__name__)

T = TypeVar("T")

EMPTY_MESSAGE = "message content must not be empty"
ASSIGN_NOT_AUTHORIZED = "not authorized to assign tickets"


@dataclass(frozen=True)
class SessionSnapshot:
    """What the presentation layer renders: the list and the open thread."""

    tickets: Tuple[TicketView, ...] = ()
    thread: Optional[ThreadView] = None


SnapshotListener = Callable[[SessionSnapshot], None]


class TicketSessionController:
    """Single logical timeline for one user's ticket session."""

    def __init__(
        self,
        tickets: TicketStore,
        messages: MessageStore,
        lookups: Optional[LookupStore] = None,
        *,
        timeout: Optional[float] = None,
    ):
        self._tickets = tickets
        self._messages = messages
        self._lookups = lookups
        self.timeout = timeout or settings.sync.request_timeout_seconds

        self._ticket_views: Tuple[TicketView, ...] = ()
        self._thread: Optional[ThreadView] = None
        self._open_ticket_id: Optional[int] = None

        # Bumped per list read / per thread open-close; stale reads compare against them
        self._list_generation = 0
        self._applied_list_generation = 0
        self._thread_generation = 0

        self._in_flight = 0
        self._listeners: List[SnapshotListener] = []
        self._customer_names: Dict[int, str] = {}
        self._site_names: Dict[int, str] = {}

    # ==================== State ====================

    @property
    def in_flight(self) -> int:
        """Store calls currently awaiting a response."""
        return self._in_flight

    @property
    def busy(self) -> bool:
        return self._in_flight > 0

    @property
    def open_ticket_id(self) -> Optional[int]:
        return self._open_ticket_id

    @property
    def tickets(self) -> Tuple[TicketView, ...]:
        return self._ticket_views

    @property
    def thread(self) -> Optional[ThreadView]:
        return self._thread

    def snapshot(self) -> SessionSnapshot:
        return SessionSnapshot(tickets=self._ticket_views, thread=self._thread)

    def subscribe(self, listener: SnapshotListener) -> Callable[[], None]:
        """Call ``listener`` with a fresh snapshot after every state change.

        Returns:
            A callable that unsubscribes the listener
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self) -> None:
        snapshot = self.snapshot()
        for listener in list(self._listeners):
            listener(snapshot)

    # ==================== Store access ====================

    async def _call(self, operation: Awaitable[T]) -> T:
        """Await one store call under the session timeout."""
        self._in_flight += 1
        try:
            return await asyncio.wait_for(operation, timeout=self.timeout)
        except asyncio.TimeoutError as exc:
            logger.warning(f"Ticket store call timed out after {self.timeout}s")
            raise TransportError() from exc
        finally:
            self._in_flight -= 1

    async def _lookup_name(
        self,
        cache: Dict[int, str],
        record_id: Optional[int],
        fetch: Callable[[int, Requester], Awaitable[Any]],
        attribute: str,
        requester: Requester,
    ) -> Optional[str]:
        if record_id is None or self._lookups is None:
            return None
        if record_id not in cache:
            try:
                record = await self._call(fetch(record_id, requester))
            except (NotFound, TransportError) as exc:
                logger.warning(f"Name lookup failed | {attribute} {record_id} | Error: {exc.message}")
                return None
            cache[record_id] = getattr(record, attribute)
        return cache[record_id]

    async def _build_view(self, ticket: TicketRead, requester: Requester) -> TicketView:
        customer_name = site_name = None
        if not TicketCategory(ticket.category).uses_manual_location and self._lookups is not None:
            customer_name = await self._lookup_name(
                self._customer_names, ticket.customer_id,
                self._lookups.get_customer, "customer_name", requester,
            )
            site_name = await self._lookup_name(
                self._site_names, ticket.site_id,
                self._lookups.get_site, "site_name", requester,
            )
        return build_ticket_view(ticket, requester, customer_name, site_name)

    async def _load_thread(self, ticket_id: int, requester: Requester) -> ThreadView:
        ticket = await self._call(self._tickets.get_ticket(ticket_id, requester))
        messages = await self._call(self._messages.list_messages(ticket_id, requester))
        view = await self._build_view(ticket, requester)
        return ThreadView(view=view, messages=tuple(messages))

    def _drop_thread(self) -> None:
        self._thread_generation += 1
        self._thread = None
        self._open_ticket_id = None

    # ==================== Reads ====================

    async def list_tickets(self, requester: Requester) -> Tuple[TicketView, ...]:
        """Re-read the visible ticket list (store order, newest first)."""
        self._list_generation += 1
        generation = self._list_generation

        tickets = await self._call(self._tickets.list_tickets(requester))
        views = tuple([await self._build_view(ticket, requester) for ticket in tickets])

        if generation < self._applied_list_generation:
            logger.debug(f"Discarding stale ticket list | Generation: {generation}")
            return self._ticket_views

        self._applied_list_generation = generation
        self._ticket_views = views
        self._notify()
        return views

    async def count_tickets(self, requester: Requester) -> TicketCounts:
        return await self._call(self._tickets.count_tickets(requester))

    async def open_thread(self, ticket_id: int, requester: Requester) -> ThreadView:
        """
        Load a ticket and its full thread and make it the open thread.

        A failed load leaves the previously open thread in place, unless the
        failure is NotFound for that same ticket.

        Raises:
            NotFound: The ticket no longer exists; if it was the open one,
                the thread view is closed
        """
        previous_id = self._open_ticket_id
        self._thread_generation += 1
        generation = self._thread_generation
        self._open_ticket_id = ticket_id

        try:
            thread = await self._load_thread(ticket_id, requester)
        except TicketDeskError as exc:
            if generation == self._thread_generation:
                if isinstance(exc, NotFound) and previous_id == ticket_id:
                    self._drop_thread()
                    self._notify()
                else:
                    self._open_ticket_id = previous_id
            raise

        if generation == self._thread_generation:
            self._thread = thread
            self._notify()
        return thread

    async def refresh_thread(self, requester: Requester) -> Optional[ThreadView]:
        """
        Re-read the open thread.

        Returns None when no thread is open, or when it was closed or
        switched while the read was in flight (the result is discarded).

        Raises:
            NotFound: The open ticket was deleted; the thread view is closed
        """
        if self._open_ticket_id is None:
            return None

        generation = self._thread_generation
        ticket_id = self._open_ticket_id

        try:
            thread = await self._load_thread(ticket_id, requester)
        except NotFound:
            if generation == self._thread_generation:
                self._drop_thread()
                self._notify()
            raise

        if generation != self._thread_generation:
            logger.debug(f"Discarding stale thread read | Ticket ID: {ticket_id}")
            return None

        self._thread = thread
        self._notify()
        return thread

    def close_thread(self) -> None:
        """Close the thread view; in-flight reads for it are discarded."""
        if self._open_ticket_id is None and self._thread is None:
            return
        self._drop_thread()
        self._notify()

    # ==================== Writes ====================

    async def _resync(self, ticket_id: int, requester: Requester) -> None:
        await self.list_tickets(requester)
        if self._open_ticket_id == ticket_id:
            await self.refresh_thread(requester)

    async def _resync_after_rejection(self, ticket_id: int, requester: Requester) -> None:
        """Re-read after the store refused a write; the refusal is what the caller sees."""
        try:
            await self._resync(ticket_id, requester)
        except TicketDeskError as exc:
            logger.warning(f"Resync after rejection failed | Ticket ID: {ticket_id} | Error: {exc.message}")

    async def _get_ticket(self, ticket_id: int, requester: Requester) -> TicketRead:
        try:
            return await self._call(self._tickets.get_ticket(ticket_id, requester))
        except NotFound:
            await self._resync_after_rejection(ticket_id, requester)
            if self._open_ticket_id == ticket_id:
                self.close_thread()
            raise

    async def post_message(
        self, ticket_id: int, sender: Requester, content: str
    ) -> Optional[ThreadView]:
        """
        Append a message, then reload the thread if it is the open one.

        Raises:
            ValidationError: Blank content (nothing is sent)
            NotFound: Ticket deleted; its thread view is closed
        """
        if content is None or not content.strip():
            raise ValidationError(EMPTY_MESSAGE)

        try:
            await self._call(self._messages.create_message(ticket_id, content, sender))
        except NotFound:
            if self._open_ticket_id == ticket_id:
                self.close_thread()
            raise

        if self._open_ticket_id == ticket_id:
            return await self.refresh_thread(sender)
        return None

    async def change_status(
        self, ticket_id: int, target: TicketStatus, requester: Requester
    ) -> TicketRead:
        """
        Request a status change.

        The ticket is read fresh and checked with the status engine; only an
        accepted change is sent. The list, and the thread if this ticket is
        open, are re-read afterwards.

        Raises:
            AuthorizationRejection / IllegalTransitionRejection: From the engine
                or from the store (for example after losing a race)
            NotFound: Ticket deleted
        """
        ticket = await self._get_ticket(ticket_id, requester)
        status_engine.request_transition(ticket, target, requester)

        try:
            persisted = await self._call(self._tickets.update_status(ticket_id, target, requester))
        except (IllegalTransitionRejection, NotFound):
            await self._resync_after_rejection(ticket_id, requester)
            raise

        await self._resync(ticket_id, requester)
        return persisted

    async def reopen_as_creator(self, ticket_id: int, requester: Requester) -> TicketRead:
        """One-step reopen of a CLOSED ticket by its creator."""
        ticket = await self._get_ticket(ticket_id, requester)
        if ticket.created_by_id != requester.user_id:
            raise AuthorizationRejection(status_engine.NOT_AUTHORIZED)
        return await self.change_status(ticket_id, TicketStatus.REOPENED, requester)

    async def delete_ticket(self, ticket_id: int, requester: Requester) -> None:
        """
        Delete a CLOSED ticket (elevated role only). Closes its thread view if open.
        """
        ticket = await self._get_ticket(ticket_id, requester)
        status_engine.ensure_delete(ticket, requester)

        try:
            await self._call(self._tickets.delete_ticket(ticket_id, requester))
        except NotFound:
            if self._open_ticket_id == ticket_id:
                self.close_thread()
            await self._resync_after_rejection(ticket_id, requester)
            raise
        except IllegalTransitionRejection:
            await self._resync_after_rejection(ticket_id, requester)
            raise

        if self._open_ticket_id == ticket_id:
            self.close_thread()
        await self.list_tickets(requester)

    async def create_ticket(
        self, payload: Union[TicketCreate, Dict[str, Any]], requester: Requester
    ) -> TicketRead:
        """
        Create a ticket authored by the requester, then reload the list.

        Raises:
            ValidationError: Payload incomplete or location rules violated (nothing is sent)
        """
        if not isinstance(payload, TicketCreate):
            try:
                payload = TicketCreate.model_validate(payload)
            except PydanticValidationError as exc:
                raise ValidationError(describe_validation_error(exc)) from exc

        created = await self._call(self._tickets.create_ticket(payload, requester))
        await self.list_tickets(requester)
        return created

    async def assign_ticket(
        self, ticket_id: int, assignee_id: Optional[int], requester: Requester
    ) -> TicketRead:
        """Set or clear the assignee (elevated role only), then re-read."""
        if not requester.is_elevated:
            raise AuthorizationRejection(ASSIGN_NOT_AUTHORIZED)

        try:
            updated = await self._call(self._tickets.assign_ticket(ticket_id, assignee_id, requester))
        except NotFound:
            if self._open_ticket_id == ticket_id:
                self.close_thread()
            await self._resync_after_rejection(ticket_id, requester)
            raise

        await self._resync(ticket_id, requester)
        return updated
