"""
Read-only ticket projections for the presentation layer.

A TicketView bundles what a row or a thread header needs: display names
for customer and site, and the actions the viewing user may take. Legal
actions come from the status engine; nothing downstream recomputes them.
"""

from dataclasses import dataclass, field
from typing import Optional, Tuple

from ticketdesk.core.security import Requester
from ticketdesk.db.enums import TicketCategory, TicketStatus
from ticketdesk.schemas import TicketMessageRead, TicketRead
from ticketdesk.services import status_engine

NOT_AVAILABLE = "N/A"


def _display(manual: Optional[str], resolved: Optional[str], manual_first: bool) -> str:
    candidates = (manual, resolved) if manual_first else (resolved,)
    for name in candidates:
        if name and name.strip():
            return name.strip()
    return NOT_AVAILABLE


@dataclass(frozen=True)
class TicketView:
    ticket: TicketRead
    customer_display: str
    site_display: str
    legal_transitions: Tuple[TicketStatus, ...]
    can_delete: bool
    can_reopen_as_creator: bool

    @property
    def id(self) -> int:
        return self.ticket.id

    @property
    def status(self) -> TicketStatus:
        return self.ticket.status


@dataclass(frozen=True)
class ThreadView:
    """An open ticket with its messages in store order."""

    view: TicketView
    messages: Tuple[TicketMessageRead, ...] = field(default_factory=tuple)

    @property
    def ticket_id(self) -> int:
        return self.view.ticket.id


def build_ticket_view(
    ticket: TicketRead,
    requester: Requester,
    customer_name: Optional[str] = None,
    site_name: Optional[str] = None,
) -> TicketView:
    """
    Project a ticket for ``requester``.

    PreSales and Others tickets show their manual customer/site text; the
    other categories show the resolved lookup names. Anything unresolved
    shows as "N/A".
    """
    manual_first = TicketCategory(ticket.category).uses_manual_location
    return TicketView(
        ticket=ticket,
        customer_display=_display(ticket.manual_customer, customer_name, manual_first),
        site_display=_display(ticket.manual_site, site_name, manual_first),
        legal_transitions=tuple(status_engine.legal_transitions(ticket, requester)),
        can_delete=status_engine.evaluate_delete(ticket, requester).allowed,
        can_reopen_as_creator=status_engine.can_reopen_as_creator(ticket, requester),
    )
