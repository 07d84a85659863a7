"""
Ticket business logic: the status engine, server-side services and the
presentation projection.
"""

from . import status_engine
from .lookup_service import LookupService
from .message_service import MessageService
from .ticket_service import TicketService
from .ticket_view import ThreadView, TicketView, build_ticket_view

__all__ = [
    "LookupService",
    "MessageService",
    "ThreadView",
    "TicketService",
    "TicketView",
    "build_ticket_view",
    "status_engine",
]
