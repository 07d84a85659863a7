"""
Client side of a ticket session: stores, the session controller and the
background sync scheduler.
"""

from .session_controller import SessionSnapshot, TicketSessionController
from .store_client import TicketStoreClient
from .stores import LookupStore, MessageStore, TicketStore
from .sync_scheduler import SyncReport, SyncScheduler

__all__ = [
    "LookupStore",
    "MessageStore",
    "SessionSnapshot",
    "SyncReport",
    "SyncScheduler",
    "TicketSessionController",
    "TicketStore",
    "TicketStoreClient",
]
