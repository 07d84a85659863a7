"""
CRUD layer for database operations.

This package contains all data access logic isolated from business logic.
"""

from .base_repository import BaseCRUD
from .lookup_crud import CustomerCRUD, SiteCRUD
from .message_crud import TicketMessageCRUD
from .ticket_crud import TicketCRUD

__all__ = [
    "BaseCRUD",
    "CustomerCRUD",
    "SiteCRUD",
    "TicketCRUD",
    "TicketMessageCRUD",
]
