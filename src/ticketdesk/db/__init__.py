"""
Database models and enums for the ticket subsystem.
"""
from .enums import TicketCategory, TicketPriority, TicketStatus, UserRole
from .models import Customer, Site, TableModel, Ticket, TicketMessage, utc_now

__all__ = [
    "Customer",
    "Site",
    "TableModel",
    "Ticket",
    "TicketMessage",
    "TicketCategory",
    "TicketPriority",
    "TicketStatus",
    "UserRole",
    "utc_now",
]
