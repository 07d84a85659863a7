"""
Model enums for ticket database models.

These are fixed value sets that are never modified at runtime, so they
live in code instead of lookup tables.
"""
from enum import Enum


class TicketStatus(str, Enum):
    """
    Ticket lifecycle status.

    Only changed through the status engine (services.status_engine).
    """
    OPEN = "OPEN"
    IN_PROGRESS = "IN_PROGRESS"
    RESOLVED = "RESOLVED"
    CLOSED = "CLOSED"
    REOPENED = "REOPENED"


class TicketCategory(str, Enum):
    """
    Ticket classification.

    PreSales and Others tickets carry free-text customer/site fields;
    the rest reference customer and site records.
    """
    PRESALES = "PreSales"
    ONSITE_VISIT = "On-Site Visit"
    REMOTE_SUPPORT = "Remote Support"
    OTHERS = "Others"

    @property
    def uses_manual_location(self) -> bool:
        return self in MANUAL_LOCATION_CATEGORIES

    @property
    def accepts_contact_details(self) -> bool:
        return self is not TicketCategory.OTHERS


MANUAL_LOCATION_CATEGORIES = frozenset({TicketCategory.PRESALES, TicketCategory.OTHERS})


class TicketPriority(str, Enum):
    """Free-form severity, not gated by the status engine."""
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"
    URGENT = "Urgent"
    CRITICAL = "Critical"


class UserRole(str, Enum):
    """
    Requester roles.

    SUPERADMIN is the elevated role; any other role value is an ordinary user.
    """
    SUPERADMIN = "SUPERADMIN"
    USER = "USER"
