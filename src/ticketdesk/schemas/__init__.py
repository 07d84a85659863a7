"""
API schemas for tickets, thread messages and lookups.
"""
from pydantic import ValidationError as PydanticValidationError

from .lookup import CustomerRead, SiteRead
from .message import TicketMessageCreate, TicketMessageRead
from .ticket import (
    TicketAssigneeUpdate,
    TicketCounts,
    TicketCreate,
    TicketRead,
    TicketStatusUpdate,
)


def describe_validation_error(exc: PydanticValidationError) -> str:
    """Flatten pydantic errors into one human-readable line."""
    parts = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error.get("loc", ()) if part != "body")
        message = error.get("msg", "invalid value").removeprefix("Value error, ")
        parts.append(f"{location}: {message}" if location else message)
    return "; ".join(parts) or "invalid input"


__all__ = [
    "CustomerRead",
    "SiteRead",
    "TicketAssigneeUpdate",
    "TicketCounts",
    "TicketCreate",
    "TicketMessageCreate",
    "TicketMessageRead",
    "TicketRead",
    "TicketStatusUpdate",
    "describe_validation_error",
]
