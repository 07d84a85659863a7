"""
Ticket thread message schemas.
"""
from datetime import datetime

from pydantic import Field, field_validator

from ticketdesk.core.schema_base import HTTPSchemaModel


class TicketMessageCreate(HTTPSchemaModel):
    """Client payload for a new message. Ticket and sender come from the URL and requester."""

    content: str = Field(..., description="Message text")

    @field_validator("content")
    @classmethod
    def require_content(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("content must not be empty")
        return v


class TicketMessageRead(HTTPSchemaModel):
    """Schema for reading a thread message."""

    id: int
    ticket_id: int
    sender_id: int
    content: str
    created_at: datetime
