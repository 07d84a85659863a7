"""
Ticket database models.

Tickets and their message threads, plus the read-only customer and site
lookups used to resolve display names.
"""

from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy import JSON, Column, DateTime, ForeignKey, Index, Integer, String, Text, text
from sqlmodel import Field, SQLModel

from .enums import TicketStatus


def utc_now():
    """
    Get current time in UTC (timezone-naive) for database storage.

    The API layer serializes these with a 'Z' suffix (core.schema_base).
    """
    return datetime.now(timezone.utc).replace(tzinfo=None)


class TableModel(SQLModel):
    """Base table model with common functionality."""

    pass


class Customer(TableModel, table=True):
    """Customer lookup (read-only from the ticket subsystem)."""

    __tablename__ = "customers"

    id: Optional[int] = Field(default=None, primary_key=True)
    customer_name: str = Field(
        sa_column=Column(String(200), nullable=False),
        description="Customer display name",
    )


class Site(TableModel, table=True):
    """Customer site lookup (read-only from the ticket subsystem)."""

    __tablename__ = "sites"

    id: Optional[int] = Field(default=None, primary_key=True)
    site_name: str = Field(
        sa_column=Column(String(200), nullable=False),
        description="Site display name",
    )
    customer_id: int = Field(
        sa_column=Column(Integer, ForeignKey("customers.id"), nullable=False),
        description="Customer owning this site",
    )

    __table_args__ = (Index("ix_sites_customer_id", "customer_id"),)


class Ticket(TableModel, table=True):
    """Support ticket."""

    __tablename__ = "tickets"

    id: Optional[int] = Field(default=None, primary_key=True)
    ticket_code: str = Field(
        sa_column=Column(String(40), nullable=False, unique=True),
        description="Human-readable ticket code (immutable)",
    )

    # Classification
    category: str = Field(
        sa_column=Column(String(40), nullable=False),
        description="TicketCategory value",
    )
    subcategory: str = Field(
        sa_column=Column(String(100), nullable=False),
        description="Subcategory name",
    )
    service_categories: List[str] = Field(
        default_factory=list,
        sa_column=Column(JSON, nullable=False),
        description="Service category tags",
    )

    title: str = Field(sa_column=Column(String(255), nullable=False))
    description: str = Field(sa_column=Column(Text, nullable=False))

    # Parties
    created_by_id: int = Field(
        sa_column=Column(Integer, nullable=False),
        description="Authoring user (immutable)",
    )
    assigned_to_id: Optional[int] = Field(
        default=None,
        sa_column=Column(Integer, nullable=True),
        description="Assignee, settable later",
    )

    # Structured location reference
    customer_id: Optional[int] = Field(
        default=None,
        sa_column=Column(Integer, ForeignKey("customers.id"), nullable=True),
    )
    site_id: Optional[int] = Field(
        default=None,
        sa_column=Column(Integer, ForeignKey("sites.id"), nullable=True),
    )
    # Free-text location (PreSales / Others)
    manual_customer: Optional[str] = Field(
        default=None, sa_column=Column(String(200), nullable=True)
    )
    manual_site: Optional[str] = Field(
        default=None, sa_column=Column(String(200), nullable=True)
    )

    contact_person: Optional[str] = Field(
        default=None, sa_column=Column(String(100), nullable=True)
    )
    mobile_no: Optional[str] = Field(
        default=None, sa_column=Column(String(30), nullable=True)
    )
    proposed_date: Optional[datetime] = Field(
        default=None, sa_column=Column(DateTime, nullable=True)
    )

    priority: str = Field(sa_column=Column(String(20), nullable=False))
    status: str = Field(
        default=TicketStatus.OPEN.value,
        sa_column=Column(
            String(20),
            nullable=False,
            server_default=text(f"'{TicketStatus.OPEN.value}'"),
        ),
        description="TicketStatus value; changed only through the status engine",
    )

    created_at: datetime = Field(
        default_factory=utc_now,
        sa_column=Column(DateTime, nullable=False, server_default=text("CURRENT_TIMESTAMP")),
        description="Creation timestamp (immutable, default sort key)",
    )
    updated_at: datetime = Field(
        default_factory=utc_now,
        sa_column=Column(DateTime, nullable=False, server_default=text("CURRENT_TIMESTAMP")),
        description="Last status/assignment change",
    )

    __table_args__ = (
        Index("ix_tickets_status", "status"),
        Index("ix_tickets_created_by_id", "created_by_id"),
        Index("ix_tickets_assigned_to_id", "assigned_to_id"),
        Index("ix_tickets_created_at", "created_at"),
    )


class TicketMessage(TableModel, table=True):
    """Thread message. Append-only: never edited or deleted on its own."""

    __tablename__ = "ticket_messages"

    id: Optional[int] = Field(default=None, primary_key=True)
    ticket_id: int = Field(
        sa_column=Column(
            Integer,
            ForeignKey("tickets.id", ondelete="CASCADE"),
            nullable=False,
        ),
        description="Ticket this message belongs to",
    )
    sender_id: int = Field(
        sa_column=Column(Integer, nullable=False),
        description="Authoring user",
    )
    content: str = Field(
        min_length=1,
        sa_column=Column(Text, nullable=False),
        description="Message content (sanitized)",
    )
    created_at: datetime = Field(
        default_factory=utc_now,
        sa_column=Column(DateTime, nullable=False, server_default=text("CURRENT_TIMESTAMP")),
        description="Message creation timestamp",
    )

    __table_args__ = (
        Index("ix_ticket_messages_ticket_created", "ticket_id", "created_at", "id"),
    )
