"""
Ticket schemas for API validation and serialization.
"""
from datetime import datetime, timezone
from typing import List, Optional

from pydantic import Field, field_validator, model_validator

from ticketdesk.core.schema_base import HTTPSchemaModel
from ticketdesk.db.enums import TicketCategory, TicketPriority, TicketStatus


def _strip_or_none(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = value.strip()
    return value or None


class TicketCreate(HTTPSchemaModel):
    """Schema for creating a ticket. The creator comes from the requester."""

    title: str = Field(..., max_length=255, description="Ticket subject")
    description: str = Field(..., description="Problem description")
    category: TicketCategory
    subcategory: str = Field(..., max_length=100)
    service_categories: List[str] = Field(default_factory=list)
    priority: TicketPriority

    customer_id: Optional[int] = Field(None, gt=0)
    site_id: Optional[int] = Field(None, gt=0)
    manual_customer: Optional[str] = Field(None, max_length=200)
    manual_site: Optional[str] = Field(None, max_length=200)

    contact_person: Optional[str] = Field(None, max_length=100)
    mobile_no: Optional[str] = Field(None, max_length=30)
    proposed_date: Optional[datetime] = None
    assigned_to_id: Optional[int] = Field(None, gt=0)

    @field_validator("title", "description", "subcategory")
    @classmethod
    def require_text(cls, v: str, info) -> str:
        v = v.strip()
        if not v:
            raise ValueError(f"{info.field_name} is required")
        return v

    @field_validator("manual_customer", "manual_site", "contact_person", "mobile_no")
    @classmethod
    def blank_to_none(cls, v: Optional[str]) -> Optional[str]:
        return _strip_or_none(v)

    @field_validator("service_categories")
    @classmethod
    def clean_service_categories(cls, v: List[str]) -> List[str]:
        cleaned = []
        for item in v:
            item = item.strip()
            if item and item not in cleaned:
                cleaned.append(item)
        return cleaned

    @field_validator("proposed_date")
    @classmethod
    def naive_utc(cls, v: Optional[datetime]) -> Optional[datetime]:
        if v is not None and v.tzinfo is not None:
            v = v.astimezone(timezone.utc).replace(tzinfo=None)
        return v

    @model_validator(mode="after")
    def check_location_representation(self) -> "TicketCreate":
        """Exactly one location representation is valid per category."""
        has_structured = self.customer_id is not None or self.site_id is not None
        has_manual = self.manual_customer is not None or self.manual_site is not None

        if self.category.uses_manual_location:
            if has_structured:
                raise ValueError(
                    f"{self.category.value} tickets take manual customer/site text, not customer or site ids"
                )
        else:
            if has_manual:
                raise ValueError(
                    f"{self.category.value} tickets reference a customer and site, not manual text"
                )
            if self.customer_id is None or self.site_id is None:
                raise ValueError(f"{self.category.value} tickets require customer_id and site_id")

        if not self.category.accepts_contact_details and (
            self.contact_person is not None or self.mobile_no is not None
        ):
            raise ValueError(f"{self.category.value} tickets do not take contact details")

        return self


class TicketRead(HTTPSchemaModel):
    """Schema for reading ticket data."""

    id: int
    ticket_code: str
    title: str
    description: str
    category: TicketCategory
    subcategory: str
    service_categories: List[str] = Field(default_factory=list)
    priority: TicketPriority
    status: TicketStatus

    created_by_id: int
    assigned_to_id: Optional[int] = None

    customer_id: Optional[int] = None
    site_id: Optional[int] = None
    manual_customer: Optional[str] = None
    manual_site: Optional[str] = None

    contact_person: Optional[str] = None
    mobile_no: Optional[str] = None
    proposed_date: Optional[datetime] = None

    created_at: datetime
    updated_at: datetime


class TicketStatusUpdate(HTTPSchemaModel):
    """Single-field status change request."""

    status: TicketStatus


class TicketAssigneeUpdate(HTTPSchemaModel):
    """Assignment change request; null clears the assignee."""

    assigned_to_id: Optional[int] = Field(None, gt=0)


class TicketCounts(HTTPSchemaModel):
    """Ticket totals for the requester's visible set."""

    total: int = 0
    open: int = 0
    in_progress: int = 0
    resolved: int = 0
    closed: int = 0
    reopened: int = 0
