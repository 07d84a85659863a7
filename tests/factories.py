"""
Test data factories for generating realistic test data.

Usage:
    ticket = TicketReadFactory.create(status=TicketStatus.CLOSED, created_by_id=10)
    body = TicketPayloadFactory.onsite(customer_id=1, site_id=2)
"""

import itertools
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

from ticketdesk.db.enums import TicketCategory, TicketPriority, TicketStatus
from ticketdesk.schemas import TicketMessageRead, TicketRead

_ids = itertools.count(1)


def _next_id() -> int:
    return next(_ids)


class TicketReadFactory:
    """Factory for TicketRead contracts (what the stores return)."""

    @classmethod
    def create(
        cls,
        *,
        id: Optional[int] = None,
        status: TicketStatus = TicketStatus.OPEN,
        created_by_id: int = 10,
        assigned_to_id: Optional[int] = None,
        category: TicketCategory = TicketCategory.PRESALES,
        customer_id: Optional[int] = None,
        site_id: Optional[int] = None,
        manual_customer: Optional[str] = "Walk-in Customer",
        manual_site: Optional[str] = "Main Branch",
        created_at: Optional[datetime] = None,
        **overrides: Any,
    ) -> TicketRead:
        ticket_id = id or _next_id()
        created_at = created_at or datetime(2025, 7, 11, 10, 30, tzinfo=timezone.utc) + timedelta(
            seconds=ticket_id
        )
        if not category.uses_manual_location:
            manual_customer = manual_site = None

        data = dict(
            id=ticket_id,
            ticket_code=f"EN-SR-{created_at:%y%m%d%H%M%S}",
            title=f"Printer offline #{ticket_id}",
            description="The office printer stopped responding after a firmware update.",
            category=category,
            subcategory="Hardware",
            service_categories=["Printing"],
            priority=TicketPriority.MEDIUM,
            status=status,
            created_by_id=created_by_id,
            assigned_to_id=assigned_to_id,
            customer_id=customer_id,
            site_id=site_id,
            manual_customer=manual_customer,
            manual_site=manual_site,
            contact_person=None,
            mobile_no=None,
            proposed_date=None,
            created_at=created_at,
            updated_at=created_at,
        )
        data.update(overrides)
        return TicketRead(**data)


class TicketMessageFactory:
    """Factory for TicketMessageRead contracts."""

    @classmethod
    def create(
        cls,
        *,
        ticket_id: int,
        sender_id: int,
        content: str = "Any update on this?",
        created_at: Optional[datetime] = None,
    ) -> TicketMessageRead:
        return TicketMessageRead(
            id=_next_id(),
            ticket_id=ticket_id,
            sender_id=sender_id,
            content=content,
            created_at=created_at or datetime.now(timezone.utc),
        )


class TicketPayloadFactory:
    """camelCase request bodies for POST /tickets."""

    @classmethod
    def presales(cls, **overrides: Any) -> Dict[str, Any]:
        body = {
            "title": "Quote for access control system",
            "description": "Customer asked for a quote covering three doors.",
            "category": TicketCategory.PRESALES.value,
            "subcategory": "Quotation",
            "serviceCategories": ["Access Control"],
            "priority": TicketPriority.HIGH.value,
            "manualCustomer": "Walk-in Customer",
            "manualSite": "Downtown Branch",
            "contactPerson": "Mona Adel",
            "mobileNo": "+20 100 000 0000",
        }
        body.update(overrides)
        return body

    @classmethod
    def onsite(cls, customer_id: int, site_id: int, **overrides: Any) -> Dict[str, Any]:
        body = {
            "title": "CCTV camera down",
            "description": "Camera 4 in the parking lot shows no signal.",
            "category": TicketCategory.ONSITE_VISIT.value,
            "subcategory": "CCTV",
            "priority": TicketPriority.URGENT.value,
            "customerId": customer_id,
            "siteId": site_id,
            "proposedDate": "2025-07-14T09:00:00Z",
        }
        body.update(overrides)
        return body

    @classmethod
    def others(cls, **overrides: Any) -> Dict[str, Any]:
        body = {
            "title": "Internal tooling request",
            "description": "Need a spare laptop for the new hire.",
            "category": TicketCategory.OTHERS.value,
            "subcategory": "General",
            "priority": TicketPriority.LOW.value,
        }
        body.update(overrides)
        return body
