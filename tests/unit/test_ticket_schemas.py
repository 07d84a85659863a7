"""
Unit tests for ticket request schemas and sanitization.
"""

from datetime import datetime

import pytest
from pydantic import ValidationError as PydanticValidationError

from ticketdesk.core.exceptions import ValidationError
from ticketdesk.core.sanitizer import MAX_MESSAGE_LENGTH, sanitize_message_content
from ticketdesk.db.enums import TicketCategory, TicketPriority
from ticketdesk.schemas import (
    TicketCreate,
    TicketMessageCreate,
    TicketRead,
    describe_validation_error,
)
from tests.factories import TicketPayloadFactory, TicketReadFactory


def test_presales_payload_with_manual_location_is_valid():
    payload = TicketCreate.model_validate(TicketPayloadFactory.presales())

    assert payload.category is TicketCategory.PRESALES
    assert payload.priority is TicketPriority.HIGH
    assert payload.manual_customer == "Walk-in Customer"
    assert payload.customer_id is None


def test_onsite_payload_is_valid_and_proposed_date_is_stored_naive_utc():
    payload = TicketCreate.model_validate(TicketPayloadFactory.onsite(customer_id=1, site_id=2))

    assert payload.customer_id == 1
    assert payload.proposed_date == datetime(2025, 7, 14, 9, 0)


@pytest.mark.parametrize("field", ["title", "description", "category", "subcategory", "priority"])
def test_required_fields(field):
    body = TicketPayloadFactory.presales()
    body.pop(field)

    with pytest.raises(PydanticValidationError):
        TicketCreate.model_validate(body)


def test_blank_title_is_rejected():
    with pytest.raises(PydanticValidationError) as exc_info:
        TicketCreate.model_validate(TicketPayloadFactory.presales(title="   "))

    assert "title is required" in describe_validation_error(exc_info.value)


def test_text_fields_are_stripped():
    payload = TicketCreate.model_validate(
        TicketPayloadFactory.presales(title="  Quote needed  ", manualSite="   ")
    )

    assert payload.title == "Quote needed"
    assert payload.manual_site is None


def test_presales_rejects_structured_ids():
    with pytest.raises(PydanticValidationError) as exc_info:
        TicketCreate.model_validate(TicketPayloadFactory.presales(customerId=1, siteId=2))

    assert "manual customer/site text" in describe_validation_error(exc_info.value)


def test_onsite_requires_customer_and_site():
    body = TicketPayloadFactory.onsite(customer_id=1, site_id=2)
    body.pop("siteId")

    with pytest.raises(PydanticValidationError) as exc_info:
        TicketCreate.model_validate(body)

    assert "require customer_id and site_id" in describe_validation_error(exc_info.value)


def test_remote_support_rejects_manual_text():
    body = TicketPayloadFactory.onsite(
        customer_id=1, site_id=2, category=TicketCategory.REMOTE_SUPPORT.value, manualCustomer="Acme"
    )

    with pytest.raises(PydanticValidationError):
        TicketCreate.model_validate(body)


def test_others_rejects_contact_details():
    with pytest.raises(PydanticValidationError) as exc_info:
        TicketCreate.model_validate(TicketPayloadFactory.others(contactPerson="Omar"))

    assert "do not take contact details" in describe_validation_error(exc_info.value)


def test_service_categories_are_deduplicated():
    payload = TicketCreate.model_validate(
        TicketPayloadFactory.presales(serviceCategories=["CCTV", " CCTV ", "", "Fire Alarm"])
    )

    assert payload.service_categories == ["CCTV", "Fire Alarm"]


def test_ticket_read_serializes_camel_case_with_utc_suffix():
    ticket = TicketReadFactory.create(created_by_id=10)

    body = ticket.model_dump(mode="json", by_alias=True)

    assert body["createdById"] == 10
    assert body["ticketCode"].startswith("EN-SR-")
    assert body["createdAt"].endswith("Z")
    assert body["status"] == "OPEN"
    assert TicketRead.model_validate(body).created_by_id == 10


def test_blank_message_is_rejected_by_schema():
    with pytest.raises(PydanticValidationError):
        TicketMessageCreate(content=" \n\t ")


def test_sanitizer_strips_scripts_and_keeps_formatting():
    cleaned = sanitize_message_content('  <b>Replaced the drive</b><script>alert("x")</script>  ')

    assert cleaned == "<b>Replaced the drive</b>"


def test_sanitizer_returns_empty_for_markup_only_content():
    assert sanitize_message_content("<script>alert(1)</script>") == ""


def test_sanitizer_rejects_oversized_content():
    with pytest.raises(ValidationError):
        sanitize_message_content("a" * (MAX_MESSAGE_LENGTH + 1))
