"""
Integration tests for ticket thread endpoints and lookups.
"""

import httpx
import pytest
import pytest_asyncio

from tests.factories import TicketPayloadFactory

pytestmark = pytest.mark.integration


@pytest_asyncio.fixture
async def ticket(http_client, creator) -> dict:
    response = await http_client.post(
        "/tickets", json=TicketPayloadFactory.presales(), headers=creator.as_headers()
    )
    return response.json()


async def post(client, ticket_id, requester, content):
    return await client.post(
        f"/tickets/{ticket_id}/messages",
        json={"content": content},
        headers=requester.as_headers(),
    )


@pytest.mark.asyncio
async def test_thread_is_returned_in_posting_order(http_client, ticket, admin, creator):
    for requester, content in [
        (creator, "Printer shows error 50.4"),
        (admin, "Power cycle it please"),
        (creator, "Done, still failing"),
    ]:
        response = await post(http_client, ticket["id"], requester, content)
        assert response.status_code == 201

    response = await http_client.get(
        f"/tickets/{ticket['id']}/messages", headers=creator.as_headers()
    )

    messages = response.json()
    assert [m["content"] for m in messages] == [
        "Printer shows error 50.4",
        "Power cycle it please",
        "Done, still failing",
    ]
    assert [m["senderId"] for m in messages] == [creator.user_id, admin.user_id, creator.user_id]
    assert [m["createdAt"] for m in messages] == sorted(m["createdAt"] for m in messages)
    assert all(m["ticketId"] == ticket["id"] for m in messages)


@pytest.mark.asyncio
async def test_posted_message_is_sanitized(http_client, ticket, creator):
    response = await post(
        http_client, ticket["id"], creator, '<p>Fixed</p><script>alert("x")</script>'
    )

    assert response.status_code == 201
    assert response.json()["content"] == "<p>Fixed</p>"


@pytest.mark.asyncio
@pytest.mark.parametrize("content", ["", "   ", "<script>alert(1)</script>"])
async def test_empty_content_is_rejected(http_client, ticket, creator, content):
    response = await post(http_client, ticket["id"], creator, content)

    assert response.status_code == 422
    assert response.json()["code"] == "validation_error"

    thread = await http_client.get(
        f"/tickets/{ticket['id']}/messages", headers=creator.as_headers()
    )
    assert thread.json() == []


@pytest.mark.asyncio
async def test_message_on_missing_ticket_is_not_found(http_client, creator):
    response = await post(http_client, 4242, creator, "Anyone there?")

    assert response.status_code == 404
    assert response.json() == {"detail": "ticket 4242 not found", "code": "not_found"}


@pytest.mark.asyncio
async def test_outsider_cannot_read_or_post(http_client, ticket, outsider):
    response = await http_client.get(
        f"/tickets/{ticket['id']}/messages", headers=outsider.as_headers()
    )
    assert response.status_code == 404

    response = await post(http_client, ticket["id"], outsider, "Let me in")
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_status_changes_do_not_touch_the_thread(http_client, ticket, admin, creator):
    await post(http_client, ticket["id"], creator, "Still broken")
    await http_client.patch(
        f"/tickets/{ticket['id']}/status",
        json={"status": "IN_PROGRESS"},
        headers=admin.as_headers(),
    )

    response = await http_client.get(
        f"/tickets/{ticket['id']}/messages", headers=creator.as_headers()
    )

    assert [m["content"] for m in response.json()] == ["Still broken"]


# ============================================================================
# Lookups
# ============================================================================

@pytest.mark.asyncio
async def test_customer_and_site_lookups(http_client, creator, customer_with_sites):
    customer = customer_with_sites["customer"]
    site = customer_with_sites["sites"][0]

    response = await http_client.get(f"/customers/{customer.id}", headers=creator.as_headers())
    assert response.json() == {"id": customer.id, "customerName": "Acme Corp"}

    response = await http_client.get(f"/sites/{site.id}", headers=creator.as_headers())
    assert response.json()["siteName"] == "Acme HQ"

    response = await http_client.get(
        f"/customers/{customer.id}/sites", headers=creator.as_headers()
    )
    assert [s["siteName"] for s in response.json()] == ["Acme HQ", "Acme Plant"]


@pytest.mark.asyncio
async def test_lookup_missing_record_is_not_found(http_client, creator):
    response = await http_client.get("/customers/404", headers=creator.as_headers())

    assert response.status_code == 404


@pytest.mark.asyncio
async def test_health_endpoint(api_app):
    transport = httpx.ASGITransport(app=api_app)
    async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as client:
        response = await client.get("/health")

    assert response.status_code == 200
    assert response.json()["status"] in ("healthy", "degraded")
    assert "X-Correlation-ID" in response.headers
