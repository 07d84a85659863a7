"""
HTTP store client for the ticket service API.

Implements TicketStore, MessageStore and LookupStore over one pooled
httpx.AsyncClient. Error responses are rebuilt into the same typed
exceptions the service raised; connection failures and timeouts become
TransportError.
"""

import logging
from typing import Any, List, Optional

import httpx

from ticketdesk.core.config import settings
from ticketdesk.core.exceptions import TransportError, error_from_response
from ticketdesk.core.security import Requester
from ticketdesk.db.enums import TicketStatus
from ticketdesk.schemas import (
    CustomerRead,
    SiteRead,
    TicketCounts,
    TicketCreate,
    TicketMessageRead,
    TicketRead,
)

logger = logging.getLogger(__name__)


class TicketStoreClient:
    """Async HTTP client for /tickets, /customers and /sites."""

    def __init__(
        self,
        base_url: Optional[str] = None,
        *,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self._client = httpx.AsyncClient(
            base_url=base_url or settings.sync.store_base_url,
            timeout=httpx.Timeout(timeout or settings.sync.request_timeout_seconds),
            headers={"Content-Type": "application/json", "Accept": "application/json"},
            limits=httpx.Limits(max_connections=20, max_keepalive_connections=5),
            transport=transport,
        )

    async def aclose(self) -> None:
        """Close pooled connections (call when the session ends)."""
        if not self._client.is_closed:
            await self._client.aclose()

    async def __aenter__(self) -> "TicketStoreClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def _request(
        self,
        method: str,
        path: str,
        requester: Requester,
        *,
        json: Optional[dict] = None,
    ) -> Any:
        try:
            response = await self._client.request(
                method, path, json=json, headers=requester.as_headers()
            )
        except httpx.HTTPError as exc:
            logger.warning(f"Ticket store request failed | {method} {path} | Error: {exc!r}")
            raise TransportError() from exc

        if response.status_code == 204:
            return None

        try:
            payload = response.json()
        except ValueError:
            payload = None

        if response.is_error:
            raise error_from_response(
                response.status_code, payload if isinstance(payload, dict) else None
            )
        return payload

    # ==================== Tickets ====================

    async def list_tickets(self, requester: Requester) -> List[TicketRead]:
        data = await self._request("GET", "/tickets", requester)
        return [TicketRead.model_validate(item) for item in data]

    async def count_tickets(self, requester: Requester) -> TicketCounts:
        return TicketCounts.model_validate(await self._request("GET", "/tickets/counts", requester))

    async def get_ticket(self, ticket_id: int, requester: Requester) -> TicketRead:
        return TicketRead.model_validate(
            await self._request("GET", f"/tickets/{ticket_id}", requester)
        )

    async def create_ticket(self, payload: TicketCreate, requester: Requester) -> TicketRead:
        body = payload.model_dump(mode="json", by_alias=True, exclude_none=True)
        return TicketRead.model_validate(
            await self._request("POST", "/tickets", requester, json=body)
        )

    async def update_status(
        self, ticket_id: int, status: TicketStatus, requester: Requester
    ) -> TicketRead:
        return TicketRead.model_validate(
            await self._request(
                "PATCH",
                f"/tickets/{ticket_id}/status",
                requester,
                json={"status": TicketStatus(status).value},
            )
        )

    async def assign_ticket(
        self, ticket_id: int, assignee_id: Optional[int], requester: Requester
    ) -> TicketRead:
        return TicketRead.model_validate(
            await self._request(
                "PATCH",
                f"/tickets/{ticket_id}/assignee",
                requester,
                json={"assignedToId": assignee_id},
            )
        )

    async def delete_ticket(self, ticket_id: int, requester: Requester) -> None:
        await self._request("DELETE", f"/tickets/{ticket_id}", requester)

    # ==================== Messages ====================

    async def list_messages(self, ticket_id: int, requester: Requester) -> List[TicketMessageRead]:
        data = await self._request("GET", f"/tickets/{ticket_id}/messages", requester)
        return [TicketMessageRead.model_validate(item) for item in data]

    async def create_message(
        self, ticket_id: int, content: str, requester: Requester
    ) -> TicketMessageRead:
        return TicketMessageRead.model_validate(
            await self._request(
                "POST",
                f"/tickets/{ticket_id}/messages",
                requester,
                json={"content": content},
            )
        )

    # ==================== Lookups ====================

    async def get_customer(self, customer_id: int, requester: Requester) -> CustomerRead:
        return CustomerRead.model_validate(
            await self._request("GET", f"/customers/{customer_id}", requester)
        )

    async def get_site(self, site_id: int, requester: Requester) -> SiteRead:
        return SiteRead.model_validate(await self._request("GET", f"/sites/{site_id}", requester))
