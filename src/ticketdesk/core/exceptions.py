"""
Typed exceptions shared by the ticket service and the ticket session client.

Every error carries a machine-readable ``code`` and the HTTP status it maps
to, so the service can render it and the store client can rebuild the same
type from a response without parsing messages.

    TicketDeskError
    +-- ValidationError
    +-- TransitionRejection
    |   +-- AuthorizationRejection
    |   +-- IllegalTransitionRejection
    +-- NotFound
    +-- TransportError
"""

from typing import Dict, Optional, Type


class TicketDeskError(Exception):
    """Base class for all ticket errors."""

    code: str = "ticketdesk_error"
    status_code: int = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict:
        return {"detail": self.message, "code": self.code}


class ValidationError(TicketDeskError):
    """Input rejected before it reaches the store (empty title, blank content...)."""

    code = "validation_error"
    status_code = 422


class TransitionRejection(TicketDeskError):
    """Status Engine refused a status change or deletion."""

    code = "transition_rejected"
    status_code = 409


class AuthorizationRejection(TransitionRejection):
    """Requester lacks the role (or creator identity) the action needs."""

    code = "not_authorized"
    status_code = 403


class IllegalTransitionRejection(TransitionRejection):
    """Requested move is not in the transition table for the current status."""

    code = "illegal_transition"
    status_code = 409


class NotFound(TicketDeskError):
    """Ticket (or lookup record) does not exist, or is not visible to the requester."""

    code = "not_found"
    status_code = 404

    def __init__(self, message: str, ticket_id: Optional[int] = None):
        super().__init__(message)
        self.ticket_id = ticket_id


class TransportError(TicketDeskError):
    """Store unreachable or timed out."""

    code = "transport_error"
    status_code = 503

    DEFAULT_MESSAGE = "ticket store unavailable, please retry"

    def __init__(self, message: str = DEFAULT_MESSAGE):
        super().__init__(message)


ERRORS_BY_CODE: Dict[str, Type[TicketDeskError]] = {
    cls.code: cls
    for cls in (
        ValidationError,
        AuthorizationRejection,
        IllegalTransitionRejection,
        NotFound,
        TransportError,
    )
}

ERRORS_BY_STATUS: Dict[int, Type[TicketDeskError]] = {
    400: ValidationError,
    422: ValidationError,
    403: AuthorizationRejection,
    409: IllegalTransitionRejection,
    404: NotFound,
}


def error_from_response(status_code: int, payload: Optional[dict]) -> TicketDeskError:
    """Rebuild a typed error from a service error response.

    Prefers the ``code`` field, falls back to the HTTP status, and keeps the
    ``detail`` message verbatim.
    """
    payload = payload or {}
    detail = payload.get("detail")
    if not isinstance(detail, str):
        detail = f"ticket store returned HTTP {status_code}"

    error_cls = ERRORS_BY_CODE.get(payload.get("code", "")) or ERRORS_BY_STATUS.get(status_code)
    if error_cls is None:
        return TransportError()
    if error_cls is TransportError:
        return TransportError(detail)
    return error_cls(detail)
