"""
Ticket status engine.

The one place that knows which status changes are legal and who may make
them. Everything here is a pure function of its inputs: the service
re-checks every write with it, and the session controller uses it to
decide what to offer and to refuse obviously invalid requests locally.

Transition table::

    OPEN        -> IN_PROGRESS
    IN_PROGRESS -> RESOLVED
    RESOLVED    -> CLOSED
    CLOSED      -> REOPENED
    REOPENED    -> IN_PROGRESS

Authorization on top of the table:

- IN_PROGRESS, RESOLVED, CLOSED: elevated role only
- CLOSED -> REOPENED: elevated role or the ticket's creator
- delete: elevated role, and only from CLOSED
"""

from dataclasses import dataclass
from typing import Dict, FrozenSet, List, Optional, Protocol, Type, TypeVar

from ticketdesk.core.exceptions import (
    AuthorizationRejection,
    IllegalTransitionRejection,
    TransitionRejection,
)
from ticketdesk.core.security import Requester
from ticketdesk.db.enums import TicketStatus

NOT_AUTHORIZED = "not authorized for this transition"
DELETE_REQUIRES_CLOSED = "only CLOSED tickets can be deleted"
DELETE_NOT_AUTHORIZED = "not authorized to delete tickets"

TRANSITIONS: Dict[TicketStatus, FrozenSet[TicketStatus]] = {
    TicketStatus.OPEN: frozenset({TicketStatus.IN_PROGRESS}),
    TicketStatus.IN_PROGRESS: frozenset({TicketStatus.RESOLVED}),
    TicketStatus.RESOLVED: frozenset({TicketStatus.CLOSED}),
    TicketStatus.CLOSED: frozenset({TicketStatus.REOPENED}),
    TicketStatus.REOPENED: frozenset({TicketStatus.IN_PROGRESS}),
}

# Targets only the elevated role may move a ticket into
ELEVATED_TARGETS = frozenset(
    {TicketStatus.IN_PROGRESS, TicketStatus.RESOLVED, TicketStatus.CLOSED}
)


class StatusCarrier(Protocol):
    """Anything with the two ticket fields the engine reads."""

    status: TicketStatus
    created_by_id: int


T = TypeVar("T", bound=StatusCarrier)


@dataclass(frozen=True)
class TransitionDecision:
    """Outcome of evaluating one requested status change."""

    allowed: bool
    reason: Optional[str] = None
    rejection: Optional[Type[TransitionRejection]] = None

    def raise_if_rejected(self) -> None:
        if not self.allowed:
            raise self.rejection(self.reason)


ALLOWED = TransitionDecision(allowed=True)


def illegal_transition_reason(current: TicketStatus, target: TicketStatus) -> str:
    return f"illegal transition from {TicketStatus(current).value} to {TicketStatus(target).value}"


def evaluate_transition(
    current: TicketStatus,
    target: TicketStatus,
    requester: Requester,
    created_by_id: int,
) -> TransitionDecision:
    """
    Decide whether ``requester`` may move a ticket from ``current`` to ``target``.

    Pairs outside the table are illegal for every role, self-transitions
    included. Legal pairs are then gated by role, with the creator allowed
    to reopen their own closed ticket.
    """
    current = TicketStatus(current)
    target = TicketStatus(target)

    if target not in TRANSITIONS.get(current, frozenset()):
        return TransitionDecision(
            allowed=False,
            reason=illegal_transition_reason(current, target),
            rejection=IllegalTransitionRejection,
        )

    if requester.is_elevated:
        return ALLOWED

    if target is TicketStatus.REOPENED and requester.user_id == created_by_id:
        return ALLOWED

    return TransitionDecision(
        allowed=False,
        reason=NOT_AUTHORIZED,
        rejection=AuthorizationRejection,
    )


def ensure_transition(
    current: TicketStatus,
    target: TicketStatus,
    requester: Requester,
    created_by_id: int,
) -> None:
    """Raise the matching TransitionRejection if the change is not allowed."""
    evaluate_transition(current, target, requester, created_by_id).raise_if_rejected()


def request_transition(ticket: T, target: TicketStatus, requester: Requester) -> T:
    """
    Apply a status change to a ticket contract.

    Returns:
        A copy of ``ticket`` with only ``status`` changed

    Raises:
        AuthorizationRejection: "not authorized for this transition"
        IllegalTransitionRejection: "illegal transition from <current> to <target>"
    """
    ensure_transition(ticket.status, target, requester, ticket.created_by_id)
    return ticket.model_copy(update={"status": TicketStatus(target)})


def evaluate_delete(ticket: StatusCarrier, requester: Requester) -> TransitionDecision:
    """Deletion needs the elevated role and a CLOSED ticket."""
    if not requester.is_elevated:
        return TransitionDecision(
            allowed=False,
            reason=DELETE_NOT_AUTHORIZED,
            rejection=AuthorizationRejection,
        )
    if TicketStatus(ticket.status) is not TicketStatus.CLOSED:
        return TransitionDecision(
            allowed=False,
            reason=DELETE_REQUIRES_CLOSED,
            rejection=IllegalTransitionRejection,
        )
    return ALLOWED


def ensure_delete(ticket: StatusCarrier, requester: Requester) -> None:
    evaluate_delete(ticket, requester).raise_if_rejected()


def legal_transitions(ticket: StatusCarrier, requester: Requester) -> List[TicketStatus]:
    """Every target status the requester could move this ticket to right now."""
    return [
        target
        for target in TicketStatus
        if evaluate_transition(ticket.status, target, requester, ticket.created_by_id).allowed
    ]


def can_reopen_as_creator(ticket: StatusCarrier, requester: Requester) -> bool:
    """True when the creator path specifically would reopen this ticket."""
    return (
        requester.user_id == ticket.created_by_id
        and evaluate_transition(
            ticket.status, TicketStatus.REOPENED, requester, ticket.created_by_id
        ).allowed
    )
