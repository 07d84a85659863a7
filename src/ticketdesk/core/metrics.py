"""
Prometheus metrics for ticket lifecycle and session sync.

Usage:
    from ticketdesk.core.metrics import track_transition

    track_transition(current="OPEN", target="IN_PROGRESS", outcome="accepted")
"""

from prometheus_client import Counter, Histogram

# ==============================================================================
# Lifecycle Metrics
# ==============================================================================

tickets_created = Counter(
    'ticketdesk_tickets_created_total',
    'Total tickets created',
    ['category']
)

ticket_transitions = Counter(
    'ticketdesk_ticket_transitions_total',
    'Status transition requests by outcome',
    ['current', 'target', 'outcome']
)

tickets_deleted = Counter(
    'ticketdesk_tickets_deleted_total',
    'Total tickets deleted'
)

ticket_messages_posted = Counter(
    'ticketdesk_ticket_messages_posted_total',
    'Total thread messages posted'
)

# ==============================================================================
# Sync Metrics
# ==============================================================================

sync_runs = Counter(
    'ticketdesk_sync_runs_total',
    'Background refresh runs by outcome',
    ['outcome']
)

sync_duration = Histogram(
    'ticketdesk_sync_duration_seconds',
    'Duration of a background refresh in seconds',
    buckets=(0.05, 0.1, 0.25, 0.5, 1, 2.5, 5, 10, 30, float('inf'))
)


def track_transition(current: str, target: str, outcome: str) -> None:
    """Count a transition request. outcome is 'accepted' or a rejection code."""
    ticket_transitions.labels(current=current, target=target, outcome=outcome).inc()


def track_sync(outcome: str, duration_seconds: float) -> None:
    """Record one refresh run. outcome is 'ok', 'error' or 'skipped'."""
    sync_runs.labels(outcome=outcome).inc()
    if outcome != "skipped":
        sync_duration.observe(duration_seconds)
