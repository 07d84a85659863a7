"""
Unit tests for the background sync scheduler.
"""

import asyncio
import logging

import pytest

from ticketdesk.client import SyncScheduler, TicketSessionController
from ticketdesk.core.exceptions import NotFound, TransportError
from ticketdesk.db.enums import TicketStatus
from tests.fakes import InMemoryTicketStore


@pytest.fixture
def store() -> InMemoryTicketStore:
    return InMemoryTicketStore()


@pytest.fixture
def controller(store) -> TicketSessionController:
    return TicketSessionController(store, store, store, timeout=1)


async def wait_for_call(store: InMemoryTicketStore, operation: str) -> None:
    while operation not in store.calls:
        await asyncio.sleep(0)


@pytest.fixture
def sync(controller, admin) -> SyncScheduler:
    return SyncScheduler(controller, admin, interval_seconds=3600)


@pytest.mark.asyncio
async def test_refresh_picks_up_changes_made_elsewhere(sync, controller, store, admin):
    ticket = store.add_ticket(status=TicketStatus.OPEN)
    await controller.open_thread(ticket.id, admin)

    store.set_status(ticket.id, TicketStatus.IN_PROGRESS)
    store.add_ticket()
    report = await sync.refresh_now()

    assert report.ok
    assert len(controller.tickets) == 2
    assert controller.thread.view.status == TicketStatus.IN_PROGRESS


@pytest.mark.asyncio
async def test_refresh_reports_closed_thread_after_concurrent_delete(sync, controller, store, admin):
    ticket = store.add_ticket()
    await controller.open_thread(ticket.id, admin)

    store.remove_ticket(ticket.id)
    report = await sync.refresh_now()

    assert isinstance(report.thread_error, NotFound)
    assert report.thread_closed
    assert controller.thread is None
    assert controller.tickets == ()


@pytest.mark.asyncio
async def test_refresh_without_open_thread_only_reads_list(sync, store):
    report = await sync.refresh_now()

    assert report.ok
    assert store.calls == ["list_tickets"]


@pytest.mark.asyncio
async def test_tick_logs_failures_and_does_not_raise(sync, store, caplog):
    store.failures["list_tickets"] = TransportError()

    with caplog.at_level(logging.WARNING, logger="ticket.sync"):
        report = await sync.tick()

    assert isinstance(report.list_error, TransportError)
    assert not report.ok
    assert "Sync failed | Operation: list" in caplog.text


@pytest.mark.asyncio
async def test_tick_skipped_while_previous_refresh_in_flight(sync, store):
    store.gates["list_tickets"] = asyncio.Event()
    pending = asyncio.create_task(sync.tick())
    await wait_for_call(store, "list_tickets")

    assert await sync.tick() is None
    assert store.calls.count("list_tickets") == 1

    store.gates.pop("list_tickets").set()
    report = await pending
    assert report.ok


@pytest.mark.asyncio
async def test_tick_runs_while_user_write_in_flight(sync, controller, store, admin):
    ticket = store.add_ticket()
    store.gates["create_message"] = asyncio.Event()
    posting = asyncio.create_task(controller.post_message(ticket.id, admin, "on my way"))
    await wait_for_call(store, "create_message")

    report = await sync.tick()

    assert report is not None
    assert report.ok
    assert [view.id for view in controller.tickets] == [ticket.id]

    store.gates.pop("create_message").set()
    await posting


@pytest.mark.asyncio
async def test_start_registers_one_job_and_stop_removes_it(sync):
    sync.start()
    sync.start()

    try:
        assert sync.running
        jobs = sync._scheduler.get_jobs()
        assert [job.id for job in jobs] == ["ticket_sync_user_1"]
        assert jobs[0].max_instances == 1
    finally:
        sync.stop()

    assert not sync.running
    sync.stop()
