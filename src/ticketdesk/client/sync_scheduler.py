"""
Periodic background refresh for a ticket session.

Uses APScheduler's AsyncIOScheduler to re-read the ticket list and, if a
thread is open, that thread, on a fixed interval. Without a push channel
this poll is what keeps concurrent viewers converging on the store's state.

Failures never stop the schedule: they are logged and the next tick tries
again. A tick that finds a refresh still in flight is skipped, so slow
stores do not pile up requests.
"""

import logging
import time
from dataclasses import dataclass
from typing import Optional

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger

from ticketdesk.core.config import settings
from ticketdesk.core.exceptions import NotFound, TicketDeskError
from ticketdesk.core.logging_config import TicketLogger
from ticketdesk.core.metrics import track_sync
from ticketdesk.core.security import Requester

from .session_controller import TicketSessionController

logger = logging.getLogger(__name__)
sync_logger = TicketLogger("sync")


@dataclass(frozen=True)
class SyncReport:
    """Outcome of one refresh of list and open thread."""

    list_error: Optional[TicketDeskError] = None
    thread_error: Optional[TicketDeskError] = None
    thread_closed: bool = False

    @property
    def ok(self) -> bool:
        return self.list_error is None and self.thread_error is None


class SyncScheduler:
    """
    Interval poller bound to one controller and one requester.

    Usage:
        sync = SyncScheduler(controller, requester)
        sync.start()
        ...
        sync.stop()
    """

    def __init__(
        self,
        controller: TicketSessionController,
        requester: Requester,
        *,
        interval_seconds: Optional[float] = None,
        scheduler: Optional[AsyncIOScheduler] = None,
    ):
        self.controller = controller
        self.requester = requester
        self.interval_seconds = interval_seconds or settings.sync.poll_interval_seconds
        self.job_id = f"ticket_sync_user_{requester.user_id}"

        self._owns_scheduler = scheduler is None
        self._scheduler = scheduler or AsyncIOScheduler()
        self._refreshing = False

    @property
    def running(self) -> bool:
        return self._scheduler.get_job(self.job_id) is not None

    def start(self) -> None:
        """Begin polling. Must be called from a running event loop; no-op if already started."""
        if self.running:
            return

        if not self._scheduler.running:
            self._scheduler.start()

        self._scheduler.add_job(
            self.tick,
            trigger=IntervalTrigger(seconds=self.interval_seconds),
            id=self.job_id,
            name=f"Ticket sync for user {self.requester.user_id}",
            max_instances=1,
            coalesce=True,
            replace_existing=True,
        )
        logger.info(
            f"Ticket sync started | User ID: {self.requester.user_id} | "
            f"Interval: {self.interval_seconds}s"
        )

    def stop(self) -> None:
        """Cancel polling. Safe to call more than once."""
        if self._scheduler.get_job(self.job_id) is not None:
            self._scheduler.remove_job(self.job_id)
            logger.info(f"Ticket sync stopped | User ID: {self.requester.user_id}")

        if self._owns_scheduler and self._scheduler.running:
            self._scheduler.shutdown(wait=False)

    async def tick(self) -> Optional[SyncReport]:
        """
        Scheduled refresh.

        Returns None when skipped because the previous refresh is still in
        flight. Store calls made by user actions do not hold the poll back.
        """
        if self._refreshing:
            logger.debug(f"Sync tick skipped, refresh in flight | User ID: {self.requester.user_id}")
            track_sync("skipped", 0.0)
            return None

        report = await self._refresh()

        if report.list_error is not None:
            sync_logger.sync_failed("list", self.requester.user_id, report.list_error.message)
        if report.thread_error is not None:
            sync_logger.sync_failed(
                "thread",
                self.requester.user_id,
                report.thread_error.message,
                ticket_id=getattr(report.thread_error, "ticket_id", None),
            )
        return report

    async def refresh_now(self) -> SyncReport:
        """Manual refresh. Runs regardless of the schedule and reports errors to the caller."""
        return await self._refresh()

    async def _refresh(self) -> SyncReport:
        started = time.monotonic()
        list_error = thread_error = None
        thread_closed = False

        self._refreshing = True
        try:
            try:
                await self.controller.list_tickets(self.requester)
            except TicketDeskError as exc:
                list_error = exc

            if self.controller.open_ticket_id is not None:
                try:
                    await self.controller.refresh_thread(self.requester)
                except NotFound as exc:
                    thread_error = exc
                    thread_closed = self.controller.open_ticket_id is None
                except TicketDeskError as exc:
                    thread_error = exc
        finally:
            self._refreshing = False

        report = SyncReport(
            list_error=list_error,
            thread_error=thread_error,
            thread_closed=thread_closed,
        )
        track_sync("ok" if report.ok else "error", time.monotonic() - started)
        return report
