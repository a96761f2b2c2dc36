"""
Archive Scheduler

Recurring background task that closes the day: it drains the order store,
appends the drained orders to the history log, writes the Excel report and
persists the history file.

Timing:
    - archive_at unset: every ``period`` measured from process start
    - archive_at = "HH:MM": once a day at that local wall-clock time

A failing report never prevents the history append or the store reset, and
no error in a cycle stops the loop.
"""

import asyncio
import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any, Callable, Optional

from fastapi.concurrency import run_in_threadpool

from orderdesk.core.config import ReportDispatch
from orderdesk.core.exceptions import PersistenceWriteFailure
from orderdesk.services.excel_manager import ExcelManager
from orderdesk.services.history import HistoryLog
from orderdesk.services.order_store import OrderStore

logger = logging.getLogger(__name__)


@dataclass
class ArchiveResult:
    """Outcome of one archive cycle."""
    archived_date: str
    archived_count: int
    started_at: datetime
    report_ok: bool
    report_message: str
    history_persisted: bool


class ArchiveScheduler:
    def __init__(
        self,
        store: OrderStore,
        history: HistoryLog,
        excel: ExcelManager,
        clock: Callable[[], datetime],
        period: timedelta = timedelta(hours=24),
        archive_at: Optional[str] = None,
        dispatch: ReportDispatch = ReportDispatch.INLINE,
    ):
        self.store = store
        self.history = history
        self.excel = excel
        self.clock = clock
        self.period = period
        self.archive_at = archive_at
        self.dispatch = dispatch

        self.next_run_at: Optional[datetime] = None
        self.last_result: Optional[ArchiveResult] = None
        self._task: Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    # =========================================================================
    # SCHEDULING
    # =========================================================================

    def compute_next_run(self, after: datetime) -> datetime:
        """First firing time strictly after ``after``."""
        if self.archive_at is None:
            return after + self.period

        hour, minute = (int(part) for part in self.archive_at.split(":"))
        candidate = after.replace(hour=hour, minute=minute, second=0, microsecond=0)
        if candidate <= after:
            candidate += timedelta(days=1)
        return candidate

    async def _run_forever(self) -> None:
        next_run = self.compute_next_run(self.clock())
        while True:
            self.next_run_at = next_run
            delay = max((next_run - self.clock()).total_seconds(), 0.0)
            logger.info(f"Next archive cycle at {next_run.isoformat(timespec='minutes')}")
            await asyncio.sleep(delay)

            try:
                await self.run_cycle()
            except Exception:
                logger.exception("Archive cycle failed")

            next_run = self.compute_next_run(next_run)

    def start(self) -> None:
        if self.running:
            return
        self._task = asyncio.create_task(self._run_forever(), name="archive-scheduler")
        logger.info("✅ Archive scheduler started")

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None
        self.next_run_at = None
        logger.info("Archive scheduler stopped")

    # =========================================================================
    # ARCHIVE CYCLE
    # =========================================================================

    async def run_cycle(self) -> ArchiveResult:
        """
        Archive every active order.

        The store is drained and the history appended before the first
        await; submissions arriving while the files are written belong to
        the next cycle.
        """
        started_at = self.clock()
        archived_date = started_at.date().isoformat()

        snapshot = self.store.drain()
        self.history.append(snapshot, archived_date)
        logger.info(f"📦 Archive cycle {archived_date}: {len(snapshot)} orders")

        payload = [order.model_dump(mode="json") for order in snapshot]
        report_ok, report_message = await self._emit_report(payload, archived_date)
        history_persisted = await self._persist_history()

        result = ArchiveResult(
            archived_date=archived_date,
            archived_count=len(snapshot),
            started_at=started_at,
            report_ok=report_ok,
            report_message=report_message,
            history_persisted=history_persisted,
        )
        self.last_result = result
        return result

    async def _emit_report(self, payload: list[dict[str, Any]], archived_date: str) -> tuple[bool, str]:
        try:
            if self.dispatch == ReportDispatch.CELERY:
                from orderdesk.tasks import export_daily_report

                task = export_daily_report.delay(payload, archived_date)
                logger.info(f"Report for {archived_date} queued as task {task.id}")
                return True, f"Queued as task {task.id}"

            result = await run_in_threadpool(self.excel.export_orders, payload, archived_date)
        except Exception as e:
            logger.exception(f"Report emission failed for {archived_date}")
            return False, str(e)

        if not result["success"]:
            logger.error(f"Report for {archived_date} failed: {result['message']}")
        return result["success"], result["message"]

    async def _persist_history(self) -> bool:
        try:
            await run_in_threadpool(self.history.persist)
        except PersistenceWriteFailure as e:
            logger.error(f"History not persisted, kept in memory only: {e.message}")
            return False
        return True
