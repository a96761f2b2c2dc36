"""
Celery Tasks
Background report generation for the archive cycle.
"""

import logging
import time

from orderdesk.celery_worker import celery_app
from orderdesk.core.config import get_settings
from orderdesk.services.excel_manager import ExcelManager

logger = logging.getLogger(__name__)


class ReportExportError(Exception):
    """Raised so Celery retries a report that could not be written."""


@celery_app.task(
    bind=True,
    max_retries=3,
    default_retry_delay=5,
    autoretry_for=(ReportExportError,),
    retry_backoff=True,
)
def export_daily_report(self, orders: list[dict], archived_date: str) -> dict:
    """
    Write the Excel report for one archive cycle.

    Args:
        orders: Archived orders as JSON-compatible dicts
        archived_date: ISO date naming the report file

    Returns:
        dict: Result of the export operation
    """
    task_id = self.request.id
    logger.info(f"📋 Task {task_id}: report {archived_date} ({len(orders)} orders)")
    start_time = time.time()

    settings = get_settings()
    manager = ExcelManager(settings.reports_path, lock_timeout=settings.report_lock_timeout)
    result = manager.export_orders(orders, archived_date)

    elapsed = round(time.time() - start_time, 3)
    result["task_id"] = task_id
    result["processing_time_seconds"] = elapsed

    if not result["success"]:
        logger.warning(f"⚠️ Task {task_id}: report {archived_date} failed - {result['message']}")
        raise ReportExportError(result["message"])

    logger.info(f"✅ Task {task_id}: report {archived_date} completed in {elapsed}s")
    return result
