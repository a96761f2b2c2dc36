"""
Excel Report Manager with Concurrency Control

Writes the daily orders report, one workbook per archive date:

    <reports dir>/orders_YYYY-MM-DD.xlsx

The workbook is built in a temporary file under a file lock and moved into
place, so readers of GET /report never see a half-written file.
"""

import logging
import os
from datetime import date
from pathlib import Path
from typing import Any, Mapping, Union

import pandas as pd
from filelock import FileLock, Timeout

logger = logging.getLogger(__name__)

SHEET_NAME = "Orders"


class ExcelManager:
    """File-locked writer for the daily orders report."""

    REPORT_COLUMNS = [
        "Order ID",
        "Table",
        "Items",
        "Total Quantity",
        "Total Local",
        "Total Foreign",
        "Order Time",
        "Status",
    ]

    COLUMN_WIDTHS = [15, 10, 35, 15, 15, 15, 20, 15]

    def __init__(self, reports_dir: Union[Path, str], lock_timeout: int = 30):
        self.reports_dir = Path(reports_dir)
        self.lock_timeout = lock_timeout

    def _ensure_reports_dir(self) -> None:
        """Create reports directory if needed."""
        if not self.reports_dir.exists():
            self.reports_dir.mkdir(parents=True, exist_ok=True)
            logger.info(f"Created reports directory: {self.reports_dir}")

    def report_path(self, report_date: Union[date, str]) -> Path:
        day = report_date.isoformat() if isinstance(report_date, date) else report_date
        return self.reports_dir / f"orders_{day}.xlsx"

    @classmethod
    def build_row(cls, order: Mapping[str, Any]) -> dict[str, Any]:
        """Flatten one order into a report row with derived totals."""
        items = order.get("items") or []
        return {
            "Order ID": order.get("id"),
            "Table": order.get("table"),
            "Items": "\n".join(f"{i['name']} (x{i['quantity']})" for i in items),
            "Total Quantity": sum(i["quantity"] for i in items),
            "Total Local": sum(i["price_local"] * i["quantity"] for i in items),
            "Total Foreign": round(sum(i["price_foreign"] * i["quantity"] for i in items), 2),
            "Order Time": order.get("arrival_time"),
            "Status": order.get("status"),
        }

    @classmethod
    def build_frame(cls, orders: list[Mapping[str, Any]]) -> pd.DataFrame:
        rows = [cls.build_row(order) for order in orders]
        return pd.DataFrame(rows, columns=cls.REPORT_COLUMNS)

    def _write_workbook(self, df: pd.DataFrame, target: Path) -> None:
        tmp_path = target.with_name(f".{target.stem}.tmp.xlsx")
        try:
            with pd.ExcelWriter(tmp_path, engine="openpyxl") as writer:
                df.to_excel(writer, index=False, sheet_name=SHEET_NAME)
                sheet = writer.sheets[SHEET_NAME]
                for column, width in zip(sheet.iter_cols(min_row=1, max_row=1), self.COLUMN_WIDTHS):
                    sheet.column_dimensions[column[0].column_letter].width = width
            os.replace(tmp_path, target)
        finally:
            if tmp_path.exists():
                tmp_path.unlink()

    def export_orders(
        self,
        orders: list[Mapping[str, Any]],
        report_date: Union[date, str],
    ) -> dict[str, Any]:
        """
        Write the report for ``report_date`` from plain order dicts.

        An existing report for the same date is replaced. Errors are
        reported in the result instead of being raised.
        """
        self._ensure_reports_dir()

        target = self.report_path(report_date)
        result = {
            "success": False,
            "message": "",
            "path": str(target),
            "rows": 0,
        }

        try:
            lock = FileLock(f"{target}.lock", timeout=self.lock_timeout)

            with lock:
                logger.debug(f"Lock acquired for {target.name}")

                df = self.build_frame(orders)
                self._write_workbook(df, target)

                logger.info(f"📊 Report generated: {target.name} ({len(df)} orders)")

                result["success"] = True
                result["message"] = f"{len(df)} orders exported"
                result["rows"] = len(df)

            logger.debug(f"Lock released for {target.name}")

        except Timeout:
            result["message"] = f"Lock timeout ({self.lock_timeout}s)"
            logger.error(f"Lock timeout for {target.name}")

        except Exception as e:
            result["message"] = str(e)
            logger.exception(f"Error generating report {target.name}")

        return result

    def read_report(self, report_date: Union[date, str]) -> list[dict[str, Any]]:
        """Rows of an existing report, or an empty list."""
        path = self.report_path(report_date)
        if not path.exists():
            return []

        try:
            df = pd.read_excel(path, engine="openpyxl", sheet_name=SHEET_NAME)
            return df.to_dict("records")
        except Exception as e:
            logger.error(f"Error reading report {path.name}: {e}")
            return []
