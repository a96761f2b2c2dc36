"""
History Log

Append-only record of every archived order across days. Loaded whole from
the history file at start-up and rewritten whole by ``persist``.
"""

import logging
from pathlib import Path
from typing import Optional

from pydantic import ValidationError

from orderdesk.schemas import HistoryRecord, Order
from orderdesk.services.json_store import load_records, write_records

logger = logging.getLogger(__name__)


class HistoryLog:
    """In-memory history mirrored to a JSON file."""

    def __init__(self, path: Path):
        self.path = path
        self._records: list[HistoryRecord] = []

        for raw in load_records(path):
            try:
                self._records.append(HistoryRecord.model_validate(raw))
            except ValidationError as e:
                logger.error(f"Skipping malformed history record {raw.get('id', '?')}: {e}")

        logger.info(f"History loaded: {len(self._records)} records from {path}")

    def __len__(self) -> int:
        return len(self._records)

    def append(self, orders: list[Order], archived_date: str) -> list[HistoryRecord]:
        """Stamp ``orders`` with ``archived_date`` and add them in memory."""
        records = [
            HistoryRecord(**order.model_dump(), archived_date=archived_date)
            for order in orders
        ]
        self._records.extend(records)
        return records

    def persist(self) -> None:
        """
        Rewrite the history file.

        Raises:
            PersistenceWriteFailure: the in-memory records are kept either way
        """
        write_records(self.path, [r.model_dump(mode="json") for r in self._records])
        logger.debug(f"History persisted ({len(self._records)} records)")

    def records(self, archived_date: Optional[str] = None) -> list[HistoryRecord]:
        if archived_date is None:
            return list(self._records)
        return [r for r in self._records if r.archived_date == archived_date]

    def find(self, archived_date: str, order_id: str) -> Optional[HistoryRecord]:
        """Look up a record by its durable key (archived_date, id)."""
        for record in self._records:
            if record.key == (archived_date, order_id):
                return record
        return None
