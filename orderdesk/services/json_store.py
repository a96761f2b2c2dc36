"""
Whole-file JSON persistence for the menu catalog and the history log.

Files hold a single JSON list. They are read entirely at start-up and
rewritten entirely on every change.
"""

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any

from orderdesk.core.exceptions import PersistenceWriteFailure

logger = logging.getLogger(__name__)


def _quarantine(path: Path) -> None:
    """Move an unreadable file aside so the next write cannot destroy it."""
    target = path.with_name(f"{path.name}.corrupt")
    try:
        os.replace(path, target)
        logger.warning(f"Moved unreadable {path.name} to {target.name}")
    except OSError as e:
        logger.error(f"Could not move {path} aside: {e}")


def load_records(path: Path) -> list[dict[str, Any]]:
    """
    Read a JSON list of objects from ``path``.

    A missing file reads as empty and is created by the first write. A file
    that is not a JSON list is logged, renamed to ``<name>.corrupt`` and
    treated as empty. List elements that are not objects are skipped.
    """
    if not path.exists():
        logger.info(f"No data file yet at {path}")
        return []

    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except OSError as e:
        logger.error(f"Error reading {path}: {e}")
        return []
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        logger.error(f"Error reading {path}: {e}")
        _quarantine(path)
        return []

    if not isinstance(data, list):
        logger.error(f"Error reading {path}: expected a JSON list, got {type(data).__name__}")
        _quarantine(path)
        return []

    records = [entry for entry in data if isinstance(entry, dict)]
    if len(records) != len(data):
        logger.error(f"Skipping {len(data) - len(records)} non-object entries in {path}")
    return records


def write_records(path: Path, records: list[dict[str, Any]]) -> None:
    """
    Overwrite ``path`` with ``records``.

    The list is written to a sibling temporary file and moved into place.

    Raises:
        PersistenceWriteFailure: if the directory or file cannot be written
    """
    tmp_name = None
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", dir=path.parent)
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            json.dump(records, f, indent=2, ensure_ascii=False)
        os.replace(tmp_name, path)
    except (OSError, TypeError, ValueError) as e:
        if tmp_name and os.path.exists(tmp_name):
            os.unlink(tmp_name)
        raise PersistenceWriteFailure(f"Could not write {path.name}: {e}") from e
