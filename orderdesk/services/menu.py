"""
Menu Catalog

Keyed menu records persisted to the menu file on every change. Each
mutation writes the file first and only then swaps the in-memory list, so a
failed save leaves the catalog as it was.
"""

import logging
import time
from pathlib import Path
from typing import Any, Callable, Mapping, Optional

from pydantic import ValidationError

from orderdesk.core.exceptions import InvalidMenuUpdate, MenuItemNotFound, MissingRequiredField
from orderdesk.schemas import MenuItem, MenuItemCreate, MenuItemUpdate
from orderdesk.services.json_store import load_records, write_records

logger = logging.getLogger(__name__)


def _now_millis() -> int:
    return int(time.time() * 1000)


def merge_menu_item(item: MenuItem, patch: MenuItemUpdate) -> MenuItem:
    """Apply the fields explicitly set in ``patch`` onto ``item``."""
    changes = {
        field: getattr(patch, field)
        for field in patch.model_fields_set
        if getattr(patch, field) is not None
    }
    return item.model_copy(update=changes)


class MenuCatalog:
    def __init__(self, path: Path, id_source: Callable[[], int] = _now_millis):
        self.path = path
        self._id_source = id_source
        self._items: list[MenuItem] = []

        for raw in load_records(path):
            try:
                self._items.append(MenuItem.model_validate(raw))
            except ValidationError as e:
                logger.error(f"Skipping malformed menu item {raw.get('id', '?')}: {e}")

        logger.info(f"Menu loaded: {len(self._items)} items from {path}")

    def __len__(self) -> int:
        return len(self._items)

    def items(self) -> list[MenuItem]:
        return list(self._items)

    def get(self, item_id: int) -> Optional[MenuItem]:
        for item in self._items:
            if item.id == item_id:
                return item
        return None

    def _save(self, items: list[MenuItem]) -> None:
        write_records(self.path, [i.model_dump(mode="json") for i in items])
        self._items = items

    def _new_id(self) -> int:
        candidate = self._id_source()
        highest = max((i.id for i in self._items), default=0)
        return candidate if candidate > highest else highest + 1

    def create(self, payload: Mapping[str, Any]) -> MenuItem:
        """
        Add a menu item.

        Raises:
            MissingRequiredField: a required field is absent, empty or invalid
            PersistenceWriteFailure: the menu file could not be written
        """
        try:
            data = MenuItemCreate.model_validate(payload)
        except ValidationError as e:
            fields = sorted({str(err["loc"][0]) for err in e.errors() if err["loc"]})
            raise MissingRequiredField(fields) from e

        item = MenuItem(id=self._new_id(), **data.model_dump())
        self._save(self._items + [item])
        logger.info(f"Menu item {item.id} created: {item.name}")
        return item

    def update(self, item_id: int, payload: Mapping[str, Any]) -> MenuItem:
        """
        Merge a partial update onto an existing item.

        Raises:
            InvalidMenuUpdate: unknown field or invalid value
            MenuItemNotFound: no item has ``item_id``
            PersistenceWriteFailure: the menu file could not be written
        """
        try:
            patch = MenuItemUpdate.model_validate(payload)
        except ValidationError as e:
            problems = ", ".join(
                f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in e.errors()
            )
            raise InvalidMenuUpdate(f"Invalid menu update ({problems})") from e

        current = self.get(item_id)
        if current is None:
            raise MenuItemNotFound(item_id)

        updated = merge_menu_item(current, patch)
        self._save([updated if i.id == item_id else i for i in self._items])
        logger.info(f"Menu item {item_id} updated: {sorted(patch.model_fields_set)}")
        return updated

    def delete(self, item_id: int) -> bool:
        """Remove an item. Deleting an unknown id is a no-op."""
        remaining = [i for i in self._items if i.id != item_id]
        removed = len(remaining) != len(self._items)
        self._save(remaining)
        if removed:
            logger.info(f"Menu item {item_id} deleted")
        return removed
