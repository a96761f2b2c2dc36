"""
Order Store

Holds today's not-yet-archived orders, newest first, and the sequence
counter used to number them. Lives for the lifetime of the process; it is
emptied only by the archive scheduler through ``drain``.
"""

import logging
from typing import Optional

from orderdesk.schemas import Order

logger = logging.getLogger(__name__)

ORDER_ID_PREFIX = "PED-"


class OrderStore:
    """In-memory ordered collection of active orders."""

    def __init__(self) -> None:
        self._orders: list[Order] = []
        self._next_sequence = 1

    def __len__(self) -> int:
        return len(self._orders)

    @property
    def next_sequence(self) -> int:
        return self._next_sequence

    @property
    def next_order_id(self) -> str:
        return format_order_id(self._next_sequence)

    def allocate_id(self) -> str:
        """Return the next order id and advance the counter."""
        order_id = format_order_id(self._next_sequence)
        self._next_sequence += 1
        return order_id

    def insert(self, order: Order) -> None:
        """Insert ``order`` at the front. Ids must be unique among held orders."""
        if self.get(order.id) is not None:
            raise ValueError(f"Order id {order.id} is already in use")
        self._orders.insert(0, order)

    def get(self, order_id: str) -> Optional[Order]:
        for order in self._orders:
            if order.id == order_id:
                return order
        return None

    def list_orders(self) -> list[Order]:
        """Active orders, newest first."""
        return list(self._orders)

    def drain(self) -> list[Order]:
        """
        Take every held order and reset the store for the next cycle.

        Snapshot, clear and counter reset happen together, so nothing
        submitted afterwards can end up in the returned snapshot.
        """
        snapshot = self._orders
        self._orders = []
        self._next_sequence = 1
        logger.debug(f"Order store drained ({len(snapshot)} orders)")
        return snapshot


def format_order_id(sequence: int) -> str:
    return f"{ORDER_ID_PREFIX}{sequence:03d}"
