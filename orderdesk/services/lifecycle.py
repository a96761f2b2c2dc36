"""
Order Lifecycle Manager

Creates orders with their derived fields, applies status changes and
announces both on the broadcast channel.

Lifecycle: created → preparing → <any status set by the kitchen> →
archived (removed from the active store by the archive scheduler).
"""

import logging
from datetime import datetime
from typing import Any, Callable, Mapping, Union

from pydantic import ValidationError

from orderdesk.core.exceptions import InvalidOrderShape, OrderNotFound
from orderdesk.schemas import (
    BroadcastEvent,
    Order,
    OrderItem,
    OrderStatusEnum,
    OrderSubmission,
    PriorityEnum,
    StatusChange,
)
from orderdesk.services.broadcast import BroadcastChannel
from orderdesk.services.order_store import OrderStore
from orderdesk.services.validator import validate_order_items

logger = logging.getLogger(__name__)

LOW_PRIORITY_KEYWORD = "drink"
DEFAULT_TABLE = "0"
ARRIVAL_TIME_FORMAT = "%I:%M %p"


def compute_priority(items: list[OrderItem]) -> PriorityEnum:
    """Drinks go to the back of the kitchen's attention."""
    if any(LOW_PRIORITY_KEYWORD in item.name.lower() for item in items):
        return PriorityEnum.LOW
    return PriorityEnum.HIGH


class OrderLifecycleManager:
    """Owns every write to the order store made on behalf of a request."""

    def __init__(
        self,
        store: OrderStore,
        broadcaster: BroadcastChannel,
        clock: Callable[[], datetime],
    ):
        self.store = store
        self.broadcaster = broadcaster
        self.clock = clock

    async def submit(self, submission: Union[OrderSubmission, Mapping[str, Any]]) -> Order:
        """
        Accept a diner's order.

        Validation, id allocation and insertion complete before the first
        await, so the archive cycle never sees a half-applied submission.

        Raises:
            InvalidOrderShape: the items are malformed; the store is untouched
        """
        if not isinstance(submission, OrderSubmission):
            try:
                submission = OrderSubmission.model_validate(submission)
            except ValidationError as e:
                raise InvalidOrderShape(f"Invalid order format: {e.error_count()} invalid field(s)") from e

        items = validate_order_items(submission.items)

        order = Order(
            id=self.store.allocate_id(),
            table=str(submission.table) if submission.table else DEFAULT_TABLE,
            items=items,
            status=OrderStatusEnum.PREPARING.value,
            priority=compute_priority(items),
            arrival_time=self.clock().strftime(ARRIVAL_TIME_FORMAT),
        )
        self.store.insert(order)

        logger.info(
            f"Order {order.id} received for table {order.table} "
            f"({len(items)} lines, {order.priority.value} priority)"
        )

        await self.broadcaster.publish(BroadcastEvent.ORDER_CREATED, order)
        return order

    async def update_status(self, order_id: str, status: str) -> Order:
        """
        Overwrite the status of an active order.

        Raises:
            OrderNotFound: no active order has ``order_id``
        """
        order = self.store.get(order_id)
        if order is None:
            raise OrderNotFound(order_id)

        previous = order.status
        order.status = status
        logger.info(f"Order {order_id} status: {previous} → {status}")

        await self.broadcaster.publish(
            BroadcastEvent.ORDER_STATUS_CHANGED,
            StatusChange(id=order_id, status=status),
        )
        return order

    def list_active(self) -> list[Order]:
        return self.store.list_orders()
