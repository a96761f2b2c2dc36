"""
Broadcast Channel

Publish-only fan-out of order and menu events to every connected viewer
(kitchen, admin and front-of-house displays).

Delivery is at-most-once and best-effort: a viewer whose send fails or
times out is dropped and never retried. Publishes are serialised, so each
viewer receives events in publish order.
"""

import asyncio
import logging
from typing import Any, Protocol, Union

from fastapi.encoders import jsonable_encoder

from orderdesk.schemas import BroadcastEvent

logger = logging.getLogger(__name__)


class Viewer(Protocol):
    """Anything that can receive a JSON message, e.g. a starlette WebSocket."""

    async def send_json(self, data: Any) -> None:
        ...


class BroadcastChannel:
    """Set of connected viewers with a fire-and-forget publish."""

    def __init__(self, send_timeout: float = 5.0):
        self.send_timeout = send_timeout
        self._viewers: set[Viewer] = set()
        self._lock = asyncio.Lock()

    @property
    def viewer_count(self) -> int:
        return len(self._viewers)

    def register(self, viewer: Viewer) -> None:
        self._viewers.add(viewer)
        logger.info(f"Viewer connected ({len(self._viewers)} online)")

    def unregister(self, viewer: Viewer) -> None:
        if viewer in self._viewers:
            self._viewers.discard(viewer)
            logger.info(f"Viewer disconnected ({len(self._viewers)} online)")

    async def publish(self, event: Union[BroadcastEvent, str], payload: Any) -> int:
        """
        Send ``event`` with ``payload`` to every viewer connected right now.

        Returns:
            Number of viewers the message was handed to
        """
        name = event.value if isinstance(event, BroadcastEvent) else event
        message = {"event": name, "data": jsonable_encoder(payload)}

        async with self._lock:
            delivered = 0
            for viewer in list(self._viewers):
                try:
                    await asyncio.wait_for(viewer.send_json(message), timeout=self.send_timeout)
                    delivered += 1
                except asyncio.TimeoutError:
                    logger.warning(f"Dropping slow viewer after {self.send_timeout}s on '{name}'")
                    self._viewers.discard(viewer)
                except Exception as e:
                    logger.warning(f"Dropping viewer on '{name}': {e}")
                    self._viewers.discard(viewer)

        logger.debug(f"Published '{name}' to {delivered} viewer(s)")
        return delivered
