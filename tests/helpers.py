import asyncio
from datetime import datetime
from typing import Any
from zoneinfo import ZoneInfo

TZ = ZoneInfo("America/Bogota")
FIXED_NOW = datetime(2026, 10, 19, 14, 5, tzinfo=TZ)
ADMIN = ("admin", "secret")
COOK = ("cook", "kitchen")


class FakeClock:
    """Callable clock that tests can move by hand."""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now


class RecordingViewer:
    """Viewer that keeps every message it is sent."""

    def __init__(self, fail: bool = False, delay: float = 0.0):
        self.messages: list[dict[str, Any]] = []
        self.fail = fail
        self.delay = delay

    async def send_json(self, data: Any) -> None:
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.fail:
            raise ConnectionError("viewer went away")
        self.messages.append(data)

    @property
    def events(self) -> list[str]:
        return [m["event"] for m in self.messages]


def make_item(name: str = "Burger", price_local: float = 18000, price_foreign: float = 4.5,
              quantity: int = 1, **extra: Any) -> dict[str, Any]:
    return {
        "name": name,
        "price_local": price_local,
        "price_foreign": price_foreign,
        "quantity": quantity,
        **extra,
    }
