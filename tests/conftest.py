from typing import AsyncGenerator

import httpx
import pytest
import pytest_asyncio

from orderdesk.core.config import Settings
from orderdesk.main import create_app
from orderdesk.services import (
    ArchiveScheduler,
    BroadcastChannel,
    ExcelManager,
    HistoryLog,
    OrderLifecycleManager,
    OrderStore,
)

from tests.helpers import ADMIN, FIXED_NOW, FakeClock, RecordingViewer


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock(FIXED_NOW)


@pytest.fixture
def settings(tmp_path) -> Settings:
    """Settings pointing at a throw-away data directory."""
    return Settings(
        _env_file=None,
        data_directory=str(tmp_path / "data"),
        admin_user=ADMIN[0],
        admin_pass=ADMIN[1],
        cook_user=None,
        cook_pass=None,
        archive_enabled=False,
        timezone="America/Bogota",
    )


@pytest.fixture
def app(settings, clock):
    return create_app(settings, clock=clock)


@pytest_asyncio.fixture
async def client(app) -> AsyncGenerator[httpx.AsyncClient, None]:
    """
    Provides an asynchronous HTTP client for making requests to the FastAPI app.
    """
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as ac:
        yield ac


@pytest.fixture
def store() -> OrderStore:
    return OrderStore()


@pytest.fixture
def broadcaster() -> BroadcastChannel:
    return BroadcastChannel(send_timeout=0.5)


@pytest.fixture
def viewer(broadcaster) -> RecordingViewer:
    v = RecordingViewer()
    broadcaster.register(v)
    return v


@pytest.fixture
def lifecycle(store, broadcaster, clock) -> OrderLifecycleManager:
    return OrderLifecycleManager(store, broadcaster, clock)


@pytest.fixture
def history(tmp_path) -> HistoryLog:
    return HistoryLog(tmp_path / "history.json")


@pytest.fixture
def excel(tmp_path) -> ExcelManager:
    return ExcelManager(tmp_path / "reports", lock_timeout=1)


@pytest.fixture
def scheduler(store, history, excel, clock) -> ArchiveScheduler:
    return ArchiveScheduler(store, history, excel, clock)
