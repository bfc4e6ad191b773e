import copy
from collections.abc import AsyncGenerator

import httpx
import pytest
import pytest_asyncio

from leavepush.config import Settings, override_settings
from leavepush.errors import (
    TransportPermanentFailure,
    TransportTransientFailure,
)
from leavepush.main import app
from leavepush.notifications.dispatch import NotificationDispatcher
from leavepush.notifications.registry import SubscriptionRegistry


class MemoryStore:
    """In-memory RecordStore for tests."""

    def __init__(self, tables: dict | None = None) -> None:
        self.tables: dict[str, dict] = copy.deepcopy(tables or {})
        self.writes: list[str] = []

    def exists(self, table: str) -> bool:
        return table in self.tables

    def read(self, table: str, default: dict | None = None) -> dict:
        if table not in self.tables:
            return copy.deepcopy(default) if default is not None else {}
        return copy.deepcopy(self.tables[table])

    def write(self, table: str, records: dict) -> bool:
        self.tables[table] = copy.deepcopy(records)
        self.writes.append(table)
        return True


class FakeTransport:
    """Records sends; endpoints in ``gone``/``failing`` raise."""

    def __init__(self) -> None:
        self.sent: list[tuple[str, str]] = []
        self.gone: set[str] = set()
        self.failing: set[str] = set()

    def send(self, subscription, payload: str) -> None:
        endpoint = subscription.endpoint
        if endpoint in self.gone:
            raise TransportPermanentFailure(endpoint, "HTTP 410")
        if endpoint in self.failing:
            raise TransportTransientFailure(endpoint, "HTTP 500")
        self.sent.append((endpoint, payload))


USERS = {
    "4810": {"name": "Trang", "role": "manager", "department": "HR"},
    "5035": {"name": "Luyt", "role": "employee", "department": "Eng"},
    "1234": {"name": "Hieu", "role": "HR", "department": "HR"},
}


@pytest.fixture(autouse=True)
def _test_settings(tmp_path):
    """Override settings so tests use an isolated data dir."""
    override_settings(
        Settings(
            data_dir=str(tmp_path),
            vapid_public_key="test-public",
            vapid_private_key="test-private",
        )
    )
    yield
    override_settings(None)


@pytest.fixture
def store():
    return MemoryStore({"users": USERS})


@pytest.fixture
def registry(store):
    return SubscriptionRegistry(store)


@pytest.fixture
def transport():
    return FakeTransport()


@pytest.fixture
def dispatcher(registry, transport):
    return NotificationDispatcher(registry, transport)


@pytest_asyncio.fixture
async def client(registry, dispatcher) -> AsyncGenerator[httpx.AsyncClient]:
    """Async test client with in-memory services on app.state."""
    app.state.registry = registry
    app.state.dispatcher = dispatcher
    app.state.vapid_public_key = "test-vapid-key-abc"

    async with httpx.AsyncClient(
        transport=httpx.ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac
