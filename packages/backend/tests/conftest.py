"""Test fixtures — a fresh SQLite file per test.

Learn: Two ways to drive the app:

1. `client` — httpx AsyncClient over ASGITransport. ASGITransport does not
   run the lifespan, so the store/hub/service are built here and put on
   app.state by hand (the same wiring main.lifespan does).
2. `live_client` — Starlette's TestClient used as a context manager. That
   runs the real lifespan and supports websocket_connect(), so it is what
   the WebSocket tests use.
"""

import pytest
import pytest_asyncio
from fastapi.testclient import TestClient
from httpx import ASGITransport, AsyncClient

from receipt.config import Settings
from receipt.db.store import EntryStore
from receipt.main import create_app
from receipt.realtime.hub import BroadcastHub
from receipt.services.entry_service import EntryService


class FakeConnection:
    """Stands in for a WebSocket: records frames, or fails every send."""

    def __init__(self, fail: bool = False):
        self.fail = fail
        self.sent: list[str] = []

    async def send_text(self, data: str) -> None:
        if self.fail:
            raise RuntimeError("connection closed")
        self.sent.append(data)


@pytest.fixture()
def database_url(tmp_path):
    return f"sqlite+aiosqlite:///{tmp_path / 'receipt.db'}"


@pytest.fixture()
def settings(database_url):
    return Settings(database_url=database_url, log_level="WARNING")


@pytest_asyncio.fixture()
async def store(database_url):
    store = EntryStore(database_url)
    await store.open()
    try:
        yield store
    finally:
        await store.close()


@pytest.fixture()
def hub():
    return BroadcastHub()


@pytest.fixture()
def service(store, hub):
    return EntryService(store, hub)


@pytest.fixture()
def make_app(store, hub, service):
    """Build an app wired to the per-test store. Accepts Settings overrides."""

    def _make(settings: Settings):
        app = create_app(settings)
        app.state.store = store
        app.state.hub = hub
        app.state.entry_service = service
        return app

    return _make


@pytest.fixture()
def app(make_app, settings):
    return make_app(settings)


@pytest_asyncio.fixture()
async def client(app):
    """HTTP client talking to the app in-process."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest.fixture()
def live_client(settings):
    """TestClient with the real lifespan — needed for WebSocket tests."""
    app = create_app(settings)
    with TestClient(app) as tc:
        yield tc


@pytest.fixture()
def make_connection():
    """Factory for FakeConnection subscribers."""
    return FakeConnection
