import os, sys
from pathlib import Path
from types import SimpleNamespace
from unittest.mock import AsyncMock

import pytest

# Add src/ to sys.path for imports
sys.path.insert(0, str(Path(__file__).resolve().parent.parent / "src"))

# Keep config loading independent of the developer's environment
os.environ.setdefault("DISCORD_API_TOKEN", "test-token")
os.environ.setdefault("SETTINGS_DB_PATH", ":memory:")


class FakeClient:
    """In-memory MessagingClient that lets tests fire transport events."""

    def __init__(self, *, fail_init: bool = False, fail_destroy: bool = False) -> None:
        self.handlers: dict = {}
        self.fail_init = fail_init
        self.fail_destroy = fail_destroy
        self.initialized = False
        self.destroyed = False
        self.replies: list[tuple[str, str]] = []

    def on(self, event, handler):
        self.handlers[event] = handler

    async def initialize(self):
        if self.fail_init:
            raise RuntimeError("browser failed to launch")
        self.initialized = True

    async def destroy(self):
        self.destroyed = True
        if self.fail_destroy:
            raise RuntimeError("already closed")

    async def reply(self, message, text):
        self.replies.append((message.from_, text))

    async def fire(self, event, *args):
        await self.handlers[event](*args)


class RecordingSink:
    def __init__(self) -> None:
        self.events: list = []

    def emit(self, event) -> None:
        self.events.append(event)

    def names(self) -> list[str]:
        return [e.name for e in self.events]


class FakeSettingsStore:
    def __init__(self, rows: dict | None = None) -> None:
        self.rows = dict(rows or {})
        self.calls = 0

    def get_all(self) -> dict:
        self.calls += 1
        return dict(self.rows)


@pytest.fixture
def sink():
    return RecordingSink()


@pytest.fixture
def client_factory():
    clients: list[FakeClient] = []

    def _factory():
        client = FakeClient()
        clients.append(client)
        return client

    _factory.clients = clients
    return _factory


@pytest.fixture
def pipeline():
    return SimpleNamespace(generate=AsyncMock(return_value=None))
