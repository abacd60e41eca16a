from unittest.mock import AsyncMock

import pytest

from conftest import FakeSettingsStore
from replybot.clients.models import ModelInfo
from replybot.runtime import Runtime
from replybot.session import messaging
from replybot.session.events import StatusEvent
from replybot.session.messaging import Message
from replybot.session.state import SessionStatus


def _runtime(client_factory, rows):
    completion = AsyncMock()
    models = AsyncMock()
    runtime = Runtime(
        client_factory=client_factory,
        settings_store=FakeSettingsStore(rows),
        completion_provider=completion,
        models_provider=models,
        reconnect_delay=10,
        max_reconnect_attempts=5,
    )
    return runtime, completion, models


@pytest.mark.asyncio
async def test_components_share_memory_and_caches(client_factory):
    runtime, _, _ = _runtime(client_factory, {})

    assert runtime.controller.memory is runtime.memory
    assert runtime.pipeline.memory is runtime.memory
    assert runtime.pipeline.settings is runtime.settings


@pytest.mark.asyncio
async def test_end_to_end_reply(client_factory):
    runtime, completion, _ = _runtime(
        client_factory, {"openai_key": "sk", "system_prompt": "Be kind."}
    )
    completion.complete.return_value = "Hi A!"
    statuses = []
    runtime.events.subscribe(StatusEvent, lambda e: statuses.append(e.status))

    await runtime.init()
    await runtime.start()
    client = client_factory.clients[0]
    await client.fire(messaging.READY)
    await client.fire(messaging.MESSAGE, Message(from_="A", to="bot", body="hello"))
    await runtime.controller.drain()

    assert client.replies == [("A", "Hi A!")]
    assert completion.complete.call_args.kwargs["messages"] == [
        {"role": "system", "content": "Be kind."},
        {"role": "user", "content": "hello"},
    ]

    await runtime.destroy()
    assert statuses == [SessionStatus.INITIALIZING, SessionStatus.READY, SessionStatus.OFFLINE]


@pytest.mark.asyncio
async def test_no_key_means_no_send(client_factory):
    runtime, completion, _ = _runtime(client_factory, {})

    await runtime.start()
    client = client_factory.clients[0]
    await client.fire(messaging.MESSAGE, Message(from_="A", to="bot", body="hello"))
    await runtime.controller.drain()

    completion.complete.assert_not_called()
    assert client.replies == []


@pytest.mark.asyncio
async def test_list_models_defaults_to_stored_key(client_factory):
    runtime, _, models = _runtime(client_factory, {"openai_key": "gsk-stored"})
    models.list_models.return_value = [ModelInfo(id="m1")]

    assert await runtime.list_models() == [ModelInfo(id="m1")]
    models.list_models.assert_awaited_once_with("gsk-stored")


@pytest.mark.asyncio
async def test_list_models_without_any_key(client_factory):
    runtime, _, models = _runtime(client_factory, {})

    assert await runtime.list_models() == []
    models.list_models.assert_not_called()
