import asyncio
from types import SimpleNamespace
from unittest.mock import AsyncMock

import discord
import pytest

from replybot.clients.disc import DiscordMessagingClient
from replybot.errors import InitializationError
from replybot.session import messaging

BOT_ID = 999


def _gateway(**overrides):
    gateway = SimpleNamespace(
        user=SimpleNamespace(id=BOT_ID),
        login=AsyncMock(),
        connect=AsyncMock(),
        close=AsyncMock(),
    )
    for key, value in overrides.items():
        setattr(gateway, key, value)
    return gateway


def _discord_message(author_id, content="hey", channel_id=555, system=False):
    return SimpleNamespace(
        author=SimpleNamespace(id=author_id),
        channel=SimpleNamespace(id=channel_id),
        content=content,
        is_system=lambda: system,
        reply=AsyncMock(),
    )


@pytest.mark.asyncio
async def test_inbound_and_own_messages_route_to_different_events():
    client = DiscordMessagingClient(token="t", gateway=_gateway())
    inbound, outbound = [], []
    client.on(messaging.MESSAGE, inbound.append)
    client.on(messaging.MESSAGE_SENT, outbound.append)

    await client.handle_message(_discord_message(author_id=42, content="hello"))
    await client.handle_message(_discord_message(author_id=BOT_ID, content="auto reply"))

    assert [(m.from_, m.to, m.body) for m in inbound] == [("555", str(BOT_ID), "hello")]
    assert [(m.from_, m.to, m.body) for m in outbound] == [(str(BOT_ID), "555", "auto reply")]


def test_system_messages_are_flagged_as_broadcasts():
    client = DiscordMessagingClient(token="t", gateway=_gateway())
    msg = client.to_message(_discord_message(author_id=42, system=True))
    assert msg.is_status_broadcast is True


def test_unknown_event_is_rejected():
    client = DiscordMessagingClient(token="t", gateway=_gateway())
    with pytest.raises(ValueError):
        client.on("message_create", lambda m: None)


@pytest.mark.asyncio
async def test_reply_uses_transport_message():
    client = DiscordMessagingClient(token="t", gateway=_gateway())
    raw = _discord_message(author_id=42)
    await client.reply(client.to_message(raw), "pong")
    raw.reply.assert_awaited_once_with("pong")


@pytest.mark.asyncio
async def test_login_failure_is_an_initialization_error():
    gateway = _gateway(login=AsyncMock(side_effect=discord.LoginFailure("Improper token")))
    client = DiscordMessagingClient(token="bad", gateway=gateway)

    with pytest.raises(InitializationError):
        await client.initialize()
    gateway.connect.assert_not_called()


@pytest.mark.asyncio
async def test_initialize_requires_token():
    client = DiscordMessagingClient(token="", gateway=_gateway())
    client.token = None
    with pytest.raises(InitializationError):
        await client.initialize()


@pytest.mark.asyncio
async def test_initialize_connects_without_library_reconnect_and_destroy_closes():
    gateway = _gateway()
    client = DiscordMessagingClient(token="t", gateway=gateway)

    await client.initialize()
    await asyncio.sleep(0)
    gateway.login.assert_awaited_once_with("t")
    gateway.connect.assert_awaited_once_with(reconnect=False)

    await client.destroy()
    gateway.close.assert_awaited_once()


@pytest.mark.asyncio
async def test_handler_errors_do_not_escape_dispatch(caplog):
    client = DiscordMessagingClient(token="t", gateway=_gateway())

    async def broken():
        raise RuntimeError("boom")

    seen = []
    client.on(messaging.READY, broken)
    client.on(messaging.READY, lambda: seen.append("ready"))
    await client.dispatch(messaging.READY)

    assert seen == ["ready"]
    assert "Handler for ready failed" in caplog.text
