"""Discord transport for the messaging session."""

from __future__ import annotations

import asyncio
import inspect
import logging
from collections import defaultdict
from typing import Any

import discord

from replybot.config import core
from replybot.errors import InitializationError
from replybot.session import messaging
from replybot.session.messaging import EventHandler, Message

logger = logging.getLogger(__name__)


def _intents() -> discord.Intents:
    intents = discord.Intents.default()
    intents.message_content = True
    intents.dm_messages = True
    return intents


class _Gateway(discord.Client):
    """discord.py client that forwards gateway events to the adapter."""

    def __init__(self, adapter: "DiscordMessagingClient", **kwargs: Any) -> None:
        super().__init__(**kwargs)
        self._adapter = adapter

    async def on_connect(self) -> None:
        await self._adapter.dispatch(messaging.AUTHENTICATED)

    async def on_ready(self) -> None:
        logger.info("Logged in as %s (ID: %s)", self.user, getattr(self.user, "id", "?"))
        await self._adapter.dispatch(messaging.READY)

    async def on_disconnect(self) -> None:
        await self._adapter.dispatch(messaging.DISCONNECTED, "gateway connection closed")

    async def on_message(self, message: discord.Message) -> None:
        await self._adapter.handle_message(message)


class DiscordMessagingClient:
    """
    :class:`~replybot.session.messaging.MessagingClient` backed by discord.py.

    Discord pairs with a bot token, so there is no QR handshake and ``qr`` is
    never dispatched. discord.py's own reconnect loop is disabled; a dropped
    gateway surfaces as ``disconnected`` and the controller decides whether to
    reconnect. The correspondent for a message is its channel id, which for
    direct messages identifies the other party.
    """

    def __init__(self, token: str | None = None, *, gateway: discord.Client | None = None) -> None:
        self.token = token or core.DISCORD_API_TOKEN
        self.gateway = gateway or _Gateway(self, intents=_intents())
        self._handlers: dict[str, list[EventHandler]] = defaultdict(list)
        self._connect_task: asyncio.Task | None = None

    def on(self, event: str, handler: EventHandler) -> None:
        if event not in messaging.EVENTS:
            raise ValueError(f"Unknown messaging event: {event}")
        self._handlers[event].append(handler)

    async def dispatch(self, event: str, *args: Any) -> None:
        for handler in list(self._handlers.get(event, ())):
            try:
                result = handler(*args)
                if inspect.isawaitable(result):
                    await result
            except Exception:
                logger.exception("Handler for %s failed", event)

    # ------------------------------------------------------------------ #
    # Lifecycle
    # ------------------------------------------------------------------ #

    async def initialize(self) -> None:
        if not self.token:
            raise InitializationError("No DISCORD_API_TOKEN configured. Cannot run client.")

        try:
            await self.gateway.login(self.token)
        except discord.LoginFailure as exc:
            raise InitializationError(f"Login failed: {exc}") from exc
        except discord.HTTPException as exc:
            raise InitializationError(f"Login request failed: {exc}") from exc

        self._connect_task = asyncio.create_task(self.gateway.connect(reconnect=False))
        self._connect_task.add_done_callback(self._on_connect_done)

    def _on_connect_done(self, task: asyncio.Task) -> None:
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.warning("Gateway connection ended: %s", exc)

    async def destroy(self) -> None:
        await self.gateway.close()
        task, self._connect_task = self._connect_task, None
        if task is not None and not task.done():
            task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                pass

    # ------------------------------------------------------------------ #
    # Messages
    # ------------------------------------------------------------------ #

    def to_message(self, message: discord.Message) -> Message:
        own_id = getattr(self.gateway.user, "id", None)
        channel_id = str(message.channel.id)
        is_own = own_id is not None and message.author.id == own_id
        bot_id = str(own_id) if own_id is not None else ""
        return Message(
            from_=bot_id if is_own else channel_id,
            to=channel_id if is_own else bot_id,
            body=message.content or "",
            is_status_broadcast=message.is_system(),
            raw=message,
        )

    async def handle_message(self, message: discord.Message) -> None:
        msg = self.to_message(message)
        own_id = getattr(self.gateway.user, "id", None)
        if own_id is not None and message.author.id == own_id:
            await self.dispatch(messaging.MESSAGE_SENT, msg)
        else:
            await self.dispatch(messaging.MESSAGE, msg)

    async def reply(self, message: Message, text: str) -> None:
        if message.raw is None:
            raise ValueError("Cannot reply to a message without its transport object")
        await message.raw.reply(text)


__all__ = ["DiscordMessagingClient"]
