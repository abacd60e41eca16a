"""
Connection lifecycle controller.

Drives the session state machine from messaging-client events::

    Offline -> Initializing -> QR Code Ready -> Authenticated -> Ready
                            -> Auth Failure
    Disconnected -> Reconnecting -> (timer) -> Initializing
                 -> Offline (Max Retries)
    Initializing -> Failed

Inbound messages are handled in supervised tasks so a slow or failing reply
never blocks later events. Turns for one correspondent are serialized through
:meth:`ConversationMemory.lock_for`.
"""

from __future__ import annotations

import asyncio
import functools
import logging
from collections import deque
from typing import Any, Awaitable, Callable

from replybot.config import session as session_cfg
from replybot.errors import ConnectionLostError, InitializationError
from replybot.memory.conversation import ConversationMemory
from replybot.response.pipeline import ReplyPipeline

from . import messaging
from .events import EventSink, QRCodeEvent, ReadyEvent, StatusEvent
from .messaging import ClientFactory, Message, MessagingClient
from .state import Session, SessionStatus
from .timer import ReconnectTimer

logger = logging.getLogger(__name__)


class ConnectionController:
    """Owns the messaging client and the single :class:`Session`."""

    def __init__(
        self,
        client_factory: ClientFactory,
        memory: ConversationMemory,
        pipeline: ReplyPipeline,
        events: EventSink,
        *,
        reconnect_delay: float | None = None,
        max_reconnect_attempts: int | None = None,
    ) -> None:
        self._client_factory = client_factory
        self.memory = memory
        self.pipeline = pipeline
        self.events = events
        self.reconnect_delay = (
            reconnect_delay if reconnect_delay is not None else session_cfg.RECONNECT_DELAY_S
        )
        self.max_reconnect_attempts = (
            max_reconnect_attempts
            if max_reconnect_attempts is not None
            else session_cfg.MAX_RECONNECT_ATTEMPTS
        )

        self.session = Session()
        self._client: MessagingClient | None = None
        self._message_tasks: set[asyncio.Task] = set()
        # Bumped by every teardown; a fired reconnect only restarts if it saw the last one.
        self._teardowns = 0
        # Replies we sent ourselves; their message_sent echo must not be stored twice.
        self._pending_echoes: deque[tuple[str, str]] = deque(maxlen=memory.max_correspondents)

    # ------------------------------------------------------------------ #
    # State
    # ------------------------------------------------------------------ #

    @property
    def status(self) -> SessionStatus:
        return self.session.status

    @property
    def qr_code(self) -> str | None:
        return self.session.qr_code

    @property
    def reconnect_attempts(self) -> int:
        return self.session.reconnect_attempts

    @property
    def has_client(self) -> bool:
        return self._client is not None

    @property
    def has_pending_reconnect(self) -> bool:
        timer = self.session.reconnect_timer
        return timer is not None and timer.pending

    def _set_status(self, status: SessionStatus, label: str | None = None) -> None:
        self.session.status = status
        self.events.emit(StatusEvent(status, label or status.value))

    # ------------------------------------------------------------------ #
    # Lifecycle
    # ------------------------------------------------------------------ #

    async def start_session(self) -> None:
        """Create and initialize the client. No-op while one exists."""

        if self._client is not None:
            return

        logger.info("Starting messaging client...")
        self._set_status(SessionStatus.INITIALIZING)

        try:
            client = self._client_factory()
        except Exception as exc:
            logger.error("Failed to construct client: %s", exc)
            self._set_status(SessionStatus.FAILED)
            return

        self._client = client
        self._register_handlers(client)

        try:
            await client.initialize()
        except Exception as exc:
            err = exc if isinstance(exc, InitializationError) else InitializationError(str(exc))
            logger.error("Failed to initialize client: %s", err)
            if self._client is client:
                self._set_status(SessionStatus.FAILED)

    async def destroy_session(self, status: SessionStatus = SessionStatus.OFFLINE) -> None:
        """Tear the session down. Safe to call repeatedly."""

        self._teardowns += 1
        timer = self.session.reconnect_timer
        self.session.reconnect_timer = None
        if timer is not None:
            timer.cancel()

        self._cancel_message_tasks()

        # Detach first so events the client fires while closing are ignored.
        client, self._client = self._client, None
        if client is not None:
            try:
                await client.destroy()
            except Exception as exc:
                logger.error("Error destroying client: %s", exc)

        self.session.qr_code = None
        self._pending_echoes.clear()
        self._set_status(status)

    def _schedule_reconnect(self) -> None:
        if self.session.reconnect_timer is not None:
            self.session.reconnect_timer.cancel()
        self.session.reconnect_timer = ReconnectTimer(self.reconnect_delay, self._reconnect).start()

    async def _reconnect(self) -> None:
        teardown = self._teardowns + 1
        await self.destroy_session()
        if self._teardowns != teardown:
            logger.info("Session torn down during reconnect; not restarting.")
            return
        await self.start_session()

    # ------------------------------------------------------------------ #
    # Client events
    # ------------------------------------------------------------------ #

    def _register_handlers(self, client: MessagingClient) -> None:
        handlers: dict[str, Callable[..., Awaitable[None]]] = {
            messaging.QR: self._on_qr,
            messaging.READY: self._on_ready,
            messaging.AUTHENTICATED: self._on_authenticated,
            messaging.AUTH_FAILURE: self._on_auth_failure,
            messaging.DISCONNECTED: self._on_disconnected,
            messaging.MESSAGE: self._on_message,
            messaging.MESSAGE_SENT: self._on_message_sent,
        }
        for event, handler in handlers.items():
            client.on(event, self._bind(client, event, handler))

    def _bind(
        self, client: MessagingClient, event: str, handler: Callable[..., Awaitable[None]]
    ) -> Callable[..., Awaitable[None]]:
        @functools.wraps(handler)
        async def _dispatch(*args: Any) -> None:
            if client is not self._client:
                logger.debug("Ignoring %s from a retired client", event)
                return
            await handler(*args)

        return _dispatch

    async def _on_qr(self, code: str) -> None:
        self.session.qr_code = code
        self._set_status(SessionStatus.QR_CODE_READY)
        self.events.emit(QRCodeEvent(code))

    async def _on_ready(self) -> None:
        self.session.qr_code = None
        self.session.reconnect_attempts = 0
        self._set_status(SessionStatus.READY)
        self.events.emit(ReadyEvent())

    async def _on_authenticated(self) -> None:
        self._set_status(SessionStatus.AUTHENTICATED)

    async def _on_auth_failure(self, *_: Any) -> None:
        self._set_status(SessionStatus.AUTH_FAILURE)
        self.session.qr_code = None

    async def _on_disconnected(self, reason: str = "") -> None:
        lost = ConnectionLostError(reason)
        logger.warning("%s", lost)
        self._set_status(SessionStatus.DISCONNECTED)

        if self.session.reconnect_attempts < self.max_reconnect_attempts:
            self.session.reconnect_attempts += 1
            logger.info(
                "Attempting to reconnect (%d/%d) in %gs...",
                self.session.reconnect_attempts,
                self.max_reconnect_attempts,
                self.reconnect_delay,
            )
            self._set_status(
                SessionStatus.RECONNECTING, f"Reconnecting in {self.reconnect_delay:g}s..."
            )
            self._schedule_reconnect()
        else:
            logger.warning("Max reconnect attempts reached. Stopping.")
            await self.destroy_session(status=SessionStatus.OFFLINE_MAX_RETRIES)

    async def _on_message(self, message: Message) -> None:
        if message.is_status_broadcast:
            logger.debug("Ignoring status broadcast from %s", message.from_)
            return

        client = self._client
        task = asyncio.create_task(self._handle_incoming(client, message))
        self._message_tasks.add(task)
        task.add_done_callback(self._on_message_task_done)

    async def _on_message_sent(self, message: Message) -> None:
        if message.is_status_broadcast:
            return
        echo = (message.to, message.body)
        if echo in self._pending_echoes:
            self._pending_echoes.remove(echo)
            return
        self.memory.append(message.to, "assistant", message.body)

    # ------------------------------------------------------------------ #
    # Inbound message work
    # ------------------------------------------------------------------ #

    async def _handle_incoming(self, client: MessagingClient, message: Message) -> None:
        correspondent = message.from_
        logger.info("[Message] %s: %s", correspondent, message.body)

        async with self.memory.lock_for(correspondent):
            self.memory.append(correspondent, "user", message.body)

            reply = await self.pipeline.generate(correspondent)
            if not reply:
                logger.info("No reply generated for %s.", correspondent)
                return

            echo = (correspondent, reply)
            self._pending_echoes.append(echo)
            try:
                await client.reply(message, reply)
            except BaseException:
                if echo in self._pending_echoes:
                    self._pending_echoes.remove(echo)
                raise

            self.memory.append(correspondent, "assistant", reply)
            logger.info("[Replied] %s", reply)

    def _on_message_task_done(self, task: asyncio.Task) -> None:
        self._message_tasks.discard(task)
        if task.cancelled():
            logger.debug("Message task cancelled")
            return
        exc = task.exception()
        if exc is not None:
            logger.error("Error processing message: %s", exc, exc_info=exc)

    def _cancel_message_tasks(self) -> None:
        for task in list(self._message_tasks):
            task.cancel()

    async def drain(self) -> None:
        """Wait for every in-flight message task to finish."""

        while self._message_tasks:
            await asyncio.gather(*list(self._message_tasks), return_exceptions=True)


__all__ = ["ConnectionController"]
