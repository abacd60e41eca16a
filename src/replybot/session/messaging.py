"""Transport-neutral view of the messaging network client."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Protocol

# Event names a MessagingClient may dispatch.
QR = "qr"
READY = "ready"
AUTHENTICATED = "authenticated"
AUTH_FAILURE = "auth_failure"
DISCONNECTED = "disconnected"
MESSAGE = "message"
MESSAGE_SENT = "message_sent"

EVENTS = (QR, READY, AUTHENTICATED, AUTH_FAILURE, DISCONNECTED, MESSAGE, MESSAGE_SENT)

EventHandler = Callable[..., Awaitable[None] | None]


@dataclass(frozen=True)
class Message:
    """A message seen on the network. ``raw`` is the transport's own object."""

    from_: str
    to: str
    body: str
    is_status_broadcast: bool = False
    raw: Any = field(default=None, compare=False, repr=False)


class MessagingClient(Protocol):
    def on(self, event: str, handler: EventHandler) -> None: ...

    async def initialize(self) -> None: ...

    async def destroy(self) -> None: ...

    async def reply(self, message: Message, text: str) -> None: ...


ClientFactory = Callable[[], MessagingClient]


__all__ = [
    "Message",
    "MessagingClient",
    "ClientFactory",
    "EventHandler",
    "EVENTS",
    "QR",
    "READY",
    "AUTHENTICATED",
    "AUTH_FAILURE",
    "DISCONNECTED",
    "MESSAGE",
    "MESSAGE_SENT",
]
