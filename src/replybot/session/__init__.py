"""
Messaging session package.

Modules
=======

``controller``
    :class:`~replybot.session.controller.ConnectionController`, the lifecycle
    state machine that owns the messaging client and routes its events.
``state``
    :class:`SessionStatus` values and the mutable :class:`Session` record.
``timer``
    :class:`ReconnectTimer`, the one-shot cancellable reconnect delay.
``events``
    Typed session events and the :class:`EventBus` that fans them out.
``messaging``
    The :class:`MessagingClient` protocol and transport-neutral
    :class:`Message`.
"""

from .controller import ConnectionController
from .events import EventBus, QRCodeEvent, ReadyEvent, StatusEvent, log_events
from .messaging import Message, MessagingClient
from .state import Session, SessionStatus

__all__ = [
    "ConnectionController",
    "EventBus",
    "QRCodeEvent",
    "ReadyEvent",
    "StatusEvent",
    "log_events",
    "Message",
    "MessagingClient",
    "Session",
    "SessionStatus",
]
