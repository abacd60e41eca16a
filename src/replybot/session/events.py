"""
Typed lifecycle notifications.

The controller publishes :class:`QRCodeEvent`, :class:`ReadyEvent` and
:class:`StatusEvent` on an :class:`EventBus`. Observers subscribe per event
type. Each event keeps the wire ``name`` and ``payload()`` the UI socket
expects, so a forwarding observer can relay them unchanged.
"""

from __future__ import annotations

import asyncio
import inspect
import logging
from collections import defaultdict
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, ClassVar, Protocol, TypeVar, Union

from .state import SessionStatus

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class QRCodeEvent:
    name: ClassVar[str] = "qr"
    qr: str

    def payload(self) -> dict[str, Any]:
        return {"qr": self.qr}


@dataclass(frozen=True)
class ReadyEvent:
    name: ClassVar[str] = "ready"

    def payload(self) -> dict[str, Any]:
        return {}


@dataclass(frozen=True)
class StatusEvent:
    name: ClassVar[str] = "status"
    status: SessionStatus
    label: str

    def payload(self) -> dict[str, Any]:
        return {"status": self.label}


SessionEvent = Union[QRCodeEvent, ReadyEvent, StatusEvent]
E = TypeVar("E", QRCodeEvent, ReadyEvent, StatusEvent)
Handler = Callable[[Any], Union[None, Awaitable[None]]]


class EventSink(Protocol):
    def emit(self, event: SessionEvent) -> None: ...


class EventBus:
    """Fan-out of session events to handlers registered per event type.

    Sync handlers run inline. Async handlers are scheduled as tasks so a slow
    observer never stalls the controller. Handler failures are logged and
    swallowed.
    """

    def __init__(self) -> None:
        self._handlers: dict[type, list[Handler]] = defaultdict(list)
        self._tasks: set[asyncio.Task] = set()

    def subscribe(self, event_type: type[E], handler: Callable[[E], Any]) -> None:
        self._handlers[event_type].append(handler)

    def unsubscribe(self, event_type: type[E], handler: Callable[[E], Any]) -> None:
        try:
            self._handlers[event_type].remove(handler)
        except ValueError:
            pass

    def emit(self, event: SessionEvent) -> None:
        for handler in list(self._handlers.get(type(event), ())):
            try:
                result = handler(event)
                if inspect.isawaitable(result):
                    task = asyncio.ensure_future(result)
                    self._tasks.add(task)
                    task.add_done_callback(self._on_task_done)
            except Exception:
                logger.exception("Event handler %r failed for %s", handler, event.name)

    def _on_task_done(self, task: asyncio.Task) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.error("Async event handler failed: %s", exc, exc_info=exc)


def log_events(bus: EventBus) -> None:
    """Register observers that mirror session events into the log."""

    bus.subscribe(StatusEvent, lambda e: logger.info("Status: %s", e.label))
    bus.subscribe(QRCodeEvent, lambda e: logger.info("QR Code received"))
    bus.subscribe(ReadyEvent, lambda e: logger.info("Client is ready!"))


__all__ = [
    "QRCodeEvent",
    "ReadyEvent",
    "StatusEvent",
    "SessionEvent",
    "EventSink",
    "EventBus",
    "log_events",
]
