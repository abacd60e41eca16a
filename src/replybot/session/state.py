"""Connection lifecycle states and the mutable session record."""

from __future__ import annotations

import enum
from dataclasses import dataclass

from .timer import ReconnectTimer


class SessionStatus(enum.Enum):
    OFFLINE = "Offline"
    INITIALIZING = "Initializing..."
    QR_CODE_READY = "QR Code Ready"
    AUTHENTICATED = "Authenticated"
    READY = "Ready"
    AUTH_FAILURE = "Auth Failure"
    DISCONNECTED = "Disconnected"
    RECONNECTING = "Reconnecting"
    OFFLINE_MAX_RETRIES = "Offline (Max Retries)"
    FAILED = "Failed"


@dataclass
class Session:
    """State owned by :class:`~replybot.session.controller.ConnectionController`."""

    status: SessionStatus = SessionStatus.OFFLINE
    reconnect_attempts: int = 0
    reconnect_timer: ReconnectTimer | None = None
    qr_code: str | None = None


__all__ = ["SessionStatus", "Session"]
