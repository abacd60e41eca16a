"""Exception types shared across the session, reply and cache layers."""

from __future__ import annotations


class ReplybotError(Exception):
    """Base class for all replybot failures."""


class InitializationError(ReplybotError):
    """The messaging client could not be constructed or started."""


class ConnectionLostError(ReplybotError):
    """The messaging network dropped an established session."""

    def __init__(self, reason: str) -> None:
        super().__init__(f"Connection lost: {reason}")
        self.reason = reason


class ProviderError(ReplybotError):
    """A completion provider call failed.

    ``status`` and ``body`` carry whatever the provider reported, when it
    reported anything at all (transport errors have neither).
    """

    def __init__(self, message: str, *, status: int | None = None, body: object | None = None) -> None:
        super().__init__(message)
        self.status = status
        self.body = body


class NetworkError(ReplybotError):
    """Model listing could not be fetched."""


__all__ = [
    "ReplybotError",
    "InitializationError",
    "ConnectionLostError",
    "ProviderError",
    "NetworkError",
]
