"""
One-shot cancellable timer backing the reconnect delay.

The callback usually tears the session down, which cancels the pending
reconnect timer. Once the callback has started the timer counts as fired and
:meth:`ReconnectTimer.cancel` becomes a no-op, so the callback can never cancel
itself halfway through.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable

logger = logging.getLogger(__name__)


class ReconnectTimer:
    def __init__(self, delay: float, callback: Callable[[], Awaitable[None]]) -> None:
        self.delay = delay
        self._callback = callback
        self._fired = False
        self._task: asyncio.Task | None = None

    def start(self) -> "ReconnectTimer":
        if self._task is None:
            self._task = asyncio.create_task(self._run())
        return self

    async def _run(self) -> None:
        await asyncio.sleep(self.delay)
        self._fired = True
        try:
            await self._callback()
        except Exception:
            logger.exception("Reconnect callback failed")

    def cancel(self) -> bool:
        """Cancel the timer if it has not fired yet. Safe to call repeatedly."""

        if self._task is None or self._fired or self._task.done():
            return False
        self._task.cancel()
        return True

    @property
    def fired(self) -> bool:
        return self._fired

    @property
    def pending(self) -> bool:
        return self._task is not None and not self._fired and not self._task.done()

    @property
    def task(self) -> asyncio.Task | None:
        return self._task


__all__ = ["ReconnectTimer"]
