"""
Per-correspondent conversation memory.

:class:`ConversationMemory` keeps the last ``history_length`` turns for each
correspondent in a bounded deque. Memory is also bounded across
correspondents, but coarsely: once more than ``max_correspondents`` distinct
ids are tracked, the whole mapping is swapped for an empty one. Every active
conversation loses its context at that moment. That is the accepted cost of a
flat memory ceiling; there is no LRU bookkeeping here.
"""

from __future__ import annotations

import asyncio
import logging
import threading
from collections import deque
from dataclasses import dataclass
from typing import Literal

from replybot.config import memory as memory_cfg

logger = logging.getLogger(__name__)

Role = Literal["user", "assistant"]


@dataclass(frozen=True, slots=True)
class Turn:
    """One message in a conversation."""

    role: Role
    content: str

    def to_message(self) -> dict[str, str]:
        return {"role": self.role, "content": self.content}


class ConversationMemory:
    """Bounded turn history keyed by correspondent id."""

    def __init__(
        self,
        history_length: int | None = None,
        max_correspondents: int | None = None,
    ) -> None:
        self.history_length = (
            history_length if history_length is not None else memory_cfg.HISTORY_LENGTH
        )
        self.max_correspondents = (
            max_correspondents if max_correspondents is not None else memory_cfg.MAX_CORRESPONDENTS
        )
        if self.history_length < 0 or self.max_correspondents < 0:
            raise ValueError("history_length and max_correspondents must be non-negative")
        self._histories: dict[str, deque[Turn]] = {}
        self._locks: dict[str, asyncio.Lock] = {}
        self._mutex = threading.Lock()

    # ------------------------------------------------------------------ #
    # WRITE helpers
    # ------------------------------------------------------------------ #

    def append(self, correspondent_id: str, role: Role, content: str) -> Turn:
        """Record a turn, keeping only the newest ``history_length`` entries."""

        turn = Turn(role=role, content=content)
        with self._mutex:
            history = self._histories.get(correspondent_id)
            if history is None:
                history = deque(maxlen=self.history_length)
                self._histories[correspondent_id] = history
            history.append(turn)
        self.maybe_evict_all()
        return turn

    def maybe_evict_all(self) -> bool:
        """Drop every history once the correspondent ceiling is exceeded."""

        with self._mutex:
            count = len(self._histories)
            if count <= self.max_correspondents:
                return False
            self._histories = {}
            # Held locks still guard an in-flight exchange; keep those.
            self._locks = {cid: lock for cid, lock in self._locks.items() if lock.locked()}

        logger.info(
            "Conversation memory cleared: %d correspondents exceeded limit of %d",
            count,
            self.max_correspondents,
        )
        return True

    def clear(self) -> None:
        with self._mutex:
            self._histories = {}

    # ------------------------------------------------------------------ #
    # READ helpers
    # ------------------------------------------------------------------ #

    def snapshot(self, correspondent_id: str) -> list[Turn]:
        """Return a copy of the history for ``correspondent_id``, oldest first."""

        with self._mutex:
            history = self._histories.get(correspondent_id)
            return list(history) if history else []

    def as_messages(self, correspondent_id: str) -> list[dict[str, str]]:
        return [turn.to_message() for turn in self.snapshot(correspondent_id)]

    def correspondents(self) -> list[str]:
        with self._mutex:
            return list(self._histories.keys())

    def lock_for(self, correspondent_id: str) -> asyncio.Lock:
        """Serialization lock for one correspondent's read-modify-write cycle."""

        with self._mutex:
            lock = self._locks.get(correspondent_id)
            if lock is None:
                lock = asyncio.Lock()
                self._locks[correspondent_id] = lock
            return lock

    def __len__(self) -> int:
        with self._mutex:
            return len(self._histories)

    def __contains__(self, correspondent_id: object) -> bool:
        with self._mutex:
            return correspondent_id in self._histories


__all__ = ["ConversationMemory", "Turn", "Role"]
