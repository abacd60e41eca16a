"""
Settings snapshot cache.

The snapshot never expires on its own. It is loaded lazily on the first
:meth:`SettingsCache.get` and replaced wholesale by :meth:`SettingsCache.refresh`
when the caller knows the store changed. Readers always see either the old or
the new mapping, never a mix.
"""

from __future__ import annotations

import asyncio
import logging
from types import MappingProxyType
from typing import Mapping

from replybot.memory.sql.repositories import SettingsStore

from .entry import CacheEntry, now_ms

logger = logging.getLogger(__name__)

SettingsSnapshot = Mapping[str, str]


class SettingsCache:
    """Infinite-TTL, manually invalidated view over a :class:`SettingsStore`."""

    def __init__(self, store: SettingsStore) -> None:
        self._store = store
        self._entry: CacheEntry[SettingsSnapshot] | None = None
        self._refresh_lock = asyncio.Lock()

    async def refresh(self) -> SettingsSnapshot:
        """Reload the full settings table and swap it in."""

        rows = await asyncio.to_thread(self._store.get_all)
        snapshot: SettingsSnapshot = MappingProxyType(dict(rows))
        self._entry = CacheEntry(snapshot, now_ms())
        logger.info("Settings cache refreshed (%d keys)", len(snapshot))
        return snapshot

    async def get(self) -> SettingsSnapshot:
        """Return the cached snapshot, loading it on first use."""

        entry = self._entry
        if entry is not None:
            return entry.data

        async with self._refresh_lock:
            # Another caller may have finished the load while we waited.
            if self._entry is None:
                return await self.refresh()
            return self._entry.data

    def invalidate(self) -> None:
        """Forget the snapshot; the next :meth:`get` reloads it."""

        self._entry = None

    @property
    def loaded(self) -> bool:
        return self._entry is not None


__all__ = ["SettingsCache", "SettingsSnapshot"]
