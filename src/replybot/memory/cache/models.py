"""
Model-list cache.

Only a verified, non-empty fetch refreshes the entry. Empty results and
provider failures return ``[]`` and leave whatever was cached before in place,
so a failed fetch never masquerades as fresh data.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Callable

from replybot.clients.models import ModelInfo, ModelsProvider
from replybot.config import llm

from .entry import CacheEntry, now_ms

logger = logging.getLogger(__name__)


class ModelListCache:
    """TTL cache (one hour by default) in front of a :class:`ModelsProvider`."""

    def __init__(
        self,
        provider: ModelsProvider,
        ttl_ms: int | None = None,
        clock: Callable[[], int] = now_ms,
    ) -> None:
        self._provider = provider
        self.ttl_ms = ttl_ms if ttl_ms is not None else llm.MODELS_TTL_MS
        self._clock = clock
        self._entry: CacheEntry[tuple[ModelInfo, ...]] | None = None
        self._fetch_lock = asyncio.Lock()

    def _fresh(self) -> tuple[ModelInfo, ...] | None:
        entry = self._entry
        if entry is not None and entry.data and entry.is_fresh(self.ttl_ms, self._clock()):
            return entry.data
        return None

    async def get_models(self, api_key: str) -> list[ModelInfo]:
        cached = self._fresh()
        if cached is not None:
            return list(cached)

        async with self._fetch_lock:
            # Coalesce concurrent cold callers onto the first fetch.
            cached = self._fresh()
            if cached is not None:
                return list(cached)

            try:
                models = await self._provider.list_models(api_key)
            except Exception as exc:
                logger.error("Error fetching models: %s", exc)
                return []

            if not models:
                logger.info("Model listing returned no models; cache left unchanged")
                return []

            self._entry = CacheEntry(tuple(models), self._clock())
            logger.info("Model cache refreshed with %d models", len(models))
            return list(models)

    @property
    def entry(self) -> CacheEntry[tuple[ModelInfo, ...]] | None:
        return self._entry


__all__ = ["ModelListCache"]
