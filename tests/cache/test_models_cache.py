import asyncio
from unittest.mock import AsyncMock

import pytest

from replybot.clients.models import ModelInfo
from replybot.errors import NetworkError
from replybot.memory.cache.models import ModelListCache

HOUR_MS = 3_600_000
MODELS = [ModelInfo(id="llama-3.1-8b-instant", owned_by="Meta"), ModelInfo(id="gemma2-9b-it")]


class Clock:
    def __init__(self, now: int = 1_000_000) -> None:
        self.now = now

    def __call__(self) -> int:
        return self.now


@pytest.mark.asyncio
async def test_second_call_within_an_hour_uses_cache():
    provider = AsyncMock()
    provider.list_models.return_value = list(MODELS)
    clock = Clock()
    cache = ModelListCache(provider, ttl_ms=HOUR_MS, clock=clock)

    first = await cache.get_models("key")
    clock.now += HOUR_MS - 1
    second = await cache.get_models("key")

    assert first == second == MODELS
    provider.list_models.assert_awaited_once_with("key")


@pytest.mark.asyncio
async def test_call_after_an_hour_refetches():
    provider = AsyncMock()
    provider.list_models.return_value = list(MODELS)
    clock = Clock()
    cache = ModelListCache(provider, ttl_ms=HOUR_MS, clock=clock)

    await cache.get_models("key")
    clock.now += HOUR_MS
    await cache.get_models("key")

    assert provider.list_models.await_count == 2
    assert cache.entry.fetched_at_ms == clock.now


@pytest.mark.asyncio
async def test_network_error_on_cold_cache_is_not_cached():
    provider = AsyncMock()
    provider.list_models.side_effect = NetworkError("connection refused")
    clock = Clock()
    cache = ModelListCache(provider, ttl_ms=HOUR_MS, clock=clock)

    assert await cache.get_models("key") == []
    clock.now += 1_000
    assert await cache.get_models("key") == []

    assert provider.list_models.await_count == 2
    assert cache.entry is None


@pytest.mark.asyncio
async def test_failures_preserve_stale_entry():
    provider = AsyncMock()
    provider.list_models.return_value = list(MODELS)
    clock = Clock()
    cache = ModelListCache(provider, ttl_ms=HOUR_MS, clock=clock)
    await cache.get_models("key")
    fetched_at = cache.entry.fetched_at_ms

    clock.now += 2 * HOUR_MS
    provider.list_models.side_effect = NetworkError("timeout")
    assert await cache.get_models("key") == []

    provider.list_models.side_effect = None
    provider.list_models.return_value = []
    assert await cache.get_models("key") == []

    assert cache.entry.fetched_at_ms == fetched_at
    assert list(cache.entry.data) == MODELS


@pytest.mark.asyncio
async def test_concurrent_cold_calls_share_one_fetch():
    started = asyncio.Event()
    release = asyncio.Event()

    async def slow_list(api_key):
        started.set()
        await release.wait()
        return list(MODELS)

    provider = AsyncMock()
    provider.list_models.side_effect = slow_list
    cache = ModelListCache(provider, ttl_ms=HOUR_MS, clock=Clock())

    tasks = [asyncio.create_task(cache.get_models("key")) for _ in range(3)]
    await started.wait()
    release.set()
    results = await asyncio.gather(*tasks)

    assert all(r == MODELS for r in results)
    provider.list_models.assert_awaited_once()
