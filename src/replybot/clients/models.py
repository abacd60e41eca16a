"""Helpers for listing models from an OpenAI-compatible ``/models`` endpoint"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Protocol

import aiohttp

from replybot.config import llm
from replybot.errors import NetworkError

import logging
logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ModelInfo:
    """One entry of a ``/models`` listing."""

    id: str
    owned_by: str | None = None
    created: int | None = None
    raw: dict[str, Any] = field(default_factory=dict, compare=False, repr=False)

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> "ModelInfo":
        return cls(
            id=str(payload.get("id", "")),
            owned_by=payload.get("owned_by"),
            created=payload.get("created"),
            raw=dict(payload),
        )


class ModelsProvider(Protocol):
    async def list_models(self, api_key: str) -> list[ModelInfo]: ...


class HttpModelsProvider:
    """
    Fetch the model catalogue over HTTP.

    Any transport problem, non-2xx status or undecodable body is raised as
    :class:`~replybot.errors.NetworkError`.
    """

    def __init__(self, url: str | None = None, timeout_s: float | None = None) -> None:
        self.url = url or llm.MODELS_URL
        self.timeout = aiohttp.ClientTimeout(total=timeout_s or llm.REQUEST_TIMEOUT_S)

    async def list_models(self, api_key: str) -> list[ModelInfo]:
        headers = {
            "Authorization": f"Bearer {api_key}",
            "Content-Type": "application/json",
        }
        try:
            async with aiohttp.ClientSession(timeout=self.timeout) as session:
                async with session.get(self.url, headers=headers) as resp:
                    resp.raise_for_status()
                    data = await resp.json()
        except (aiohttp.ClientError, TimeoutError, ValueError) as exc:
            raise NetworkError(f"Failed to list models from {self.url}: {exc}") from exc

        items = data.get("data") if isinstance(data, dict) else None
        return [ModelInfo.from_payload(item) for item in items or [] if isinstance(item, dict)]


__all__ = ["ModelInfo", "ModelsProvider", "HttpModelsProvider"]
