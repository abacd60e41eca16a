"""Helpers for interacting with a local Ollama server"""

from __future__ import annotations

from typing import Sequence

from ollama import AsyncClient, ResponseError

from replybot.config import llm as llm_cfg
from replybot.errors import ProviderError


class OllamaCompletionProvider:
    """
    Send chats to a local Ollama server.

    ``api_key`` and ``base_url`` are accepted for interface parity and
    ignored; the server address and model come from the ``[replybot.llm]`` ollama_* config.
    """

    def __init__(self, host: str | None = None, model: str | None = None) -> None:
        self.client = AsyncClient(host=host or llm_cfg.OLLAMA_HOST)
        self.model = model or llm_cfg.OLLAMA_MODEL_ID

    async def complete(
        self,
        api_key: str,
        base_url: str | None,
        model: str,
        messages: Sequence[dict],
    ) -> str:
        try:
            resp = await self.client.chat(model=self.model, messages=list(messages))
        except ResponseError as exc:
            raise ProviderError(
                f"Ollama request failed: {exc.error}", status=exc.status_code, body=exc.error
            ) from exc
        except Exception as exc:
            raise ProviderError(f"Ollama request failed: {exc}") from exc

        return (resp.message.content or "").strip()


__all__ = ["OllamaCompletionProvider"]
