"""Helpers for interacting with OpenAI-compatible chat completion APIs"""

from __future__ import annotations

from typing import Protocol, Sequence

import openai
from openai import AsyncOpenAI

from replybot.config import llm
from replybot.errors import ProviderError

import logging
logger = logging.getLogger(__name__)


class CompletionProvider(Protocol):
    async def complete(
        self,
        api_key: str,
        base_url: str | None,
        model: str,
        messages: Sequence[dict],
    ) -> str: ...


class OpenAICompletionProvider:
    """
    Chat completions through :class:`openai.AsyncOpenAI`.

    A client is built per call because the key and base URL come from the
    settings snapshot and may change between calls. ``base_url`` lets the same
    provider talk to Groq or any other OpenAI-compatible host.

    Example message format:
    .. code-block:: python
        [
            {"role": "system", "content": "You are a helpful assistant."},
            {"role": "user", "content": "Hello, how are you?"},
        ]
    """

    def __init__(self, timeout_s: float | None = None) -> None:
        self.timeout_s = timeout_s or llm.REQUEST_TIMEOUT_S

    async def complete(
        self,
        api_key: str,
        base_url: str | None,
        model: str,
        messages: Sequence[dict],
    ) -> str:
        try:
            async with AsyncOpenAI(
                api_key=api_key, base_url=base_url or None, timeout=self.timeout_s
            ) as client:
                resp = await client.chat.completions.create(
                    model=model,
                    messages=list(messages),
                )
        except openai.APIStatusError as exc:
            raise ProviderError(
                f"Completion request failed with status {exc.status_code}",
                status=exc.status_code,
                body=exc.body,
            ) from exc
        except openai.OpenAIError as exc:
            raise ProviderError(f"Completion request failed: {exc}") from exc

        try:
            content = resp.choices[0].message.content
        except (AttributeError, IndexError, TypeError) as exc:
            raise ProviderError("Malformed completion response", body=resp) from exc
        if content is None:
            raise ProviderError("Completion response had no content", body=resp)
        return content.strip()


__all__ = ["CompletionProvider", "OpenAICompletionProvider"]
