"""
Reply generation for one correspondent.
"""
from __future__ import annotations

import logging

from replybot.clients.oai import CompletionProvider
from replybot.config import llm
from replybot.errors import ProviderError
from replybot.memory.cache.settings import SettingsCache
from replybot.memory.conversation import ConversationMemory

logger = logging.getLogger(__name__)

# Keys read from the settings snapshot.
API_KEY = "openai_key"
BASE_URL = "openai_url"
MODEL = "openai_model"
SYSTEM_PROMPT = "system_prompt"


class ReplyPipeline:
    """
    Builds the prompt from settings + history and asks the provider for a reply.

    The pipeline only reads memory. Appending the reply and sending it are
    the caller's job, so a failed send never leaves a phantom assistant turn.
    """

    def __init__(
        self,
        memory: ConversationMemory,
        settings: SettingsCache,
        provider: CompletionProvider,
        *,
        default_model: str | None = None,
        default_system_prompt: str | None = None,
    ) -> None:
        self.memory = memory
        self.settings = settings
        self.provider = provider
        self.default_model = default_model or llm.DEFAULT_MODEL_ID
        self.default_system_prompt = (
            default_system_prompt if default_system_prompt is not None else llm.DEFAULT_SYSTEM_PROMPT
        )

    def build_messages(self, correspondent_id: str, system_prompt: str) -> list[dict[str, str]]:
        """One leading system entry followed by the history, oldest first."""
        return [{"role": "system", "content": system_prompt}, *self.memory.as_messages(correspondent_id)]

    async def generate(self, correspondent_id: str) -> str | None:
        settings = await self.settings.get()
        api_key = settings.get(API_KEY)
        if not api_key:
            logger.info("No API key set. Auto-reply skipped for %s.", correspondent_id)
            return None

        model = settings.get(MODEL) or self.default_model
        messages = self.build_messages(
            correspondent_id, settings.get(SYSTEM_PROMPT) or self.default_system_prompt
        )

        logger.info("Generating reply for %s with %s (%d messages)", correspondent_id, model, len(messages))
        try:
            reply = await self.provider.complete(
                api_key=api_key,
                base_url=settings.get(BASE_URL) or None,
                model=model,
                messages=messages,
            )
        except ProviderError as exc:
            logger.error("LLM error for %s: %s", correspondent_id, exc)
            if exc.status is not None:
                logger.error("LLM response status: %s", exc.status)
            if exc.body is not None:
                logger.error("LLM response data: %s", exc.body)
            return None
        except Exception:
            logger.exception("Unexpected LLM failure for %s", correspondent_id)
            return None

        return reply or None


__all__ = ["ReplyPipeline", "API_KEY", "BASE_URL", "MODEL", "SYSTEM_PROMPT"]
