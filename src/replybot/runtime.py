"""
Process runtime: one object that owns every shared component.

Memory and caches live here and are handed to the controller and pipeline by
reference. Nothing else keeps module-level session state.
"""

from __future__ import annotations

import logging
from typing import Any

from replybot.clients.models import HttpModelsProvider, ModelInfo, ModelsProvider
from replybot.clients.oai import CompletionProvider, OpenAICompletionProvider
from replybot.config import llm as llm_cfg
from replybot.memory.cache import ModelListCache, SettingsCache, SettingsSnapshot
from replybot.memory.conversation import ConversationMemory
from replybot.memory.sql import SettingsStore, open_settings_store
from replybot.response.pipeline import API_KEY, ReplyPipeline
from replybot.session.controller import ConnectionController
from replybot.session.events import EventBus, log_events
from replybot.session.messaging import ClientFactory

logger = logging.getLogger(__name__)


class Runtime:
    def __init__(
        self,
        *,
        client_factory: ClientFactory,
        settings_store: SettingsStore,
        completion_provider: CompletionProvider,
        models_provider: ModelsProvider,
        memory: ConversationMemory | None = None,
        events: EventBus | None = None,
        **controller_kwargs: Any,
    ) -> None:
        self.memory = memory or ConversationMemory()
        self.events = events or EventBus()
        self.settings = SettingsCache(settings_store)
        self.models = ModelListCache(models_provider)
        self.pipeline = ReplyPipeline(self.memory, self.settings, completion_provider)
        self.controller = ConnectionController(
            client_factory,
            self.memory,
            self.pipeline,
            self.events,
            **controller_kwargs,
        )

    @classmethod
    def from_config(cls, settings_db_path: str | None = None) -> "Runtime":
        """Wire the production adapters using values from :mod:`replybot.config`."""

        from replybot.clients.disc import DiscordMessagingClient

        if llm_cfg.use_ollama:
            from replybot.clients.ollama import OllamaCompletionProvider

            completion: CompletionProvider = OllamaCompletionProvider()
        else:
            completion = OpenAICompletionProvider()

        runtime = cls(
            client_factory=DiscordMessagingClient,
            settings_store=open_settings_store(settings_db_path),
            completion_provider=completion,
            models_provider=HttpModelsProvider(),
        )
        log_events(runtime.events)
        return runtime

    async def init(self) -> SettingsSnapshot:
        """Warm the settings snapshot before the first message arrives."""
        return await self.settings.refresh()

    async def start(self) -> None:
        await self.controller.start_session()

    async def destroy(self) -> None:
        await self.controller.destroy_session()

    async def refresh_settings(self) -> SettingsSnapshot:
        return await self.settings.refresh()

    async def list_models(self, api_key: str | None = None) -> list[ModelInfo]:
        if api_key is None:
            api_key = (await self.settings.get()).get(API_KEY)
        if not api_key:
            logger.info("No API key available; cannot list models.")
            return []
        return await self.models.get_models(api_key)


__all__ = ["Runtime"]
