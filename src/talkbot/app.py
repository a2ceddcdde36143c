"""Application orchestrator - wires all components and manages lifecycle."""

from __future__ import annotations

from talkbot.ai.client import AnthropicCompletionClient, CompletionClient
from talkbot.config import AppConfig, BotConfig
from talkbot.core.bot_registry import BotRegistry, BotRuntime
from talkbot.handlers.activation import ActivateHandler, DeactivateHandler
from talkbot.handlers.base import Handler
from talkbot.handlers.continuation import ContinueHandler
from talkbot.handlers.dispatcher import MessageDispatcher
from talkbot.handlers.forget import ForgetHandler
from talkbot.handlers.talk import TalkHandler
from talkbot.locales import set_locale
from talkbot.log import get_logger
from talkbot.messenger.base import MessengerAdapter
from talkbot.storage.database import Database
from talkbot.storage.history_store import HistoryStore, InMemoryHistoryStore, SqliteHistoryStore
from talkbot.storage.prompt_store import InMemoryPromptStore, PromptStore, SqlitePromptStore
from talkbot.storage.source_store import InMemorySourceStore, SourceStore, SqliteSourceStore

logger = get_logger(__name__)


class TalkBotApp:
    """Top-level application orchestrator."""

    def __init__(self, config: AppConfig):
        self.config = config
        self.db: Database | None = None
        if config.storage.backend == "sqlite":
            self.db = Database(config.storage.db_path)
        self.bot_registry = BotRegistry()

    async def start(self) -> None:
        """Initialize storage, then start every configured bot."""
        set_locale(self.config.locale)

        if self.db:
            await self.db.initialize()

        for bot_cfg in self.config.bots:
            try:
                adapter = self._create_adapter(bot_cfg)
                dispatcher = self.build_dispatcher(bot_cfg, adapter)
                adapter.on_message(dispatcher.handle)
                await adapter.start()
                self.bot_registry.register(BotRuntime(bot_cfg.id, adapter, dispatcher))
                logger.info(
                    "bot_started",
                    bot_id=bot_cfg.id,
                    platform=bot_cfg.platform,
                    model=bot_cfg.ai.model,
                )
            except Exception as e:
                logger.error("bot_start_failed", bot_id=bot_cfg.id, error=str(e))

        logger.info("talkbot_started", bot_count=len(self.bot_registry.ids()))

    async def stop(self) -> None:
        """Gracefully shut down all components."""
        for runtime in self.bot_registry.all():
            try:
                await runtime.adapter.stop()
            except Exception as e:
                logger.error("bot_stop_error", bot_id=runtime.bot_id, error=str(e))

        if self.db:
            await self.db.close()
        logger.info("talkbot_stopped")

    def build_dispatcher(
        self,
        bot_cfg: BotConfig,
        adapter: MessengerAdapter,
        client: CompletionClient | None = None,
    ) -> MessageDispatcher:
        """Assemble stores and handlers for one bot."""
        prompts, history, sources = self._create_stores(bot_cfg)
        client = client or self._create_completion_client(bot_cfg)
        handlers: list[Handler] = [
            ActivateHandler(sources),
            DeactivateHandler(sources),
            ForgetHandler(prompts),
            ContinueHandler(
                prompts,
                history,
                client,
                bot_name=bot_cfg.name,
                chunk_size=bot_cfg.reply.chunk_size,
            ),
            TalkHandler(
                prompts,
                history,
                client,
                bot_name=bot_cfg.name,
                tone=bot_cfg.tone,
                chunk_size=bot_cfg.reply.chunk_size,
            ),
        ]
        return MessageDispatcher(adapter, sources, handlers, bot_cfg)

    def _create_stores(self, bot_cfg: BotConfig) -> tuple[PromptStore, HistoryStore, SourceStore]:
        max_turns = bot_cfg.ai.max_turns
        window = self.config.storage.history_window
        if self.db is None:
            return (
                InMemoryPromptStore(max_turns),
                InMemoryHistoryStore(window),
                InMemorySourceStore(),
            )
        return (
            SqlitePromptStore(self.db, bot_cfg.id, max_turns),
            SqliteHistoryStore(self.db, bot_cfg.id, window),
            SqliteSourceStore(self.db, bot_cfg.id),
        )

    def _create_completion_client(self, bot_cfg: BotConfig) -> CompletionClient:
        if not self.config.anthropic:
            raise ValueError(
                f"Bot '{bot_cfg.id}' needs an 'anthropic' section in config"
            )
        return AnthropicCompletionClient(self.config.anthropic, bot_cfg.ai)

    def _create_adapter(self, cfg: BotConfig) -> MessengerAdapter:
        match cfg.platform:
            case "telegram":
                from talkbot.messenger.telegram import TelegramAdapter

                return TelegramAdapter(cfg.id, cfg.model_dump())
            case "discord":
                from talkbot.messenger.discord_adapter import DiscordAdapter

                return DiscordAdapter(cfg.id, cfg.model_dump())
            case _:
                raise ValueError(f"Unknown platform: {cfg.platform}")
