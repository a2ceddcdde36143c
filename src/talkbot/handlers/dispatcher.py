"""Message dispatcher: builds the turn Context and routes it to a handler."""

from __future__ import annotations

from talkbot.config import BotConfig
from talkbot.core.context import BotState, Context, Source
from talkbot.core.errors import PersistenceFailure, reraise_as
from talkbot.handlers.base import NOT_APPLICABLE, Failed, Handler, TurnResult
from talkbot.log import bind_turn, get_logger
from talkbot.messenger.base import MessengerAdapter
from talkbot.messenger.models import IncomingMessage
from talkbot.storage.source_store import SourceStore

logger = get_logger(__name__)


class MessageDispatcher:
    """Handles the flow: message -> context -> first handler whose gate opens.

    Handlers are tried in order; command handlers go before the talk handler
    so ``/forget`` is never sent to the model.
    """

    def __init__(
        self,
        adapter: MessengerAdapter,
        source_store: SourceStore,
        handlers: list[Handler],
        bot_config: BotConfig,
    ):
        self._adapter = adapter
        self._sources = source_store
        self._handlers = handlers
        self._bot_config = bot_config

    async def handle(self, message: IncomingMessage) -> TurnResult:
        """Process an incoming message end-to-end."""
        with bind_turn(message.bot_id, message.user_id, message.chat_id):
            try:
                context = await self._build_context(message)
            except PersistenceFailure as e:
                logger.error("context_build_failed", error=str(e))
                context = Context(message, self._adapter, self._fallback_source(message))
                await context.push_error(e)
                return Failed(context, e)

            for handler in self._handlers:
                if not handler.check(context):
                    continue
                logger.debug("handler_selected", handler=handler.name)
                try:
                    await context.show_typing()
                except Exception as e:
                    logger.warning("typing_indicator_failed", error=str(e))
                return await handler.exec(context)

            return NOT_APPLICABLE

    async def _build_context(self, message: IncomingMessage) -> Context:
        default = message.is_private and self._bot_config.activate_private_chats
        with reraise_as(PersistenceFailure):
            activated = await self._sources.is_activated(message.chat_id, default=default)
        source = Source(
            id=message.chat_id,
            platform=message.platform,
            bot=BotState(is_activated=activated),
        )
        return Context(message, self._adapter, source, bot_name=self._bot_config.name)

    @staticmethod
    def _fallback_source(message: IncomingMessage) -> Source:
        return Source(id=message.chat_id, platform=message.platform)
