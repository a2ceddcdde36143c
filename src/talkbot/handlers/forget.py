"""Forget handler: drop the user's conversation context."""

from __future__ import annotations

from talkbot.core.commands import COMMAND_BOT_FORGET
from talkbot.core.context import Context
from talkbot.core.errors import DeliveryFailure, PersistenceFailure, reraise_as
from talkbot.handlers.base import NOT_APPLICABLE, Handled, Handler, TurnResult
from talkbot.locales import t
from talkbot.log import get_logger
from talkbot.storage.prompt_store import PromptStore

logger = get_logger(__name__)


class ForgetHandler(Handler):
    name = "forget"

    def __init__(self, prompt_store: PromptStore):
        self._prompts = prompt_store

    def check(self, context: Context) -> bool:
        return context.has_command(COMMAND_BOT_FORGET)

    async def exec(self, context: Context) -> TurnResult:
        if not self.check(context):
            return NOT_APPLICABLE

        try:
            async with self._prompts.lock(context.user_id):
                with reraise_as(PersistenceFailure):
                    await self._prompts.reset_prompt(context.user_id)
            with reraise_as(DeliveryFailure):
                await context.push_text(t("forget.done")())
        except Exception as e:
            return await self.fail(context, e)

        logger.info("prompt_forgotten")
        return Handled(context)
