"""Activate / deactivate handlers: toggle standing activation for a chat."""

from __future__ import annotations

from talkbot.core.commands import COMMAND_BOT_ACTIVATE, COMMAND_BOT_DEACTIVATE, Command
from talkbot.core.context import Context
from talkbot.core.errors import DeliveryFailure, PersistenceFailure, reraise_as
from talkbot.handlers.base import NOT_APPLICABLE, Handled, Handler, TurnResult
from talkbot.locales import t
from talkbot.log import get_logger
from talkbot.storage.source_store import SourceStore

logger = get_logger(__name__)


class _ActivationHandler(Handler):
    command: Command
    activated: bool
    notice_key: str

    def __init__(self, source_store: SourceStore):
        self._sources = source_store

    def check(self, context: Context) -> bool:
        return context.has_command(self.command)

    async def exec(self, context: Context) -> TurnResult:
        if not self.check(context):
            return NOT_APPLICABLE

        try:
            with reraise_as(PersistenceFailure):
                await self._sources.set_activated(context.id, self.activated)
            with reraise_as(DeliveryFailure):
                await context.push_text(t(self.notice_key)())
        except Exception as e:
            return await self.fail(context, e)

        logger.info("activation_changed", activated=self.activated)
        return Handled(context)


class ActivateHandler(_ActivationHandler):
    name = "activate"
    command = COMMAND_BOT_ACTIVATE
    activated = True
    notice_key = "activate.done"


class DeactivateHandler(_ActivationHandler):
    name = "deactivate"
    command = COMMAND_BOT_DEACTIVATE
    activated = False
    notice_key = "deactivate.done"
