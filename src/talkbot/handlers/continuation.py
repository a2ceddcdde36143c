"""Continue handler: extend an AI reply that was cut off."""

from __future__ import annotations

from talkbot.ai.client import Completion, CompletionClient
from talkbot.config import DEFAULT_CHUNK_SIZE
from talkbot.core.commands import COMMAND_BOT_CONTINUE
from talkbot.core.context import Context
from talkbot.core.errors import PersistenceFailure, reraise_as
from talkbot.handlers.base import NOT_APPLICABLE, Handled, Handler, TurnResult
from talkbot.handlers.reply import deliver_reply
from talkbot.handlers.talk import follow_up_actions, request_completion
from talkbot.locales import t
from talkbot.storage.history_store import HistoryStore
from talkbot.storage.prompt_store import PromptStore


class ContinueHandler(Handler):
    """Runs the completion again with the last AI entry as a prefill.

    The new text is appended to that entry rather than opening a new turn.
    """

    name = "continue"

    def __init__(
        self,
        prompt_store: PromptStore,
        history_store: HistoryStore,
        client: CompletionClient,
        bot_name: str,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
    ):
        self._prompts = prompt_store
        self._history = history_store
        self._client = client
        self._bot_name = bot_name
        self._chunk_size = chunk_size

    def check(self, context: Context) -> bool:
        return context.has_command(COMMAND_BOT_CONTINUE)

    async def exec(self, context: Context) -> TurnResult:
        if not self.check(context):
            return NOT_APPLICABLE

        try:
            completion = await self._continue(context)
            if completion is None:
                await deliver_reply(context, t("continue.nothing")(), [], self._chunk_size)
            else:
                await deliver_reply(
                    context,
                    completion.text,
                    follow_up_actions(completion),
                    self._chunk_size,
                )
        except Exception as e:
            return await self.fail(context, e)

        return Handled(context)

    async def _continue(self, context: Context) -> Completion | None:
        async with self._prompts.lock(context.user_id):
            with reraise_as(PersistenceFailure):
                prompt = await self._prompts.get_prompt(context.user_id)
            if not len(prompt):
                return None

            completion = await request_completion(self._client, prompt)

            prompt.patch(completion.text)
            with reraise_as(PersistenceFailure):
                await self._prompts.set_prompt(context.user_id, prompt)
                await self._history.update_history(
                    context.id, lambda history: history.write(self._bot_name, completion.text)
                )
        return completion
