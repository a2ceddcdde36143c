"""Talk handler: one AI reply turn.

The turn: gate, extend the user's prompt, ask for a completion, persist the
prompt and the conversation history, then send the reply in chunks with one
follow-up action button.
"""

from __future__ import annotations

from talkbot.ai.client import Completion, CompletionClient
from talkbot.ai.prompt import ROLE_AI, ROLE_HUMAN, Prompt
from talkbot.config import DEFAULT_CHUNK_SIZE
from talkbot.core.commands import COMMAND_BOT_CONTINUE, COMMAND_BOT_FORGET, COMMAND_BOT_TALK, Command
from talkbot.core.context import Context
from talkbot.core.errors import CompletionFailure, PersistenceFailure, reraise_as
from talkbot.core.types import EventKind
from talkbot.handlers.base import NOT_APPLICABLE, Handled, Handler, TurnResult
from talkbot.handlers.reply import deliver_reply
from talkbot.locales import t
from talkbot.log import get_logger
from talkbot.storage.history_store import HistoryStore
from talkbot.storage.prompt_store import PromptStore

logger = get_logger(__name__)


def follow_up_actions(completion: Completion) -> list[Command]:
    """Offer "forget" after a natural stop, "continue" after a cut-off."""
    if completion.is_finish_reason_stop:
        return [COMMAND_BOT_FORGET]
    return [COMMAND_BOT_CONTINUE]


async def request_completion(client: CompletionClient, prompt: Prompt) -> Completion:
    with reraise_as(CompletionFailure):
        completion = await client.generate_completion(prompt)
    if not isinstance(getattr(completion, "text", None), str):
        raise CompletionFailure(f"Unusable completion result: {completion!r}")
    return completion


class TalkHandler(Handler):
    name = "talk"

    def __init__(
        self,
        prompt_store: PromptStore,
        history_store: HistoryStore,
        client: CompletionClient,
        bot_name: str,
        tone: str = "",
        chunk_size: int = DEFAULT_CHUNK_SIZE,
    ):
        self._prompts = prompt_store
        self._history = history_store
        self._client = client
        self._bot_name = bot_name
        self._tone = tone
        self._chunk_size = chunk_size

    def check(self, context: Context) -> bool:
        return (
            context.has_command(COMMAND_BOT_TALK)
            or context.has_bot_name
            or context.source.bot.is_activated
        )

    async def exec(self, context: Context) -> TurnResult:
        if not self.check(context):
            return NOT_APPLICABLE

        try:
            completion = await self._complete_turn(context)
            await deliver_reply(
                context,
                completion.text,
                follow_up_actions(completion),
                self._chunk_size,
            )
        except Exception as e:
            return await self.fail(context, e)

        return Handled(context)

    async def _complete_turn(self, context: Context) -> Completion:
        async with self._prompts.lock(context.user_id):
            with reraise_as(PersistenceFailure):
                prompt = await self._prompts.get_prompt(context.user_id)

            match context.kind:
                case EventKind.TEXT:
                    tone = t("completion.default_ai_tone")(self._tone)
                    text = context.trimmed_text or t("completion.empty_message")()
                    prompt.write(ROLE_HUMAN, f"{tone}{text}").write(ROLE_AI)
                case EventKind.IMAGE:
                    prompt.write_image(ROLE_HUMAN, context.trimmed_text, context.image).write(ROLE_AI)

            completion = await request_completion(self._client, prompt)

            prompt.patch(completion.text)
            with reraise_as(PersistenceFailure):
                await self._prompts.set_prompt(context.user_id, prompt)
                await self._history.update_history(
                    context.id, lambda history: history.write(self._bot_name, completion.text)
                )

        logger.info(
            "talk_turn_completed",
            kind=context.kind,
            stop=completion.is_finish_reason_stop,
            length=len(completion.text),
        )
        return completion
