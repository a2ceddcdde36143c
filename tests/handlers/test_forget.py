"""Tests for ForgetHandler."""

from unittest.mock import AsyncMock

from talkbot.ai.prompt import ROLE_AI, ROLE_HUMAN, Prompt
from talkbot.core.errors import ErrorKind
from talkbot.handlers.base import NOT_APPLICABLE, Failed, Handled
from talkbot.handlers.forget import ForgetHandler
from talkbot.storage.prompt_store import InMemoryPromptStore


class TestForgetHandler:
    async def test_resets_prompt_and_confirms(self, make_context, adapter) -> None:
        store = InMemoryPromptStore()
        await store.set_prompt("U1", Prompt().write(ROLE_HUMAN, "q").write(ROLE_AI, "a"))

        result = await ForgetHandler(store).exec(make_context("/forget"))

        assert isinstance(result, Handled)
        assert len(await store.get_prompt("U1")) == 0
        assert adapter.sent[0].text == "OK, I have forgotten our conversation."

    async def test_button_press_with_bot_suffix(self, make_context) -> None:
        handler = ForgetHandler(InMemoryPromptStore())

        assert handler.check(make_context("/forget@talk_bot"))

    async def test_ignores_other_messages(self, make_context, adapter) -> None:
        result = await ForgetHandler(InMemoryPromptStore()).exec(make_context("forgetful me"))

        assert result is NOT_APPLICABLE
        assert adapter.sent == []

    async def test_store_failure(self, make_context, adapter) -> None:
        store = InMemoryPromptStore()
        store.reset_prompt = AsyncMock(side_effect=OSError("locked"))  # type: ignore[method-assign]

        result = await ForgetHandler(store).exec(make_context("/forget"))

        assert isinstance(result, Failed)
        assert result.kind is ErrorKind.PERSISTENCE
        assert len(adapter.sent) == 1
