"""Shared fakes and fixtures."""

from __future__ import annotations

import asyncio
from datetime import datetime, timezone
from typing import Callable

import pytest

from talkbot.ai.client import Completion, CompletionClient
from talkbot.ai.prompt import Prompt
from talkbot.core.context import BotState, Context, Source
from talkbot.core.types import Platform
from talkbot.locales import set_locale
from talkbot.messenger.base import MessengerAdapter
from talkbot.messenger.models import Attachment, IncomingMessage, OutgoingMessage


class RecordingAdapter(MessengerAdapter):
    """Messenger that records sends and can fail on a given send."""

    def __init__(self) -> None:
        super().__init__("bot-1", {})
        self.sent: list[OutgoingMessage] = []
        self.events: list[tuple[str, int]] = []
        self.typing: list[str] = []
        self.fail_on_call: int | None = None
        self._calls = 0

    @property
    def platform_name(self) -> str:
        return "test"

    async def start(self) -> None:
        pass

    async def stop(self) -> None:
        pass

    async def send_message(self, message: OutgoingMessage) -> None:
        index = self._calls
        self._calls += 1
        if self.fail_on_call == index:
            raise RuntimeError("platform rejected the message")
        self.events.append(("start", index))
        await asyncio.sleep(0)
        self.events.append(("end", index))
        self.sent.append(message)

    async def send_typing_indicator(self, chat_id: str) -> None:
        self.typing.append(chat_id)


class FakeCompletionClient(CompletionClient):
    """Returns scripted completions and records the prompt it was given."""

    def __init__(self, *results: Completion | Exception) -> None:
        self._results = list(results)
        self.prompts: list[Prompt] = []

    @property
    def model_name(self) -> str:
        return "fake-model"

    async def generate_completion(self, prompt: Prompt) -> Completion:
        self.prompts.append(prompt.copy())
        result = self._results.pop(0) if self._results else Completion("ok", True)
        if isinstance(result, Exception):
            raise result
        return result


@pytest.fixture(autouse=True)
def english_locale():
    set_locale("en")
    yield
    set_locale("en")


@pytest.fixture
def adapter() -> RecordingAdapter:
    return RecordingAdapter()


@pytest.fixture
def fake_client_cls() -> type[FakeCompletionClient]:
    return FakeCompletionClient


@pytest.fixture
def make_message() -> Callable[..., IncomingMessage]:
    def _make(
        text: str = "",
        user_id: str = "U1",
        chat_id: str = "C1",
        attachments: list[Attachment] | None = None,
        is_private: bool = False,
        mentions_bot: bool = False,
    ) -> IncomingMessage:
        return IncomingMessage(
            platform=Platform.TELEGRAM,
            bot_id="bot-1",
            chat_id=chat_id,
            user_id=user_id,
            user_display_name="Tester",
            text=text,
            timestamp=datetime(2024, 1, 15, 12, 0, 0, tzinfo=timezone.utc),
            is_private=is_private,
            mentions_bot=mentions_bot,
            attachments=attachments or [],
        )

    return _make


@pytest.fixture
def make_context(
    adapter: RecordingAdapter, make_message: Callable[..., IncomingMessage]
) -> Callable[..., Context]:
    def _make(
        text: str = "",
        activated: bool = False,
        bot_name: str = "AI",
        **message_kwargs,
    ) -> Context:
        message = make_message(text=text, **message_kwargs)
        source = Source(
            id=message.chat_id,
            platform=message.platform,
            bot=BotState(is_activated=activated),
        )
        return Context(message, adapter, source, bot_name=bot_name)

    return _make


@pytest.fixture
def image() -> Attachment:
    return Attachment(data=b"\x89PNG", media_type="image/png", filename="cat.png")
