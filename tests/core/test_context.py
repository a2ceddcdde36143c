"""Tests for Context."""

import pytest

from talkbot.core.commands import COMMAND_BOT_CONTINUE, COMMAND_BOT_FORGET, COMMAND_BOT_TALK
from talkbot.core.types import EventKind
from talkbot.messenger.models import Attachment


class TestEventKind:
    def test_text_message(self, make_context) -> None:
        context = make_context("hello")

        assert context.kind is EventKind.TEXT
        assert context.is_text
        assert not context.is_image

    def test_image_message_is_not_text(self, make_context, image) -> None:
        context = make_context("caption", attachments=[image])

        assert context.is_image
        assert not context.is_text
        assert context.image is image

    def test_document_only_is_neither(self, make_context) -> None:
        doc = Attachment(data=b"x", media_type="application/pdf")
        context = make_context("", attachments=[doc])

        assert context.kind is EventKind.OTHER
        assert not context.is_text
        assert not context.is_image

    def test_whitespace_is_not_text(self, make_context) -> None:
        assert not make_context("   ").is_text


class TestCommands:
    @pytest.mark.parametrize("text", ["/talk hi", "/TALK", "/talk@my_bot hi"])
    def test_has_talk_command(self, make_context, text: str) -> None:
        assert make_context(text).has_command(COMMAND_BOT_TALK)

    @pytest.mark.parametrize("text", ["talk to me", "continue please", "forget it"])
    def test_bare_words_are_not_commands(self, make_context, text: str) -> None:
        context = make_context(text)

        assert not context.has_command(COMMAND_BOT_TALK)
        assert not context.has_command(COMMAND_BOT_CONTINUE)
        assert not context.has_command(COMMAND_BOT_FORGET)
        assert context.trimmed_text == text

    def test_command_must_lead(self, make_context) -> None:
        assert not make_context("please /talk").has_command(COMMAND_BOT_TALK)

    def test_other_command(self, make_context) -> None:
        assert not make_context("/continue").has_command(COMMAND_BOT_TALK)
        assert make_context("/continue").has_command(COMMAND_BOT_CONTINUE)


class TestBotName:
    @pytest.mark.parametrize(
        "text", ["AI, hello", "ai what's up", "hey AI!", "what do you think, Ai?"]
    )
    def test_mentions(self, make_context, text: str) -> None:
        assert make_context(text).has_bot_name

    @pytest.mark.parametrize("text", ["said nothing", "paint it", "hello", "airport is far"])
    def test_non_mentions(self, make_context, text: str) -> None:
        assert not make_context(text).has_bot_name

    def test_platform_mention_flag(self, make_context) -> None:
        assert make_context("hello", mentions_bot=True).has_bot_name

    def test_cjk_name_prefix(self, make_context) -> None:
        assert make_context("小助手你好", bot_name="小助手").has_bot_name

    def test_no_configured_name(self, make_context) -> None:
        assert not make_context("AI hello", bot_name="").has_bot_name


class TestTrimmedText:
    @pytest.mark.parametrize(
        ("text", "expected"),
        [
            ("  hello  ", "hello"),
            ("/talk   what is up ", "what is up"),
            ("/talk@my_bot hi", "hi"),
            ("/talk", ""),
            ("AI, tell me a joke", "tell me a joke"),
            ("/talk AI: tell me", "tell me"),
            ("hey AI tell me", "hey AI tell me"),
            ("AIRPORT is far", "AIRPORT is far"),
        ],
    )
    def test_trimming(self, make_context, text: str, expected: str) -> None:
        assert make_context(text).trimmed_text == expected


class TestPush:
    async def test_push_text_records_message(self, make_context, adapter) -> None:
        context = make_context("hi")

        await context.push_text("reply", [COMMAND_BOT_CONTINUE])

        assert adapter.sent[0].chat_id == "C1"
        assert adapter.sent[0].actions == (COMMAND_BOT_CONTINUE,)
        assert context.messages == adapter.sent

    async def test_push_text_raises_on_send_failure(self, make_context, adapter) -> None:
        adapter.fail_on_call = 0

        with pytest.raises(RuntimeError):
            await make_context("hi").push_text("reply")

    async def test_push_error_sends_generic_notice(self, make_context, adapter) -> None:
        context = make_context("hi")
        error = ValueError("secret internals")

        await context.push_error(error)

        assert context.errors == [error]
        assert "secret" not in adapter.sent[0].text
        assert adapter.sent[0].actions == ()

    async def test_push_error_swallows_send_failure(self, make_context, adapter) -> None:
        adapter.fail_on_call = 0
        context = make_context("hi")

        await context.push_error(ValueError("x"))

        assert context.messages == []
