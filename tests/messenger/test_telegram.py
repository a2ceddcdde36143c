"""Tests for Telegram helpers."""

from talkbot.core.commands import COMMAND_BOT_CONTINUE, COMMAND_BOT_FORGET
import pytest

from talkbot.messenger.telegram import build_keyboard, strip_mention


class TestBuildKeyboard:
    def test_no_actions(self) -> None:
        assert build_keyboard(()) is None

    def test_one_button_per_action(self) -> None:
        markup = build_keyboard((COMMAND_BOT_FORGET,))

        (row,) = markup.inline_keyboard
        (button,) = row
        assert button.text == "Forget"
        assert button.callback_data == "/forget"

    def test_buttons_share_a_row(self) -> None:
        markup = build_keyboard((COMMAND_BOT_CONTINUE, COMMAND_BOT_FORGET))

        assert [b.callback_data for b in markup.inline_keyboard[0]] == ["/continue", "/forget"]


class TestStripMention:
    @pytest.mark.parametrize(
        ("text", "expected"),
        [
            ("@talk_bot what is up", "what is up"),
            ("hey @Talk_Bot how are you", "hey how are you"),
            ("tell me @talk_bot", "tell me"),
            ("@talk_bot", ""),
            ("@talk_bot_fan said hi", "@talk_bot_fan said hi"),
        ],
    )
    def test_strips_handle(self, text: str, expected: str) -> None:
        assert strip_mention(text, "talk_bot") == expected
