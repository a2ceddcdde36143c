"""Tests for localized strings."""

import pytest

from talkbot.locales import LOCALES, get_locale, set_locale, t


class TestLocales:
    def test_tone_prefix(self) -> None:
        assert t("completion.default_ai_tone")("cheerful") == "Reply in a cheerful tone. "

    def test_empty_tone_adds_nothing(self) -> None:
        assert t("completion.default_ai_tone")("") == ""

    def test_switch_locale(self) -> None:
        set_locale("zh_TW")

        assert get_locale() == "zh_TW"
        assert t("completion.default_ai_tone")("溫柔") == "以溫柔的語氣回應我："

    def test_unknown_locale(self) -> None:
        with pytest.raises(ValueError):
            set_locale("xx")

        assert get_locale() == "en"

    def test_unknown_key_returns_key(self) -> None:
        assert t("no.such.key")() == "no.such.key"

    def test_locales_share_keys(self) -> None:
        assert set(LOCALES["zh_TW"]) == set(LOCALES["en"])
