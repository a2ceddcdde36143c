"""Localized reply strings.

``t(key)`` returns a formatter; call it with the template argument (if any)::

    t("completion.default_ai_tone")("cheerful")
"""

from __future__ import annotations

from typing import Callable

Formatter = Callable[..., str]


def _tone_en(tone: str = "") -> str:
    return f"Reply in a {tone} tone. " if tone else ""


def _tone_zh(tone: str = "") -> str:
    return f"以{tone}的語氣回應我：" if tone else ""


def _const(text: str) -> Formatter:
    return lambda *_: text


LOCALES: dict[str, dict[str, Formatter]] = {
    "en": {
        "completion.default_ai_tone": _tone_en,
        "completion.empty_message": _const("Hello!"),
        "error.generic": _const("Sorry, something went wrong. Please try again later."),
        "continue.nothing": _const("There is nothing to continue yet."),
        "forget.done": _const("OK, I have forgotten our conversation."),
        "activate.done": _const("I will reply to every message in this chat."),
        "deactivate.done": _const("I will only reply when called by name or with /talk."),
    },
    "zh_TW": {
        "completion.default_ai_tone": _tone_zh,
        "completion.empty_message": _const("你好！"),
        "error.generic": _const("抱歉，發生錯誤，請稍後再試。"),
        "continue.nothing": _const("目前沒有可以繼續的內容。"),
        "forget.done": _const("好的，我已經忘記我們的對話了。"),
        "activate.done": _const("我會回覆這個聊天室的每一則訊息。"),
        "deactivate.done": _const("只有在叫我名字或使用 /talk 時我才會回覆。"),
    },
}

DEFAULT_LOCALE = "en"

_current_locale = DEFAULT_LOCALE


def set_locale(locale: str) -> None:
    global _current_locale
    if locale not in LOCALES:
        raise ValueError(f"Unknown locale: {locale}")
    _current_locale = locale


def get_locale() -> str:
    return _current_locale


def t(key: str) -> Formatter:
    """Look up ``key`` in the active locale, falling back to English, then the key."""
    formatter = LOCALES[_current_locale].get(key) or LOCALES[DEFAULT_LOCALE].get(key)
    if formatter is None:
        return _const(key)
    return formatter
