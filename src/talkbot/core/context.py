"""Per-event view of an incoming message plus the reply primitives for it."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from functools import cached_property
from typing import Iterable

from talkbot.core.commands import Command, find_command, leading_token
from talkbot.core.types import EventKind, Platform
from talkbot.locales import t
from talkbot.log import get_logger
from talkbot.messenger.base import MessengerAdapter
from talkbot.messenger.models import Attachment, IncomingMessage, OutgoingMessage

logger = get_logger(__name__)

_NAME_SEPARATORS = " \t,:;.!?，：；。！？"


def _starts_with_name(text: str, name: str) -> bool:
    """``text`` opens by addressing ``name`` (not just a word that begins with it)."""
    if not text.lower().startswith(name.lower()):
        return False
    rest = text[len(name):]
    # Latin names need a boundary; CJK text runs on without spaces
    return not rest or not (rest[0].isascii() and rest[0].isalnum())


@dataclass(frozen=True, slots=True)
class BotState:
    is_activated: bool = False


@dataclass(frozen=True, slots=True)
class Source:
    """Where the event came from: one chat on one platform."""

    id: str
    platform: Platform
    bot: BotState = field(default_factory=BotState)


class Context:
    """Everything a handler needs about one inbound event.

    Built once per event by the dispatcher and discarded after the turn.
    ``messages`` and ``errors`` record what the turn sent back.
    """

    def __init__(
        self,
        message: IncomingMessage,
        adapter: MessengerAdapter,
        source: Source,
        bot_name: str = "",
    ):
        self.message = message
        self.source = source
        self.bot_name = bot_name
        self._adapter = adapter
        self.messages: list[OutgoingMessage] = []
        self.errors: list[Exception] = []

    @property
    def id(self) -> str:
        return self.message.chat_id

    @property
    def user_id(self) -> str:
        return self.message.user_id

    @property
    def bot_id(self) -> str:
        return self.message.bot_id

    @cached_property
    def image(self) -> Attachment | None:
        return next((a for a in self.message.attachments if a.is_image), None)

    @property
    def kind(self) -> EventKind:
        if self.image is not None:
            return EventKind.IMAGE
        if self.message.text.strip():
            return EventKind.TEXT
        return EventKind.OTHER

    @property
    def is_image(self) -> bool:
        return self.kind is EventKind.IMAGE

    @property
    def is_text(self) -> bool:
        return self.kind is EventKind.TEXT

    def has_command(self, command: Command) -> bool:
        return command.matches(leading_token(self.message.text))

    @cached_property
    def has_bot_name(self) -> bool:
        if self.message.mentions_bot:
            return True
        if not self.bot_name:
            return False
        text = self.message.text.strip()
        if _starts_with_name(text, self.bot_name):
            return True
        pattern = rf"(?<!\w){re.escape(self.bot_name)}(?!\w)"
        return re.search(pattern, text, re.IGNORECASE) is not None

    @cached_property
    def trimmed_text(self) -> str:
        """User text without the leading command token or bot-name address."""
        text = self.message.text.strip()
        if find_command(text) is not None:
            parts = text.split(maxsplit=1)
            text = parts[1] if len(parts) > 1 else ""
        if self.bot_name and _starts_with_name(text, self.bot_name):
            text = text[len(self.bot_name):].lstrip(_NAME_SEPARATORS)
        return text.strip()

    async def push_text(self, text: str, actions: Iterable[Command] = ()) -> None:
        """Send one message. Raises whatever the adapter raises."""
        outgoing = OutgoingMessage(chat_id=self.id, text=text, actions=tuple(actions))
        await self._adapter.send_message(outgoing)
        self.messages.append(outgoing)

    async def push_error(self, err: Exception) -> None:
        """Tell the user the turn failed. Never raises."""
        self.errors.append(err)
        notice = OutgoingMessage(chat_id=self.id, text=t("error.generic")())
        try:
            await self._adapter.send_message(notice)
        except Exception as e:
            logger.error("error_notice_failed", chat_id=self.id, error=str(e))
            return
        self.messages.append(notice)

    async def show_typing(self) -> None:
        await self._adapter.send_typing_indicator(self.id)
