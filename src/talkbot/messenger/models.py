"""Platform-neutral inbound and outbound message shapes."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime

from talkbot.core.commands import Command
from talkbot.core.types import Platform


@dataclass(frozen=True, slots=True)
class Attachment:
    data: bytes
    media_type: str
    filename: str = "attachment"

    @property
    def is_image(self) -> bool:
        return self.media_type.startswith("image/")


@dataclass(frozen=True, slots=True)
class IncomingMessage:
    """A chat event after the adapter has normalized it.

    ``chat_id`` is the conversation (group or private chat); ``user_id`` is
    the sender. ``mentions_bot`` is set when the platform itself reports an
    @mention of this bot account.
    """

    platform: Platform
    bot_id: str
    chat_id: str
    user_id: str
    user_display_name: str
    text: str
    timestamp: datetime
    is_private: bool = False
    mentions_bot: bool = False
    reply_to_message_id: str | None = None
    attachments: list[Attachment] = field(default_factory=list)


@dataclass(frozen=True, slots=True)
class OutgoingMessage:
    chat_id: str
    text: str
    actions: tuple[Command, ...] = ()  # follow-up buttons
    reply_to_message_id: str | None = None
