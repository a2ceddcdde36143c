"""Platform adapter contract."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Awaitable, Callable

from talkbot.messenger.models import IncomingMessage, OutgoingMessage

MessageCallback = Callable[[IncomingMessage], Awaitable[Any]]


class MessengerAdapter(ABC):
    """One bot account on one chat platform.

    Adapters normalize platform events into ``IncomingMessage`` and hand them
    to the callback set with ``on_message``. A button press arrives the same
    way, as a message whose text is the command the button stands for.
    """

    def __init__(self, bot_id: str, config: dict):
        self.bot_id = bot_id
        self.config = config
        self._message_callback: MessageCallback | None = None

    @property
    @abstractmethod
    def platform_name(self) -> str:
        ...

    @abstractmethod
    async def start(self) -> None:
        ...

    @abstractmethod
    async def stop(self) -> None:
        ...

    @abstractmethod
    async def send_message(self, message: OutgoingMessage) -> None:
        """Deliver ``message`` with its ``actions`` rendered as buttons.

        Must raise if the platform does not accept the message; returning
        normally means it was delivered.
        """
        ...

    @abstractmethod
    async def send_typing_indicator(self, chat_id: str) -> None:
        ...

    def on_message(self, callback: MessageCallback) -> None:
        self._message_callback = callback
