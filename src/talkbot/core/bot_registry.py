"""Registry of running bots."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from talkbot.handlers.dispatcher import MessageDispatcher
    from talkbot.messenger.base import MessengerAdapter


@dataclass
class BotRuntime:
    """A started adapter and the dispatcher it feeds."""

    bot_id: str
    adapter: MessengerAdapter
    dispatcher: MessageDispatcher


class BotRegistry:
    """Tracks every bot started by the app."""

    def __init__(self) -> None:
        self._bots: dict[str, BotRuntime] = {}

    def register(self, runtime: BotRuntime) -> None:
        if runtime.bot_id in self._bots:
            raise ValueError(f"Bot '{runtime.bot_id}' is already registered")
        self._bots[runtime.bot_id] = runtime

    def get(self, bot_id: str) -> BotRuntime | None:
        return self._bots.get(bot_id)

    def all(self) -> list[BotRuntime]:
        return list(self._bots.values())

    def ids(self) -> list[str]:
        return list(self._bots.keys())
