"""Per-user prompt stores."""

from __future__ import annotations

import json
from abc import ABC, abstractmethod
from contextlib import AbstractAsyncContextManager
from typing import Any

from talkbot.ai.prompt import DEFAULT_MAX_TURNS, Prompt
from talkbot.core.locks import KeyedLock
from talkbot.log import get_logger
from talkbot.storage.database import Database

logger = get_logger(__name__)


class PromptStore(ABC):
    """Keyed mapping from user id to that user's running prompt.

    ``get_prompt`` hands out a private copy; nothing the caller does to it is
    visible until ``set_prompt``. Callers that read, complete and write back
    must hold ``lock(user_id)`` for the whole sequence so two turns of the
    same user never interleave.
    """

    def __init__(self, max_turns: int = DEFAULT_MAX_TURNS):
        self._max_turns = max_turns
        self._locks = KeyedLock()

    def lock(self, user_id: str) -> AbstractAsyncContextManager[None]:
        return self._locks.acquire(user_id)

    def _new_prompt(self, data: dict[str, Any] | None = None) -> Prompt:
        if data is None:
            return Prompt(max_turns=self._max_turns)
        prompt = Prompt.from_dict(data)
        prompt.max_turns = self._max_turns
        return prompt

    @abstractmethod
    async def get_prompt(self, user_id: str) -> Prompt:
        """Return the user's prompt, or a fresh empty one."""
        ...

    @abstractmethod
    async def set_prompt(self, user_id: str, prompt: Prompt) -> None:
        ...

    @abstractmethod
    async def reset_prompt(self, user_id: str) -> None:
        """Forget the user's conversation context."""
        ...


class InMemoryPromptStore(PromptStore):
    def __init__(self, max_turns: int = DEFAULT_MAX_TURNS):
        super().__init__(max_turns)
        self._prompts: dict[str, dict[str, Any]] = {}

    async def get_prompt(self, user_id: str) -> Prompt:
        return self._new_prompt(self._prompts.get(user_id))

    async def set_prompt(self, user_id: str, prompt: Prompt) -> None:
        self._prompts[user_id] = prompt.to_dict()

    async def reset_prompt(self, user_id: str) -> None:
        self._prompts.pop(user_id, None)


class SqlitePromptStore(PromptStore):
    def __init__(self, db: Database, bot_id: str, max_turns: int = DEFAULT_MAX_TURNS):
        super().__init__(max_turns)
        self._db = db
        self._bot_id = bot_id

    async def get_prompt(self, user_id: str) -> Prompt:
        cursor = await self._db.conn.execute(
            "SELECT prompt_json FROM prompts WHERE bot_id = ? AND user_id = ?",
            (self._bot_id, user_id),
        )
        row = await cursor.fetchone()
        if row is None:
            return self._new_prompt()
        return self._new_prompt(json.loads(row["prompt_json"]))

    async def set_prompt(self, user_id: str, prompt: Prompt) -> None:
        await self._db.conn.execute(
            """INSERT INTO prompts (bot_id, user_id, prompt_json)
               VALUES (?, ?, ?)
               ON CONFLICT(bot_id, user_id)
               DO UPDATE SET prompt_json = excluded.prompt_json,
                             updated_at = strftime('%Y-%m-%dT%H:%M:%f','now')""",
            (self._bot_id, user_id, json.dumps(prompt.to_dict(), ensure_ascii=False)),
        )
        await self._db.conn.commit()

    async def reset_prompt(self, user_id: str) -> None:
        await self._db.conn.execute(
            "DELETE FROM prompts WHERE bot_id = ? AND user_id = ?",
            (self._bot_id, user_id),
        )
        await self._db.conn.commit()
        logger.info("prompt_reset", bot_id=self._bot_id, user_id=user_id)
