"""Standing-activation state per conversation."""

from __future__ import annotations

from abc import ABC, abstractmethod

from talkbot.storage.database import Database


class SourceStore(ABC):
    """Remembers which conversations have the bot in always-respond mode."""

    @abstractmethod
    async def is_activated(self, conversation_id: str, default: bool = False) -> bool:
        """Stored flag for the conversation, or ``default`` if never set."""
        ...

    @abstractmethod
    async def set_activated(self, conversation_id: str, activated: bool) -> None:
        ...


class InMemorySourceStore(SourceStore):
    def __init__(self) -> None:
        self._flags: dict[str, bool] = {}

    async def is_activated(self, conversation_id: str, default: bool = False) -> bool:
        return self._flags.get(conversation_id, default)

    async def set_activated(self, conversation_id: str, activated: bool) -> None:
        self._flags[conversation_id] = activated


class SqliteSourceStore(SourceStore):
    def __init__(self, db: Database, bot_id: str):
        self._db = db
        self._bot_id = bot_id

    async def is_activated(self, conversation_id: str, default: bool = False) -> bool:
        cursor = await self._db.conn.execute(
            "SELECT is_activated FROM sources WHERE bot_id = ? AND conversation_id = ?",
            (self._bot_id, conversation_id),
        )
        row = await cursor.fetchone()
        if row is None:
            return default
        return bool(row["is_activated"])

    async def set_activated(self, conversation_id: str, activated: bool) -> None:
        await self._db.conn.execute(
            """INSERT INTO sources (bot_id, conversation_id, is_activated)
               VALUES (?, ?, ?)
               ON CONFLICT(bot_id, conversation_id)
               DO UPDATE SET is_activated = excluded.is_activated,
                             updated_at = strftime('%Y-%m-%dT%H:%M:%f','now')""",
            (self._bot_id, conversation_id, int(activated)),
        )
        await self._db.conn.commit()
