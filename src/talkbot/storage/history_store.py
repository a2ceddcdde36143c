"""Per-conversation append-only history stores."""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Callable

from talkbot.core.locks import KeyedLock
from talkbot.storage.database import Database
from talkbot.storage.models import History, HistoryRecord

HistoryUpdate = Callable[[History], History]

DEFAULT_HISTORY_WINDOW = 100


class HistoryStore(ABC):
    """Keyed mapping from conversation id to its transcript.

    ``update_history`` is an atomic read-modify-write per conversation: the
    callback sees the most recent ``window`` records and whatever it writes
    is committed together.
    """

    def __init__(self, window: int = DEFAULT_HISTORY_WINDOW):
        self._window = window
        self._locks = KeyedLock()

    async def get_history(self, conversation_id: str) -> History:
        return History(conversation_id, await self._load(conversation_id))

    async def update_history(self, conversation_id: str, update: HistoryUpdate) -> History:
        async with self._locks.acquire(conversation_id):
            history = History(conversation_id, await self._load(conversation_id))
            result = update(history)
            if isinstance(result, History):
                history = result
            if history.pending:
                await self._append(conversation_id, list(history.pending))
                history.mark_committed()
            return history

    @abstractmethod
    async def _load(self, conversation_id: str) -> list[HistoryRecord]:
        ...

    @abstractmethod
    async def _append(self, conversation_id: str, records: list[HistoryRecord]) -> None:
        ...


class InMemoryHistoryStore(HistoryStore):
    def __init__(self, window: int = DEFAULT_HISTORY_WINDOW):
        super().__init__(window)
        self._records: dict[str, list[HistoryRecord]] = {}

    async def _load(self, conversation_id: str) -> list[HistoryRecord]:
        records = self._records.get(conversation_id, [])
        return records[-self._window:] if self._window else []

    async def _append(self, conversation_id: str, records: list[HistoryRecord]) -> None:
        self._records.setdefault(conversation_id, []).extend(records)


class SqliteHistoryStore(HistoryStore):
    def __init__(self, db: Database, bot_id: str, window: int = DEFAULT_HISTORY_WINDOW):
        super().__init__(window)
        self._db = db
        self._bot_id = bot_id

    async def _load(self, conversation_id: str) -> list[HistoryRecord]:
        cursor = await self._db.conn.execute(
            """SELECT * FROM (
                   SELECT * FROM history
                   WHERE bot_id = ? AND conversation_id = ?
                   ORDER BY id DESC
                   LIMIT ?
               ) ORDER BY id ASC""",
            (self._bot_id, conversation_id, self._window),
        )
        rows = await cursor.fetchall()
        return [
            HistoryRecord(
                id=row["id"],
                speaker=row["speaker"],
                text=row["text"],
                created_at=datetime.fromisoformat(row["created_at"]),
            )
            for row in rows
        ]

    async def _append(self, conversation_id: str, records: list[HistoryRecord]) -> None:
        await self._db.conn.executemany(
            """INSERT INTO history (bot_id, conversation_id, speaker, text, created_at)
               VALUES (?, ?, ?, ?, ?)""",
            [
                (self._bot_id, conversation_id, r.speaker, r.text, r.created_at.isoformat())
                for r in records
            ],
        )
        await self._db.conn.commit()
