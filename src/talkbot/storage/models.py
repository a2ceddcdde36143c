"""Data models for storage layer."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone


@dataclass
class HistoryRecord:
    speaker: str
    text: str
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    id: int | None = None


class History:
    """Append-only transcript of one conversation.

    Records loaded from the store are in ``records``; ``write`` queues new
    ones in ``pending`` until the store commits them.
    """

    def __init__(self, conversation_id: str, records: list[HistoryRecord] | None = None):
        self.conversation_id = conversation_id
        self._records: list[HistoryRecord] = list(records or [])
        self._pending: list[HistoryRecord] = []

    @property
    def records(self) -> tuple[HistoryRecord, ...]:
        return tuple(self._records + self._pending)

    @property
    def pending(self) -> tuple[HistoryRecord, ...]:
        return tuple(self._pending)

    def write(self, speaker: str, text: str) -> History:
        self._pending.append(HistoryRecord(speaker=speaker, text=text))
        return self

    def mark_committed(self) -> None:
        self._records.extend(self._pending)
        self._pending = []

    def __len__(self) -> int:
        return len(self._records) + len(self._pending)

    def __str__(self) -> str:
        return "\n".join(f"{r.speaker}: {r.text}" for r in self.records)
