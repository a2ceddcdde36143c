"""Running per-user conversation prompt fed to the completion service."""

from __future__ import annotations

import base64
from dataclasses import dataclass, replace
from enum import StrEnum
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from talkbot.messenger.models import Attachment


class Role(StrEnum):
    HUMAN = "user"
    AI = "assistant"


ROLE_HUMAN = Role.HUMAN
ROLE_AI = Role.AI

DEFAULT_MAX_TURNS = 8


class EntryState(StrEnum):
    OPEN = "open"  # AI placeholder waiting for the completion text
    COMMITTED = "committed"


class PromptStateError(RuntimeError):
    """An operation would break the Human/AI entry invariants."""


@dataclass(frozen=True, slots=True)
class ImagePart:
    media_type: str
    data: str  # base64

    @classmethod
    def from_attachment(cls, attachment: Attachment) -> ImagePart:
        return cls(
            media_type=attachment.media_type,
            data=base64.b64encode(attachment.data).decode(),
        )


@dataclass(frozen=True, slots=True)
class PromptEntry:
    role: Role
    text: str = ""
    state: EntryState = EntryState.COMMITTED
    image: ImagePart | None = None

    @property
    def is_open(self) -> bool:
        return self.state is EntryState.OPEN

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"role": self.role.value, "text": self.text, "state": self.state.value}
        if self.image:
            data["image"] = {"media_type": self.image.media_type, "data": self.image.data}
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> PromptEntry:
        image = data.get("image")
        return cls(
            role=Role(data["role"]),
            text=data.get("text", ""),
            state=EntryState(data.get("state", EntryState.COMMITTED)),
            image=ImagePart(**image) if image else None,
        )


class Prompt:
    """Ordered role-tagged entries.

    A turn writes a Human entry, opens an AI placeholder with ``write(ROLE_AI)``
    and commits it with ``patch(text)`` once the completion arrives. Only the
    last entry may be open. ``max_turns`` caps the number of Human entries;
    older turns are dropped whole so an AI entry never loses its Human entry.
    """

    def __init__(
        self,
        entries: list[PromptEntry] | None = None,
        max_turns: int = DEFAULT_MAX_TURNS,
    ):
        if max_turns < 1:
            raise ValueError("max_turns must be at least 1")
        self._entries: list[PromptEntry] = list(entries or [])
        self.max_turns = max_turns

    @property
    def entries(self) -> tuple[PromptEntry, ...]:
        return tuple(self._entries)

    @property
    def last(self) -> PromptEntry | None:
        return self._entries[-1] if self._entries else None

    @property
    def has_open_entry(self) -> bool:
        return self.last is not None and self.last.is_open

    def __len__(self) -> int:
        return len(self._entries)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Prompt):
            return NotImplemented
        return self._entries == other._entries and self.max_turns == other.max_turns

    def __repr__(self) -> str:
        return f"Prompt(entries={len(self._entries)}, max_turns={self.max_turns})"

    def write(self, role: Role, text: str | None = None) -> Prompt:
        """Append an entry. ``write(ROLE_AI)`` with no text opens a placeholder."""
        role = Role(role)
        if role == ROLE_HUMAN:
            if text is None:
                raise ValueError("A human entry needs text")
            self._begin_turn()
            self._entries.append(PromptEntry(role=role, text=text))
            return self

        if self.has_open_entry:
            raise PromptStateError("An AI entry is already open")
        if text is None:
            self._entries.append(PromptEntry(role=role, state=EntryState.OPEN))
        else:
            self._entries.append(PromptEntry(role=role, text=text))
        return self

    def write_image(
        self,
        role: Role,
        caption: str = "",
        image: Attachment | None = None,
    ) -> Prompt:
        """Append an image turn. The caption is kept as the entry text."""
        role = Role(role)
        if role == ROLE_HUMAN:
            self._begin_turn()
        elif self.has_open_entry:
            raise PromptStateError("An AI entry is already open")
        self._entries.append(
            PromptEntry(
                role=role,
                text=caption,
                image=ImagePart.from_attachment(image) if image else None,
            )
        )
        return self

    def patch(self, text: str) -> Prompt:
        """Commit ``text`` into the open AI placeholder.

        Without an open placeholder the text continues the last AI entry, or
        becomes a new AI entry when the prompt does not end with one.
        """
        last = self.last
        if last is not None and last.is_open:
            self._entries[-1] = replace(last, text=text, state=EntryState.COMMITTED)
        elif last is not None and last.role == ROLE_AI:
            self._entries[-1] = replace(last, text=last.text + text)
        else:
            self._entries.append(PromptEntry(role=ROLE_AI, text=text))
        return self

    def _begin_turn(self) -> None:
        # A placeholder left open by a failed turn is dropped with its question
        if self.has_open_entry:
            self._entries.pop()
            if self._entries and self._entries[-1].role == ROLE_HUMAN:
                self._entries.pop()
        self._truncate(self.max_turns - 1)

    def _truncate(self, keep_turns: int) -> None:
        starts = [i for i, e in enumerate(self._entries) if e.role == ROLE_HUMAN]
        excess = len(starts) - keep_turns
        if excess <= 0:
            return
        cut = starts[excess] if excess < len(starts) else len(self._entries)
        del self._entries[:cut]

    def to_messages(self) -> list[dict[str, Any]]:
        """Render as Anthropic Messages API ``messages``."""
        messages: list[dict[str, Any]] = []
        for entry in self._entries:
            # The API rejects empty content blocks
            if not entry.text and not entry.image:
                continue
            if entry.image:
                content: list[dict[str, Any]] = [
                    {
                        "type": "image",
                        "source": {
                            "type": "base64",
                            "media_type": entry.image.media_type,
                            "data": entry.image.data,
                        },
                    }
                ]
                if entry.text:
                    content.append({"type": "text", "text": entry.text})
                messages.append({"role": entry.role.value, "content": content})
            else:
                messages.append({"role": entry.role.value, "content": entry.text})

        # Conversations must open with a human turn
        while messages and messages[0]["role"] == ROLE_AI.value:
            messages.pop(0)

        # The API rejects a final assistant turn ending in whitespace
        if messages and messages[-1]["role"] == ROLE_AI.value:
            if isinstance(messages[-1]["content"], str):
                stripped = messages[-1]["content"].rstrip()
                if stripped:
                    messages[-1]["content"] = stripped
                else:
                    messages.pop()
        return messages

    def to_dict(self) -> dict[str, Any]:
        return {
            "max_turns": self.max_turns,
            "entries": [e.to_dict() for e in self._entries],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Prompt:
        return cls(
            entries=[PromptEntry.from_dict(e) for e in data.get("entries", [])],
            max_turns=data.get("max_turns", DEFAULT_MAX_TURNS),
        )

    def copy(self) -> Prompt:
        return Prompt(entries=list(self._entries), max_turns=self.max_turns)
