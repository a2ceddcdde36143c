"""Splitting generated text into transport-safe chunks and sending them."""

from __future__ import annotations

from typing import Iterable

from talkbot.config import DEFAULT_CHUNK_SIZE
from talkbot.core.commands import Command
from talkbot.core.context import Context
from talkbot.core.errors import DeliveryFailure, reraise_as


def chunk_text(text: str, size: int = DEFAULT_CHUNK_SIZE) -> list[str]:
    """Fixed-size slices of ``text``, in order, without overlap.

    Splits on length alone, so a word may straddle two chunks. Empty text
    gives no chunks.
    """
    if size <= 0:
        raise ValueError("chunk size must be positive")
    if not text:
        return []
    return [text[i : i + size] for i in range(0, len(text), size)]


async def deliver_reply(
    context: Context,
    text: str,
    actions: Iterable[Command],
    chunk_size: int = DEFAULT_CHUNK_SIZE,
) -> None:
    """Send ``text`` chunk by chunk; only the first chunk carries ``actions``.

    Each send completes before the next starts.
    """
    actions = tuple(actions)
    with reraise_as(DeliveryFailure):
        for i, chunk in enumerate(chunk_text(text, chunk_size)):
            await context.push_text(chunk, actions if i == 0 else ())
