"""Enumerations shared by the messenger and handler layers."""

from __future__ import annotations

from enum import StrEnum


class Platform(StrEnum):
    TELEGRAM = "telegram"
    DISCORD = "discord"


class EventKind(StrEnum):
    """What an inbound event carries, as far as the talk turn cares."""

    TEXT = "text"
    IMAGE = "image"  # an image attachment wins over any caption text
    OTHER = "other"  # stickers, files, empty messages
