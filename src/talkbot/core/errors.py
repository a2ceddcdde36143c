"""Failure taxonomy for a conversation turn."""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from enum import StrEnum


class ErrorKind(StrEnum):
    COMPLETION = "completion"
    PERSISTENCE = "persistence"
    DELIVERY = "delivery"
    INTERNAL = "internal"


class TurnError(Exception):
    """Base class for failures contained at a handler boundary."""

    kind: ErrorKind = ErrorKind.INTERNAL


class CompletionFailure(TurnError):
    """The completion service rejected the request or returned something unusable."""

    kind = ErrorKind.COMPLETION


class PersistenceFailure(TurnError):
    """A prompt, history or activation store read/write failed."""

    kind = ErrorKind.PERSISTENCE


class DeliveryFailure(TurnError):
    """Sending a reply chunk to the messenger failed."""

    kind = ErrorKind.DELIVERY


class UnexpectedFailure(TurnError):
    """Anything else that escaped a turn step."""

    kind = ErrorKind.INTERNAL


@contextmanager
def reraise_as(error_cls: type[TurnError]) -> Iterator[None]:
    """Convert any non-TurnError raised in the block into ``error_cls``.

    Errors that are already classified pass through untouched.
    """
    try:
        yield
    except TurnError:
        raise
    except Exception as e:
        raise error_cls(str(e) or type(e).__name__) from e
