"""Handler interface and turn results."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Union

from talkbot.core.context import Context
from talkbot.core.errors import ErrorKind, TurnError, UnexpectedFailure
from talkbot.log import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class NotApplicable:
    """The handler's gate was closed; nothing happened."""


@dataclass(frozen=True)
class Handled:
    context: Context


@dataclass(frozen=True)
class Failed:
    context: Context
    error: TurnError

    @property
    def kind(self) -> ErrorKind:
        return self.error.kind


TurnResult = Union[NotApplicable, Handled, Failed]

NOT_APPLICABLE = NotApplicable()


class Handler(ABC):
    """One kind of turn. ``exec`` must not raise for ordinary failures."""

    name: str = "handler"

    @abstractmethod
    def check(self, context: Context) -> bool:
        """Whether this handler should take the event. No side effects."""
        ...

    @abstractmethod
    async def exec(self, context: Context) -> TurnResult:
        ...

    async def fail(self, context: Context, exc: Exception) -> Failed:
        """Log, notify the user once and report the failure.

        Exceptions outside the turn taxonomy are reported as unexpected.
        """
        if isinstance(exc, TurnError):
            error = exc
        else:
            error = UnexpectedFailure(str(exc) or type(exc).__name__)
            error.__cause__ = exc
        logger.error(
            "turn_failed",
            handler=self.name,
            kind=error.kind.value,
            error=str(error),
            cause=repr(error.__cause__) if error.__cause__ else None,
        )
        await context.push_error(error)
        return Failed(context, error)
