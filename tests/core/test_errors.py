"""Tests for the turn failure taxonomy."""

import pytest

from talkbot.core.errors import (
    CompletionFailure,
    DeliveryFailure,
    ErrorKind,
    PersistenceFailure,
    reraise_as,
)


class TestReraiseAs:
    def test_wraps_plain_exceptions(self) -> None:
        with pytest.raises(PersistenceFailure) as exc_info:
            with reraise_as(PersistenceFailure):
                raise OSError("disk full")

        assert exc_info.value.kind is ErrorKind.PERSISTENCE
        assert isinstance(exc_info.value.__cause__, OSError)
        assert str(exc_info.value) == "disk full"

    def test_keeps_already_classified_errors(self) -> None:
        with pytest.raises(CompletionFailure):
            with reraise_as(DeliveryFailure):
                raise CompletionFailure("bad result")

    def test_uses_type_name_for_empty_message(self) -> None:
        with pytest.raises(DeliveryFailure, match="TimeoutError"):
            with reraise_as(DeliveryFailure):
                raise TimeoutError()

    def test_passes_through_when_nothing_raised(self) -> None:
        with reraise_as(DeliveryFailure):
            value = 1

        assert value == 1
