"""Tests for Handler failure containment."""

from talkbot.core.context import Context
from talkbot.core.errors import CompletionFailure, ErrorKind, UnexpectedFailure
from talkbot.handlers.base import NOT_APPLICABLE, Failed, Handler, TurnResult


class _Noop(Handler):
    name = "noop"

    def check(self, context: Context) -> bool:
        return False

    async def exec(self, context: Context) -> TurnResult:
        return NOT_APPLICABLE


class TestFail:
    async def test_keeps_classified_error(self, make_context, adapter) -> None:
        error = CompletionFailure("rate limited")

        result = await _Noop().fail(make_context("x"), error)

        assert isinstance(result, Failed)
        assert result.error is error
        assert result.kind is ErrorKind.COMPLETION
        assert len(adapter.sent) == 1

    async def test_wraps_unclassified_error(self, make_context) -> None:
        cause = KeyError("entries")

        result = await _Noop().fail(make_context("x"), cause)

        assert isinstance(result.error, UnexpectedFailure)
        assert result.kind is ErrorKind.INTERNAL
        assert result.error.__cause__ is cause

    async def test_undeliverable_notice_does_not_raise(self, make_context, adapter) -> None:
        adapter.fail_on_call = 0
        context = make_context("x")

        result = await _Noop().fail(context, CompletionFailure("down"))

        assert isinstance(result, Failed)
        assert adapter.sent == []
        assert context.errors == [result.error]
