"""Tests for KeyedLock."""

import asyncio

import pytest

from talkbot.core.locks import KeyedLock


class TestKeyedLock:
    async def test_same_key_is_exclusive(self) -> None:
        locks = KeyedLock()
        order: list[str] = []

        async def worker(name: str) -> None:
            async with locks.acquire("u1"):
                order.append(f"{name}-in")
                await asyncio.sleep(0.01)
                order.append(f"{name}-out")

        await asyncio.gather(worker("a"), worker("b"))

        assert order == ["a-in", "a-out", "b-in", "b-out"]

    async def test_different_keys_run_concurrently(self) -> None:
        locks = KeyedLock()
        both_inside = asyncio.Event()
        inside = 0

        async def worker(key: str) -> None:
            nonlocal inside
            async with locks.acquire(key):
                inside += 1
                if inside == 2:
                    both_inside.set()
                await asyncio.wait_for(both_inside.wait(), timeout=1)

        await asyncio.gather(worker("u1"), worker("u2"))

        assert both_inside.is_set()

    async def test_released_locks_are_dropped(self) -> None:
        locks = KeyedLock()

        async with locks.acquire("u1"):
            assert locks.locked("u1")
            assert len(locks) == 1

        assert not locks.locked("u1")
        assert len(locks) == 0

    async def test_released_on_error(self) -> None:
        locks = KeyedLock()

        with pytest.raises(RuntimeError):
            async with locks.acquire("u1"):
                raise RuntimeError("boom")

        assert len(locks) == 0
