"""Tests for KeyedLock."""

import asyncio

from stockroom.core.services.keyed_lock import KeyedLock


class TestKeyedLock:
    async def test_same_key_is_serialized(self):
        locks = KeyedLock()
        order: list[str] = []

        async def worker(name: str):
            async with locks.acquire("m1"):
                order.append(f"{name}-start")
                await asyncio.sleep(0.01)
                order.append(f"{name}-end")

        await asyncio.gather(worker("a"), worker("b"))
        assert order in (
            ["a-start", "a-end", "b-start", "b-end"],
            ["b-start", "b-end", "a-start", "a-end"],
        )

    async def test_different_keys_run_concurrently(self):
        locks = KeyedLock()
        inside = asyncio.Event()

        async def holder():
            async with locks.acquire("a"):
                await inside.wait()

        task = asyncio.create_task(holder())
        await asyncio.sleep(0)
        async with locks.acquire("b"):
            assert locks.is_locked("a")
            inside.set()
        await task

    async def test_lock_dropped_after_release(self):
        locks = KeyedLock()
        async with locks.acquire("m1"):
            assert locks.is_locked("m1")
            assert len(locks) == 1
        assert not locks.is_locked("m1")
        assert len(locks) == 0

    async def test_lock_dropped_after_exception(self):
        locks = KeyedLock()
        try:
            async with locks.acquire("m1"):
                raise RuntimeError("boom")
        except RuntimeError:
            pass
        assert len(locks) == 0

    async def test_acquire_many_deduplicates(self):
        locks = KeyedLock()
        async with locks.acquire_many(["b", "a", "b"]):
            assert locks.is_locked("a")
            assert locks.is_locked("b")
            assert len(locks) == 2
        assert len(locks) == 0

    async def test_acquire_many_does_not_deadlock(self):
        locks = KeyedLock()

        async def forward():
            async with locks.acquire_many(["a", "b"]):
                await asyncio.sleep(0.01)

        async def backward():
            async with locks.acquire_many(["b", "a"]):
                await asyncio.sleep(0.01)

        await asyncio.wait_for(asyncio.gather(forward(), backward()), timeout=2)
