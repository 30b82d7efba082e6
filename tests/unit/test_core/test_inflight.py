"""Tests for per-key coalescing of concurrent async work."""

import asyncio

import pytest

from mp_api.core.inflight import InFlightRegistry


class TestInFlightRegistry:
    @pytest.mark.asyncio
    async def test_concurrent_calls_share_one_execution(self) -> None:
        registry = InFlightRegistry("test")
        calls = 0
        release = asyncio.Event()

        async def work() -> str:
            nonlocal calls
            calls += 1
            await release.wait()
            return "Oakville East"

        waiters = [asyncio.create_task(registry.run("L6H0A1", work)) for _ in range(5)]
        await asyncio.sleep(0)
        assert "L6H0A1" in registry
        assert len(registry) == 1

        release.set()
        results = await asyncio.gather(*waiters)

        assert results == ["Oakville East"] * 5
        assert calls == 1
        assert len(registry) == 0

    @pytest.mark.asyncio
    async def test_different_keys_run_independently(self) -> None:
        registry = InFlightRegistry()
        seen: list[str] = []

        async def work(key: str) -> str:
            seen.append(key)
            return key.lower()

        results = await asyncio.gather(
            registry.run("A", lambda: work("A")),
            registry.run("B", lambda: work("B")),
        )

        assert results == ["a", "b"]
        assert sorted(seen) == ["A", "B"]

    @pytest.mark.asyncio
    async def test_exception_reaches_every_waiter_and_entry_is_removed(self) -> None:
        registry = InFlightRegistry()
        calls = 0
        release = asyncio.Event()

        async def failing() -> None:
            nonlocal calls
            calls += 1
            await release.wait()
            msg = "upstream down"
            raise RuntimeError(msg)

        waiters = [asyncio.create_task(registry.run("K1A0A6", failing)) for _ in range(3)]
        await asyncio.sleep(0)
        release.set()
        results = await asyncio.gather(*waiters, return_exceptions=True)

        assert calls == 1
        assert all(isinstance(r, RuntimeError) for r in results)
        assert "K1A0A6" not in registry

    @pytest.mark.asyncio
    async def test_sequential_calls_run_again(self) -> None:
        registry = InFlightRegistry()
        calls = 0

        async def work() -> int:
            nonlocal calls
            calls += 1
            return calls

        assert await registry.run("key", work) == 1
        assert await registry.run("key", work) == 2

    @pytest.mark.asyncio
    async def test_cancelled_waiter_does_not_cancel_shared_call(self) -> None:
        registry = InFlightRegistry()
        release = asyncio.Event()

        async def work() -> str:
            await release.wait()
            return "done"

        first = asyncio.create_task(registry.run("key", work))
        second = asyncio.create_task(registry.run("key", work))
        await asyncio.sleep(0)

        first.cancel()
        release.set()

        assert await second == "done"
        with pytest.raises(asyncio.CancelledError):
            await first
