"""Per-key coalescing of concurrent async work.

Concurrent callers asking for the same key share one pending future instead
of each starting the same expensive operation (an upstream postal code
lookup, a bill classification). Only one process is covered; database
uniqueness constraints remain the cross-process guard.
"""

import asyncio
from collections.abc import Awaitable, Callable, Hashable
from typing import Any


class InFlightRegistry:
    """Registry of pending futures keyed by request identity."""

    def __init__(self, name: str = "inflight") -> None:
        self.name = name
        self._pending: dict[Hashable, asyncio.Future[Any]] = {}

    def __len__(self) -> int:
        return len(self._pending)

    def __contains__(self, key: Hashable) -> bool:
        return key in self._pending

    async def run(self, key: Hashable, factory: Callable[[], Awaitable[Any]]) -> Any:
        """Run ``factory`` for ``key`` unless a call for the same key is pending.

        Args:
            key: Identity of the work (e.g. a normalized postal code).
            factory: Zero-argument callable returning the awaitable to run.

        Returns:
            The result of the single shared call.

        Raises:
            Exception: Whatever the shared call raised, re-raised to every waiter.
        """
        future = self._pending.get(key)
        if future is None:
            future = asyncio.ensure_future(factory())
            self._pending[key] = future
            future.add_done_callback(lambda done, k=key: self._settle(k, done))
        # A cancelled waiter must not cancel the shared call for the others.
        return await asyncio.shield(future)

    def _settle(self, key: Hashable, future: asyncio.Future[Any]) -> None:
        if self._pending.get(key) is future:
            del self._pending[key]
        # Mark the exception retrieved when every waiter was cancelled.
        if not future.cancelled():
            future.exception()
