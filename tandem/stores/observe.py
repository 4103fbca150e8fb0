"""
Change notification for observed store queries.

Writers call ``notify`` after committing; every open ``watch`` re-runs its
snapshot query and yields the fresh value. Rapid writes may coalesce into a
single emission.
"""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator, Awaitable, Callable
from typing import TypeVar

T = TypeVar("T")


class ChangeNotifier:
    """Version counter with waiters, shared by a store's observers."""

    def __init__(self) -> None:
        self._version = 0
        self._changed = asyncio.Condition()

    async def notify(self) -> None:
        async with self._changed:
            self._version += 1
            self._changed.notify_all()

    async def watch(self, snapshot: Callable[[], Awaitable[T]]) -> AsyncIterator[T]:
        """Yield ``snapshot()`` now and after every subsequent change."""
        seen = -1
        while True:
            async with self._changed:
                await self._changed.wait_for(lambda: self._version != seen)
                seen = self._version
            yield await snapshot()


__all__ = ["ChangeNotifier"]
