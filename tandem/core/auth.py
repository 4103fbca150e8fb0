"""
Authentication context for Tandem.

Authentication flows live outside this package. The wizards only consume an
asynchronously resolved stream of auth states and wait for exactly one
authenticated identity before touching any store.
"""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator
from dataclasses import dataclass


@dataclass(frozen=True)
class AuthenticatedUser:
    """An authenticated user identity."""

    id: str
    display_name: str | None = None


class AuthContext:
    """Stream of auth states; ``None`` means signed out or still resolving.

    Hosts push new states with ``publish``; subscribers see the latest state
    first and every later change.
    """

    def __init__(self, user: AuthenticatedUser | None = None) -> None:
        self._current = user
        self._changed = asyncio.Condition()

    @property
    def current(self) -> AuthenticatedUser | None:
        return self._current

    async def publish(self, user: AuthenticatedUser | None) -> None:
        async with self._changed:
            self._current = user
            self._changed.notify_all()

    async def states(self) -> AsyncIterator[AuthenticatedUser | None]:
        """Yield the current state, then each subsequent one."""
        last: object = object()
        while True:
            async with self._changed:
                if self._current is last:
                    await self._changed.wait()
                last = self._current
            yield self._current

    async def await_authenticated(self) -> AuthenticatedUser:
        """Wait until an authenticated user is available and return it."""
        states = self.states()
        try:
            async for state in states:
                if state is not None:
                    return state
        finally:
            await states.aclose()
        raise RuntimeError("auth stream ended")


__all__ = ["AuthContext", "AuthenticatedUser"]
