"""
Cancellable debounce timer.

Each call to ``schedule`` cancels the previously pending action and starts a
new quiet period; only an action whose quiet period elapses runs. Once an
action has started it is never interrupted: a later ``schedule`` or
``cancel`` only drops actions still waiting out their quiet period, and
``cancel`` waits for started actions to finish (used on wizard teardown so
no write is cut off and none starts after close).

Usage:
    debouncer = Debouncer(delay=0.5, name="task_note")
    debouncer.schedule(lambda: store.update_review_note(task_id, note))
    ...
    await debouncer.cancel()
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable

logger = logging.getLogger(__name__)

Action = Callable[[], Awaitable[None]]


class Debouncer:
    """Coalesces rapid calls into a single deferred async action."""

    def __init__(self, delay: float, name: str = "debounce") -> None:
        self._delay = delay
        self._name = name
        self._timer: asyncio.Task[None] | None = None
        self._running: set[asyncio.Task[None]] = set()

    @property
    def pending(self) -> bool:
        """True from ``schedule`` until the scheduled action has finished or was dropped."""
        return self._timer is not None and not self._timer.done()

    @property
    def running(self) -> bool:
        """True while a started action has not finished."""
        return bool(self._running)

    def schedule(self, action: Action) -> None:
        """Drop any waiting action and schedule ``action`` after the delay."""
        timer = self._timer
        if timer is not None and not timer.done():
            timer.cancel()
        self._timer = asyncio.get_running_loop().create_task(
            self._wait_then_start(action), name=f"debounce:{self._name}",
        )

    async def _wait_then_start(self, action: Action) -> None:
        await asyncio.sleep(self._delay)
        run = asyncio.ensure_future(action())
        self._running.add(run)
        run.add_done_callback(self._running.discard)
        # Shielded: cancelling the timer from here on leaves the action running.
        await asyncio.shield(run)

    async def cancel(self) -> None:
        """Drop the waiting action, if any, and let started actions finish."""
        timer, self._timer = self._timer, None
        if timer is not None and not timer.done():
            timer.cancel()
            try:
                await timer
            except asyncio.CancelledError:
                logger.debug("debounce_cancelled name=%s", self._name)
        if self._running:
            await asyncio.wait(set(self._running))

    async def wait(self) -> None:
        """Wait for the scheduled action to run (test and flush helper)."""
        if self._timer is not None:
            await asyncio.shield(self._timer)
