"""
Helpers for the async-iterable observation contract used by the stores.

A store's ``observe_*`` method returns an async iterator that yields the
current value immediately and a fresh value after every change. Callers that
only need a snapshot take the first value and close the subscription.
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from typing import TypeVar

T = TypeVar("T")


async def first(stream: AsyncIterator[T]) -> T:
    """Return the first value of ``stream`` and unsubscribe."""
    try:
        async for value in stream:
            return value
    finally:
        aclose = getattr(stream, "aclose", None)
        if aclose is not None:
            await aclose()
    raise LookupError("stream ended without emitting a value")
