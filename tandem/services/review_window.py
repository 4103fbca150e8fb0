"""
Review window: Friday 18:00 through the end of Sunday, local time.

Informational only. The review wizard exposes it but never blocks on it.
"""

from __future__ import annotations

from datetime import datetime, time

FRIDAY = 4
SATURDAY = 5
SUNDAY = 6
WINDOW_OPENS = time(18, 0)


def is_review_window_open(now: datetime | None = None) -> bool:
    now = now or datetime.now()
    weekday = now.weekday()
    if weekday == FRIDAY:
        return now.time() >= WINDOW_OPENS
    return weekday in (SATURDAY, SUNDAY)


__all__ = ["is_review_window_open"]
