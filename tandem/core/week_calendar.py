"""
Week Calendar for Tandem.

Converts calendar dates to and from the canonical ISO-8601 week identifier
("YYYY-Www"), computes week boundaries and orders identifiers.

ISO rules:
- Weeks start on Monday.
- Week 1 is the week containing the year's first Thursday, so late-December
  dates may belong to week 1 of the next year and early-January dates to the
  last week of the previous year.
- A year has 53 weeks when Jan 1 or Dec 31 falls on a Thursday.

Malformed identifiers raise ContractViolation; they are never coerced.
"""

from __future__ import annotations

import re
from datetime import date, timedelta
from enum import Enum

from tandem.lib.exceptions import ContractViolation

WeekId = str

_WEEK_ID_RE = re.compile(r"^(\d{4})-W(\d{2})$")


class Ordering(Enum):
    """Result of comparing two week identifiers."""

    BEFORE = -1
    EQUAL = 0
    AFTER = 1


def weeks_in_year(year: int) -> int:
    """Number of ISO weeks (52 or 53) in ``year``."""
    thursday = 4
    if date(year, 1, 1).isoweekday() == thursday or date(year, 12, 31).isoweekday() == thursday:
        return 53
    return 52


def parse_week_id(week_id: WeekId) -> tuple[int, int]:
    """
    Split a week identifier into (iso_year, iso_week).

    Raises:
        ContractViolation: if the identifier is malformed or names a week
            that does not exist in that year
    """
    if not isinstance(week_id, str):
        raise ContractViolation(f"Week id must be a string, got {type(week_id).__name__}")
    match = _WEEK_ID_RE.match(week_id)
    if match is None:
        raise ContractViolation(f"Malformed week id: {week_id!r}")
    year, week = int(match.group(1)), int(match.group(2))
    if year < 1 or not 1 <= week <= weeks_in_year(year):
        raise ContractViolation(f"Week {week} does not exist in {year}: {week_id!r}")
    return year, week


def format_week_id(year: int, week: int) -> WeekId:
    return f"{year:04d}-W{week:02d}"


def week_id_for(day: date) -> WeekId:
    """ISO week identifier containing ``day``."""
    iso = day.isocalendar()
    return format_week_id(iso.year, iso.week)


def week_bounds(week_id: WeekId) -> tuple[date, date]:
    """(Monday, Sunday) of the week."""
    year, week = parse_week_id(week_id)
    start = date.fromisocalendar(year, week, 1)
    return start, start + timedelta(days=6)


def week_label(week_id: WeekId) -> str:
    """Short label for charts ("2026-W01" -> "W01")."""
    parse_week_id(week_id)
    return week_id.split("-", 1)[1]


def compare(a: WeekId, b: WeekId) -> Ordering:
    """Order two week identifiers (zero-padded ids order lexicographically)."""
    parse_week_id(a)
    parse_week_id(b)
    if a < b:
        return Ordering.BEFORE
    if a > b:
        return Ordering.AFTER
    return Ordering.EQUAL


def is_after(a: WeekId, b: WeekId) -> bool:
    return compare(a, b) is Ordering.AFTER


def is_before_or_equal(a: WeekId, b: WeekId) -> bool:
    return compare(a, b) is not Ordering.AFTER


def add_weeks(week_id: WeekId, n: int) -> WeekId:
    """Week identifier ``n`` weeks after (or before, when negative) ``week_id``."""
    start, _ = week_bounds(week_id)
    return week_id_for(start + timedelta(weeks=n))


def previous_week_id(week_id: WeekId) -> WeekId:
    return add_weeks(week_id, -1)


def current_week_id(today: date | None = None) -> WeekId:
    return week_id_for(today or date.today())


__all__ = [
    "Ordering",
    "WeekId",
    "add_weeks",
    "compare",
    "current_week_id",
    "format_week_id",
    "is_after",
    "is_before_or_equal",
    "parse_week_id",
    "previous_week_id",
    "week_bounds",
    "week_id_for",
    "week_label",
    "weeks_in_year",
]
