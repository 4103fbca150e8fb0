"""
Week Model for Tandem.

A week is created lazily the first time a user touches it ("get or create"),
is mutated by planning (planning_completed_at) and review (reviewed_at,
overall_rating, review_note), and is never deleted.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime

from tandem.lib.exceptions import ContractViolation


@dataclass(frozen=True)
class Week:
    """A Monday-Sunday calendar week for one user."""

    id: str
    start_date: date
    end_date: date
    owner_id: str
    overall_rating: int | None = None
    review_note: str | None = None
    reviewed_at: datetime | None = None
    planning_completed_at: datetime | None = None

    def __post_init__(self) -> None:
        if self.overall_rating is not None and not 1 <= self.overall_rating <= 5:
            raise ContractViolation(f"overall_rating must be 1..5, got {self.overall_rating}")

    @property
    def is_reviewed(self) -> bool:
        return self.reviewed_at is not None

    @property
    def is_planning_complete(self) -> bool:
        return self.planning_completed_at is not None


__all__ = ["Week"]
