"""
Completion statistics value objects.

Only COMPLETED counts toward completion. TRIED and SKIPPED are recorded but
count as incomplete (celebration over judgment). Percentages use integer
truncation.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from tandem.lib.exceptions import ContractViolation
from tandem.models.week import Week


def _percentage(part: int, whole: int) -> int:
    return (part * 100) // whole if whole > 0 else 0


@dataclass(frozen=True)
class CompletionStats:
    """Completed vs. total tasks for a week/user."""

    completed_count: int
    total_count: int

    def __post_init__(self) -> None:
        if self.completed_count < 0:
            raise ContractViolation("completed_count cannot be negative")
        if self.total_count < 0:
            raise ContractViolation("total_count cannot be negative")
        if self.completed_count > self.total_count:
            raise ContractViolation("completed_count cannot exceed total_count")

    @property
    def percentage(self) -> int:
        return _percentage(self.completed_count, self.total_count)

    @property
    def display_text(self) -> str:
        """Completion ratio for display, e.g. "6/8"."""
        return f"{self.completed_count}/{self.total_count}"


EMPTY_COMPLETION_STATS = CompletionStats(completed_count=0, total_count=0)


@dataclass(frozen=True)
class ReviewStats:
    """Outcome tallies for a finished (or quick-finished) review."""

    total_tasks: int
    done_count: int
    tried_count: int
    skipped_count: int

    @property
    def completion_percentage(self) -> int:
        return _percentage(self.done_count, self.total_tasks)


@dataclass(frozen=True)
class WeekWithStats:
    """A week with its task counts, for timeline display."""

    week: Week
    total_tasks: int
    completed_tasks: int

    @property
    def completion_ratio(self) -> float:
        return self.completed_tasks / self.total_tasks if self.total_tasks > 0 else 0.0

    @property
    def completion_percentage(self) -> int:
        return _percentage(self.completed_tasks, self.total_tasks)

    @property
    def is_empty(self) -> bool:
        return self.total_tasks == 0


@dataclass(frozen=True)
class TrendPoint:
    week_id: str
    week_label: str
    user_percentage: int
    partner_percentage: int | None = None


@dataclass(frozen=True)
class TrendChartData:
    points: list[TrendPoint] = field(default_factory=list)
    has_partner: bool = False

    # Fewer than this many points is not enough to draw a meaningful trend.
    MIN_POINTS = 4

    @property
    def insufficient_data(self) -> bool:
        return len(self.points) < self.MIN_POINTS


__all__ = [
    "EMPTY_COMPLETION_STATS",
    "CompletionStats",
    "ReviewStats",
    "TrendChartData",
    "TrendPoint",
    "WeekWithStats",
]
