"""
Streak result value object.

Milestones are the closed, ascending set {5, 10, 20, 50}. Any other value in
a milestone position is a contract violation.
"""

from __future__ import annotations

from dataclasses import dataclass

from tandem.lib.exceptions import ContractViolation

MILESTONES: tuple[int, ...] = (5, 10, 20, 50)

# 0 means "nothing celebrated yet".
CELEBRATED_VALUES: frozenset[int] = frozenset({0, *MILESTONES})


def require_milestone(value: int) -> int:
    if value not in MILESTONES:
        raise ContractViolation(f"Milestone must be one of {MILESTONES}, got {value}")
    return value


@dataclass(frozen=True)
class StreakResult:
    """Current streak with partner flag and an uncelebrated milestone, if any."""

    count: int
    is_partner_streak: bool = False
    pending_milestone: int | None = None

    def __post_init__(self) -> None:
        if self.count < 0:
            raise ContractViolation("Streak count cannot be negative")
        if self.pending_milestone is not None:
            require_milestone(self.pending_milestone)


EMPTY_STREAK = StreakResult(count=0)

__all__ = [
    "CELEBRATED_VALUES",
    "EMPTY_STREAK",
    "MILESTONES",
    "StreakResult",
    "require_milestone",
]
