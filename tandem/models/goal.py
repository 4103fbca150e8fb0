"""
Goal Model for Tandem.

Goals are only consumed here: the planning wizard offers active goals as
suggestions for new tasks, and completing a linked task during review
advances the goal's progress.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum


class GoalStatus(StrEnum):
    ACTIVE = "ACTIVE"
    COMPLETED = "COMPLETED"
    EXPIRED = "EXPIRED"


@dataclass(frozen=True)
class Goal:
    id: str
    name: str
    owner_id: str
    current_progress: int = 0
    target: int | None = None
    icon: str = ""
    status: GoalStatus = GoalStatus.ACTIVE

    @property
    def is_active(self) -> bool:
        return self.status == GoalStatus.ACTIVE

    @property
    def progress_text(self) -> str:
        return f"{self.current_progress}/{self.target}" if self.target else str(self.current_progress)


__all__ = ["Goal", "GoalStatus"]
