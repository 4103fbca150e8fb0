"""
Review Wizard State Machine and Data Structures.

Defines the wizard steps and modes, the events the hosting UI dispatches,
the in-memory UI state and the persisted checkpoint for the weekly review.

Reference: review.py (wizard)
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from enum import StrEnum

from pydantic import BaseModel, Field

from tandem.models.stats import ReviewStats
from tandem.models.streak import StreakResult
from tandem.models.task import Task, TaskStatus
from tandem.models.week import Week


# =============================================================================
# Review Steps and Modes
# =============================================================================

class ReviewStep(StrEnum):
    """Ordered wizard steps."""

    MODE_SELECT = "MODE_SELECT"
    RATING = "RATING"
    TASK_REVIEW = "TASK_REVIEW"
    SUMMARY = "SUMMARY"


class ReviewMode(StrEnum):
    SOLO = "SOLO"
    # Partners pass one device back and forth; only the hand-over prompt exists
    TOGETHER = "TOGETHER"


REACTION_EMOJI: frozenset[str] = frozenset({"👍", "❤️", "💪"})


def order_for_review(tasks: Iterable[Task]) -> tuple[Task, ...]:
    """Tasks needing a decision first, already COMPLETED ones last; each by creation time."""
    tasks = list(tasks)
    open_tasks = sorted((t for t in tasks if not t.is_completed), key=lambda t: t.created_at)
    done = sorted((t for t in tasks if t.is_completed), key=lambda t: t.created_at)
    return (*open_tasks, *done)


def restore_review_order(tasks: Iterable[Task], saved_order: Iterable[str]) -> tuple[Task, ...]:
    """
    Tasks in the order a checkpointed review showed them.

    Outcomes recorded before the interruption change task statuses, so
    ``order_for_review`` alone would move reviewed tasks and shift the saved
    index. Tasks missing from ``saved_order`` follow, ordered as usual; saved
    ids whose task is gone are dropped.
    """
    by_id = {task.id: task for task in tasks}
    shown = [by_id[task_id] for task_id in dict.fromkeys(saved_order) if task_id in by_id]
    shown_ids = {task.id for task in shown}
    rest = order_for_review(task for task in by_id.values() if task.id not in shown_ids)
    return (*shown, *rest)


# =============================================================================
# Review Events
# =============================================================================

class ReviewEvent:
    """Base class of every event the review wizard accepts."""


@dataclass(frozen=True)
class SelectMode(ReviewEvent):
    mode: ReviewMode


@dataclass(frozen=True)
class SelectRating(ReviewEvent):
    rating: int


@dataclass(frozen=True)
class UpdateRatingNote(ReviewEvent):
    note: str


@dataclass(frozen=True)
class ContinueToTasks(ReviewEvent):
    pass


@dataclass(frozen=True)
class QuickFinish(ReviewEvent):
    pass


@dataclass(frozen=True)
class SelectTaskOutcome(ReviewEvent):
    task_id: str
    status: TaskStatus


@dataclass(frozen=True)
class UpdateTaskNote(ReviewEvent):
    task_id: str
    note: str


@dataclass(frozen=True)
class NextTask(ReviewEvent):
    pass


@dataclass(frozen=True)
class PreviousTask(ReviewEvent):
    pass


@dataclass(frozen=True)
class CompleteReview(ReviewEvent):
    pass


@dataclass(frozen=True)
class StartNextWeek(ReviewEvent):
    pass


@dataclass(frozen=True)
class Done(ReviewEvent):
    pass


@dataclass(frozen=True)
class ResumeProgress(ReviewEvent):
    pass


@dataclass(frozen=True)
class DiscardProgress(ReviewEvent):
    pass


@dataclass(frozen=True)
class PassToPartner(ReviewEvent):
    pass


@dataclass(frozen=True)
class AddReaction(ReviewEvent):
    task_id: str
    emoji: str


@dataclass(frozen=True)
class DismissError(ReviewEvent):
    pass


@dataclass(frozen=True)
class Retry(ReviewEvent):
    pass


# =============================================================================
# Review UI State
# =============================================================================

@dataclass(frozen=True)
class ReviewState:
    """Snapshot of the review wizard; every event produces a new snapshot."""

    review_mode: ReviewMode = ReviewMode.SOLO
    current_step: ReviewStep = ReviewStep.MODE_SELECT

    week: Week | None = None
    is_review_window_open: bool = False

    # Rating step
    overall_rating: int | None = None
    overall_note: str = ""
    rating_error: str | None = None

    # Task review step
    tasks_to_review: tuple[Task, ...] = ()
    current_task_index: int = 0
    task_outcomes: Mapping[str, TaskStatus] = field(default_factory=dict)
    task_notes: Mapping[str, str] = field(default_factory=dict)

    # Summary
    stats: ReviewStats | None = None
    streak: StreakResult | None = None
    review_completed: bool = False

    is_loading: bool = True
    is_saving: bool = False
    error: str | None = None

    has_incomplete_progress: bool = False

    @property
    def current_task(self) -> Task | None:
        if 0 <= self.current_task_index < len(self.tasks_to_review):
            return self.tasks_to_review[self.current_task_index]
        return None

    @property
    def total_tasks(self) -> int:
        return len(self.tasks_to_review)

    @property
    def reviewed_task_count(self) -> int:
        return len(self.task_outcomes)

    @property
    def can_proceed_from_rating(self) -> bool:
        return self.overall_rating is not None

    @property
    def is_last_task(self) -> bool:
        return self.current_task_index >= len(self.tasks_to_review) - 1

    @property
    def done_count(self) -> int:
        return sum(1 for s in self.task_outcomes.values() if s == TaskStatus.COMPLETED)

    @property
    def tried_count(self) -> int:
        return sum(1 for s in self.task_outcomes.values() if s == TaskStatus.TRIED)

    @property
    def skipped_count(self) -> int:
        return sum(1 for s in self.task_outcomes.values() if s == TaskStatus.SKIPPED)

    @property
    def completion_percentage(self) -> int:
        return self.stats.completion_percentage if self.stats else 0

    @property
    def current_streak(self) -> int:
        return self.streak.count if self.streak else 0


# =============================================================================
# Review Checkpoint
# =============================================================================

class ReviewProgressState(BaseModel):
    """Persisted checkpoint of an in-flight review, keyed to ``week_id``."""

    week_id: str | None = None
    review_mode: ReviewMode = ReviewMode.SOLO
    current_step: ReviewStep = ReviewStep.MODE_SELECT
    overall_rating: int | None = Field(default=None, ge=1, le=5)
    overall_note: str = ""
    current_task_index: int = Field(default=0, ge=0)
    task_outcomes: dict[str, TaskStatus] = Field(default_factory=dict)
    task_notes: dict[str, str] = Field(default_factory=dict)
    task_order: list[str] = Field(default_factory=list)
    is_in_progress: bool = False
    last_updated_at: int = 0  # epoch milliseconds


__all__ = [
    "REACTION_EMOJI",
    "AddReaction",
    "CompleteReview",
    "ContinueToTasks",
    "DiscardProgress",
    "DismissError",
    "Done",
    "NextTask",
    "PassToPartner",
    "PreviousTask",
    "QuickFinish",
    "ResumeProgress",
    "Retry",
    "ReviewEvent",
    "ReviewMode",
    "ReviewProgressState",
    "ReviewState",
    "ReviewStep",
    "SelectMode",
    "SelectRating",
    "SelectTaskOutcome",
    "StartNextWeek",
    "UpdateRatingNote",
    "UpdateTaskNote",
    "order_for_review",
    "restore_review_order",
]
