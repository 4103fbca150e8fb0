"""
Task Model for Tandem.

A task belongs to exactly one week and one owner. Any status may transition
to any other status at this layer; which transitions are allowed is a caller
policy (the review wizard, for instance, only records COMPLETED, TRIED or
SKIPPED).

Attributes:
    id: Store-assigned identifier
    title: Task title (user content, never logged)
    owner_id: User the task belongs to
    week_id: ISO week identifier ("YYYY-Www")
    status: Lifecycle status
    created_by: User who created the task (differs from owner for partner requests)
    notes: Optional free-form notes
    priority: P1 (highest) .. P4 (default)
    labels: Free-form labels
    linked_goal_id: Goal this task contributes to (lookup only)
    rolled_from_week_id: Week the task was carried over from (lookup only)
    review_note: Note captured during the weekly review
    request_note: Note attached by the partner when requesting the task
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import UTC, datetime
from enum import StrEnum


class TaskStatus(StrEnum):
    """Lifecycle of a task."""

    PENDING = "PENDING"
    PENDING_ACCEPTANCE = "PENDING_ACCEPTANCE"
    COMPLETED = "COMPLETED"
    TRIED = "TRIED"
    SKIPPED = "SKIPPED"
    DECLINED = "DECLINED"


# Outcomes the review wizard may record.
REVIEW_OUTCOMES: frozenset[TaskStatus] = frozenset(
    {TaskStatus.COMPLETED, TaskStatus.TRIED, TaskStatus.SKIPPED}
)

# Statuses that roll forward into the next week.
ROLLOVER_ELIGIBLE: frozenset[TaskStatus] = frozenset(
    {TaskStatus.PENDING, TaskStatus.PENDING_ACCEPTANCE}
)


class TaskPriority(StrEnum):
    P1 = "P1"
    P2 = "P2"
    P3 = "P3"
    P4 = "P4"


def _now() -> datetime:
    return datetime.now(UTC)


@dataclass(frozen=True)
class Task:
    """Immutable task snapshot; stores return updated copies."""

    id: str
    title: str
    owner_id: str
    week_id: str
    status: TaskStatus = TaskStatus.PENDING
    created_by: str | None = None
    notes: str | None = None
    priority: TaskPriority = TaskPriority.P4
    labels: tuple[str, ...] = ()
    linked_goal_id: str | None = None
    rolled_from_week_id: str | None = None
    review_note: str | None = None
    request_note: str | None = None
    created_at: datetime = field(default_factory=_now)
    updated_at: datetime = field(default_factory=_now)

    @property
    def is_completed(self) -> bool:
        return self.status == TaskStatus.COMPLETED

    @property
    def is_pending_acceptance(self) -> bool:
        return self.status == TaskStatus.PENDING_ACCEPTANCE

    @property
    def is_partner_request(self) -> bool:
        return self.created_by is not None and self.created_by != self.owner_id

    def with_status(self, status: TaskStatus) -> Task:
        return replace(self, status=status, updated_at=_now())

    def with_review_note(self, note: str | None) -> Task:
        return replace(self, review_note=note, updated_at=_now())

    def __repr__(self) -> str:
        return f"<Task(id={self.id}, owner_id={self.owner_id}, week_id={self.week_id}, status={self.status})>"


__all__ = ["REVIEW_OUTCOMES", "ROLLOVER_ELIGIBLE", "Task", "TaskPriority", "TaskStatus"]
