"""
SQLAlchemy table mappings for the SQL-backed stores.

The rows are persistence details; the rest of the package works with the
immutable domain dataclasses (Task, Week, Goal). Conversion happens in
``to_domain`` / ``from_domain``.
"""

from __future__ import annotations

import json
from datetime import UTC, datetime

from sqlalchemy import Column, Date, DateTime, Index, Integer, String, Text

from tandem.models.base import Base
from tandem.models.goal import Goal, GoalStatus
from tandem.models.task import Task, TaskPriority, TaskStatus
from tandem.models.week import Week


def _aware(value: datetime | None) -> datetime | None:
    # SQLite drops tzinfo; stored values are always UTC.
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value


class TaskRow(Base):
    """
    Task table.

    Attributes:
        id: Primary key (uuid string)
        owner_id / created_by: User ids
        week_id: ISO week identifier
        status: TaskStatus value
        labels: JSON-encoded list of labels
        rolled_from_week_id: Provenance for rolled-over tasks
    """

    __tablename__ = "tasks"

    id = Column(String(36), primary_key=True)
    title = Column(Text, nullable=False)
    notes = Column(Text, nullable=True)
    owner_id = Column(String(64), nullable=False, index=True)
    created_by = Column(String(64), nullable=True)
    week_id = Column(String(8), nullable=False)
    status = Column(String(20), nullable=False, default=TaskStatus.PENDING.value)
    priority = Column(String(2), nullable=False, default=TaskPriority.P4.value)
    labels = Column(Text, nullable=False, default="[]")
    linked_goal_id = Column(String(36), nullable=True)
    rolled_from_week_id = Column(String(8), nullable=True)
    review_note = Column(Text, nullable=True)
    request_note = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(UTC))
    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(UTC),
        onupdate=lambda: datetime.now(UTC),
    )

    __table_args__ = (
        Index("idx_task_owner_week", "owner_id", "week_id"),
        Index("idx_task_owner_status", "owner_id", "status"),
    )

    def to_domain(self) -> Task:
        return Task(
            id=str(self.id),
            title=str(self.title),
            notes=self.notes,
            owner_id=str(self.owner_id),
            created_by=self.created_by,
            week_id=str(self.week_id),
            status=TaskStatus(self.status),
            priority=TaskPriority(self.priority),
            labels=tuple(json.loads(self.labels or "[]")),
            linked_goal_id=self.linked_goal_id,
            rolled_from_week_id=self.rolled_from_week_id,
            review_note=self.review_note,
            request_note=self.request_note,
            created_at=_aware(self.created_at),
            updated_at=_aware(self.updated_at),
        )

    @classmethod
    def from_domain(cls, task: Task) -> TaskRow:
        return cls(
            id=task.id,
            title=task.title,
            notes=task.notes,
            owner_id=task.owner_id,
            created_by=task.created_by,
            week_id=task.week_id,
            status=task.status.value,
            priority=task.priority.value,
            labels=json.dumps(list(task.labels)),
            linked_goal_id=task.linked_goal_id,
            rolled_from_week_id=task.rolled_from_week_id,
            review_note=task.review_note,
            request_note=task.request_note,
            created_at=task.created_at,
            updated_at=task.updated_at,
        )

    def __repr__(self) -> str:
        return f"<TaskRow(id={self.id}, owner_id={self.owner_id}, week_id={self.week_id}, status={self.status})>"


class WeekRow(Base):
    """Week table; one row per (week id, owner)."""

    __tablename__ = "weeks"

    id = Column(String(8), primary_key=True)
    owner_id = Column(String(64), primary_key=True)
    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=False)
    overall_rating = Column(Integer, nullable=True)  # 1-5
    review_note = Column(Text, nullable=True)
    reviewed_at = Column(DateTime(timezone=True), nullable=True)
    planning_completed_at = Column(DateTime(timezone=True), nullable=True)

    def to_domain(self) -> Week:
        return Week(
            id=str(self.id),
            owner_id=str(self.owner_id),
            start_date=self.start_date,
            end_date=self.end_date,
            overall_rating=self.overall_rating,
            review_note=self.review_note,
            reviewed_at=_aware(self.reviewed_at),
            planning_completed_at=_aware(self.planning_completed_at),
        )


class GoalRow(Base):
    """Goal table (read for suggestions, progress incremented on completion)."""

    __tablename__ = "goals"

    id = Column(String(36), primary_key=True)
    owner_id = Column(String(64), nullable=False, index=True)
    name = Column(Text, nullable=False)
    icon = Column(String(16), nullable=False, default="")
    current_progress = Column(Integer, nullable=False, default=0)
    target = Column(Integer, nullable=True)
    status = Column(String(20), nullable=False, default=GoalStatus.ACTIVE.value)

    def to_domain(self) -> Goal:
        return Goal(
            id=str(self.id),
            owner_id=str(self.owner_id),
            name=str(self.name),
            icon=str(self.icon or ""),
            current_progress=int(self.current_progress or 0),
            target=self.target,
            status=GoalStatus(self.status),
        )


__all__ = ["GoalRow", "TaskRow", "WeekRow"]
