"""
Store Protocols for Tandem.

These are the repository contracts the wizards and services consume. The
storage engine behind them (SQL database, sync backend, in-memory) is not
part of the contract. Every method may suspend; failures are raised as
StoreError.

Observation methods return an async iterator that yields the current value
immediately and again after every change. Consumers unsubscribe by closing
the iterator (``aclose``), e.g. through ``tandem.lib.streams.first``.
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from typing import Protocol

from tandem.models.goal import Goal
from tandem.models.stats import WeekWithStats
from tandem.models.task import Task, TaskStatus
from tandem.models.week import Week


class TaskStore(Protocol):
    """Keyed CRUD and reactive queries over tasks."""

    async def create(self, task: Task) -> Task:
        """Persist a new task. An empty ``task.id`` is replaced by a fresh id."""
        ...

    async def update_status(self, task_id: str, status: TaskStatus) -> Task | None:
        """Set a task's status; returns the updated task or None if unknown."""
        ...

    async def update_review_note(self, task_id: str, note: str | None) -> None:
        ...

    async def delete(self, task_id: str) -> bool:
        ...

    async def get_by_id(self, task_id: str) -> Task | None:
        ...

    def observe_for_week(self, week_id: str, owner_id: str) -> AsyncIterator[list[Task]]:
        ...

    def observe_by_status(self, status: TaskStatus, owner_id: str) -> AsyncIterator[list[Task]]:
        ...

    def observe_incomplete_for_week(self, week_id: str, owner_id: str) -> AsyncIterator[list[Task]]:
        """Tasks of the week whose status is not COMPLETED."""
        ...


class WeekStore(Protocol):
    """Weeks are keyed by (week id, owner id), created lazily and never deleted."""

    async def get_or_create_current(self, owner_id: str) -> Week:
        ...

    async def get_current_id(self) -> str:
        ...

    async def get_previous_id(self, week_id: str) -> str:
        ...

    async def get_by_id(self, week_id: str, owner_id: str) -> Week | None:
        ...

    async def mark_planning_completed(self, week_id: str, owner_id: str) -> None:
        ...

    async def update_review(
        self,
        week_id: str,
        owner_id: str,
        rating: int | None,
        note: str | None = None,
    ) -> None:
        """Persist rating/note and stamp ``reviewed_at``."""
        ...

    def observe_for_user(self, owner_id: str) -> AsyncIterator[list[Week]]:
        ...

    def observe_with_stats(self, owner_id: str) -> AsyncIterator[list[WeekWithStats]]:
        ...


class GoalStore(Protocol):
    async def get_active_suggestions(self, owner_id: str) -> list[Goal]:
        ...

    async def increment_progress(self, goal_id: str, amount: int) -> None:
        ...


class PartnerStore(Protocol):
    async def get_partner_id(self, user_id: str) -> str | None:
        """Connected partner's user id, or None when solo."""
        ...


__all__ = ["GoalStore", "PartnerStore", "TaskStore", "WeekStore"]
