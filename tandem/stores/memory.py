"""
In-memory store implementations.

Reference implementations of the store protocols for tests and single-process
embedding. They honour the same contracts as the SQL stores, including
reactive observation.
"""

from __future__ import annotations

import uuid
from collections.abc import AsyncIterator, Callable
from dataclasses import replace
from datetime import UTC, date, datetime

from tandem.core import week_calendar
from tandem.models.goal import Goal
from tandem.models.stats import WeekWithStats
from tandem.models.task import Task, TaskStatus
from tandem.models.week import Week
from tandem.stores.observe import ChangeNotifier


def _utcnow() -> datetime:
    return datetime.now(UTC)


class InMemoryTaskStore:
    """Task store backed by a dict."""

    def __init__(self, tasks: list[Task] | None = None) -> None:
        self._tasks: dict[str, Task] = {task.id: task for task in tasks or []}
        self._changes = ChangeNotifier()

    async def create(self, task: Task) -> Task:
        created = task if task.id else replace(task, id=str(uuid.uuid4()))
        self._tasks[created.id] = created
        await self._changes.notify()
        return created

    async def update_status(self, task_id: str, status: TaskStatus) -> Task | None:
        task = self._tasks.get(task_id)
        if task is None:
            return None
        updated = task.with_status(status)
        self._tasks[task_id] = updated
        await self._changes.notify()
        return updated

    async def update_review_note(self, task_id: str, note: str | None) -> None:
        task = self._tasks.get(task_id)
        if task is None:
            return
        self._tasks[task_id] = task.with_review_note(note)
        await self._changes.notify()

    async def delete(self, task_id: str) -> bool:
        removed = self._tasks.pop(task_id, None) is not None
        if removed:
            await self._changes.notify()
        return removed

    async def get_by_id(self, task_id: str) -> Task | None:
        return self._tasks.get(task_id)

    def _select(self, predicate: Callable[[Task], bool]) -> AsyncIterator[list[Task]]:
        async def snapshot() -> list[Task]:
            return sorted(
                (task for task in self._tasks.values() if predicate(task)),
                key=lambda task: task.created_at,
            )

        return self._changes.watch(snapshot)

    def observe_for_week(self, week_id: str, owner_id: str) -> AsyncIterator[list[Task]]:
        return self._select(lambda t: t.week_id == week_id and t.owner_id == owner_id)

    def observe_by_status(self, status: TaskStatus, owner_id: str) -> AsyncIterator[list[Task]]:
        return self._select(lambda t: t.status == status and t.owner_id == owner_id)

    def observe_incomplete_for_week(self, week_id: str, owner_id: str) -> AsyncIterator[list[Task]]:
        return self._select(
            lambda t: t.week_id == week_id
            and t.owner_id == owner_id
            and t.status != TaskStatus.COMPLETED
        )

    def tasks_for_week(self, week_id: str, owner_id: str) -> list[Task]:
        """Synchronous snapshot, used for week statistics."""
        return [t for t in self._tasks.values() if t.week_id == week_id and t.owner_id == owner_id]


class InMemoryWeekStore:
    """Week store backed by a dict keyed by (week id, owner id)."""

    def __init__(
        self,
        weeks: list[Week] | None = None,
        task_store: InMemoryTaskStore | None = None,
        today: Callable[[], date] = date.today,
        now: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._weeks: dict[tuple[str, str], Week] = {(w.id, w.owner_id): w for w in weeks or []}
        self._task_store = task_store
        self._today = today
        self._now = now
        self._changes = ChangeNotifier()

    async def get_or_create_current(self, owner_id: str) -> Week:
        week_id = await self.get_current_id()
        week = self._weeks.get((week_id, owner_id))
        if week is None:
            start, end = week_calendar.week_bounds(week_id)
            week = Week(id=week_id, start_date=start, end_date=end, owner_id=owner_id)
            self._weeks[(week_id, owner_id)] = week
            await self._changes.notify()
        return week

    async def get_current_id(self) -> str:
        return week_calendar.current_week_id(self._today())

    async def get_previous_id(self, week_id: str) -> str:
        return week_calendar.previous_week_id(week_id)

    async def get_by_id(self, week_id: str, owner_id: str) -> Week | None:
        return self._weeks.get((week_id, owner_id))

    async def _update(self, week_id: str, owner_id: str, **changes: object) -> None:
        week = self._weeks.get((week_id, owner_id))
        if week is None:
            start, end = week_calendar.week_bounds(week_id)
            week = Week(id=week_id, start_date=start, end_date=end, owner_id=owner_id)
        self._weeks[(week_id, owner_id)] = replace(week, **changes)  # type: ignore[arg-type]
        await self._changes.notify()

    async def mark_planning_completed(self, week_id: str, owner_id: str) -> None:
        await self._update(week_id, owner_id, planning_completed_at=self._now())

    async def update_review(
        self,
        week_id: str,
        owner_id: str,
        rating: int | None,
        note: str | None = None,
    ) -> None:
        await self._update(
            week_id, owner_id, overall_rating=rating, review_note=note, reviewed_at=self._now(),
        )

    def observe_for_user(self, owner_id: str) -> AsyncIterator[list[Week]]:
        async def snapshot() -> list[Week]:
            return sorted(
                (w for w in self._weeks.values() if w.owner_id == owner_id),
                key=lambda w: w.id,
                reverse=True,
            )

        return self._changes.watch(snapshot)

    def observe_with_stats(self, owner_id: str) -> AsyncIterator[list[WeekWithStats]]:
        async def snapshot() -> list[WeekWithStats]:
            result = []
            for week in sorted(
                (w for w in self._weeks.values() if w.owner_id == owner_id),
                key=lambda w: w.id,
                reverse=True,
            ):
                tasks = self._task_store.tasks_for_week(week.id, owner_id) if self._task_store else []
                result.append(
                    WeekWithStats(
                        week=week,
                        total_tasks=len(tasks),
                        completed_tasks=sum(1 for t in tasks if t.is_completed),
                    )
                )
            return result

        return self._changes.watch(snapshot)


class InMemoryGoalStore:
    def __init__(self, goals: list[Goal] | None = None) -> None:
        self._goals: dict[str, Goal] = {goal.id: goal for goal in goals or []}

    async def get_active_suggestions(self, owner_id: str) -> list[Goal]:
        return [g for g in self._goals.values() if g.owner_id == owner_id and g.is_active]

    async def increment_progress(self, goal_id: str, amount: int) -> None:
        goal = self._goals.get(goal_id)
        if goal is not None:
            self._goals[goal_id] = replace(goal, current_progress=goal.current_progress + amount)

    async def get_by_id(self, goal_id: str) -> Goal | None:
        return self._goals.get(goal_id)


class InMemoryPartnerStore:
    """Symmetric partner links."""

    def __init__(self, pairs: list[tuple[str, str]] | None = None) -> None:
        self._partners: dict[str, str] = {}
        for a, b in pairs or []:
            self.connect(a, b)

    def connect(self, user_id: str, partner_id: str) -> None:
        self._partners[user_id] = partner_id
        self._partners[partner_id] = user_id

    async def get_partner_id(self, user_id: str) -> str | None:
        return self._partners.get(user_id)


__all__ = [
    "InMemoryGoalStore",
    "InMemoryPartnerStore",
    "InMemoryTaskStore",
    "InMemoryWeekStore",
]
