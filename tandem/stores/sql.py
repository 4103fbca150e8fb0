"""
SQLAlchemy (async) store implementations.

Each store owns an ``async_sessionmaker`` and opens one session per call.
Domain snapshots are taken before commit; sessions from
``create_session_factory`` also keep loaded rows after commit.
Any SQLAlchemyError is re-raised as StoreError so the wizards can surface it
as a transient message. Observation re-queries after every write made
through the same store instance; writes made by other processes are picked
up by the external sync collaborator, not here.
"""

from __future__ import annotations

import logging
import uuid
from collections.abc import AsyncIterator, Callable
from dataclasses import replace
from datetime import UTC, date, datetime

from sqlalchemy import case, func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from tandem.config.settings import get_settings
from tandem.core import week_calendar
from tandem.lib.exceptions import StoreError
from tandem.models.base import Base
from tandem.models.goal import Goal, GoalStatus
from tandem.models.stats import WeekWithStats
from tandem.models.tables import GoalRow, TaskRow, WeekRow
from tandem.models.task import Task, TaskStatus
from tandem.models.week import Week
from tandem.stores.observe import ChangeNotifier

logger = logging.getLogger(__name__)


def create_session_factory(
    database_url: str | None = None,
) -> tuple[AsyncEngine, async_sessionmaker[AsyncSession]]:
    """Engine and session factory for ``database_url`` (default: TANDEM_DATABASE_URL)."""
    engine = create_async_engine(database_url or get_settings().database_url)
    return engine, async_sessionmaker(engine, expire_on_commit=False)


async def create_schema(engine: AsyncEngine) -> None:
    """Create the tasks/weeks/goals tables if they do not exist."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


class _SqlStore:
    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory
        self._changes = ChangeNotifier()

    def _failed(self, operation: str, error: SQLAlchemyError) -> StoreError:
        logger.warning("store_operation_failed store=%s op=%s error=%s",
                       type(self).__name__, operation, type(error).__name__)
        return StoreError(f"{operation} failed")


class SqlTaskStore(_SqlStore):
    """TaskStore over the ``tasks`` table."""

    async def create(self, task: Task) -> Task:
        created = task if task.id else replace(task, id=str(uuid.uuid4()))
        try:
            async with self._session_factory() as session:
                session.add(TaskRow.from_domain(created))
                await session.commit()
        except SQLAlchemyError as e:
            raise self._failed("create_task", e) from e
        await self._changes.notify()
        return created

    async def update_status(self, task_id: str, status: TaskStatus) -> Task | None:
        try:
            async with self._session_factory() as session:
                row = await session.get(TaskRow, task_id)
                if row is None:
                    return None
                row.status = status.value
                row.updated_at = datetime.now(UTC)
                updated = row.to_domain()
                await session.commit()
        except SQLAlchemyError as e:
            raise self._failed("update_task_status", e) from e
        await self._changes.notify()
        return updated

    async def update_review_note(self, task_id: str, note: str | None) -> None:
        try:
            async with self._session_factory() as session:
                row = await session.get(TaskRow, task_id)
                if row is None:
                    return
                row.review_note = note
                row.updated_at = datetime.now(UTC)
                await session.commit()
        except SQLAlchemyError as e:
            raise self._failed("update_review_note", e) from e
        await self._changes.notify()

    async def delete(self, task_id: str) -> bool:
        try:
            async with self._session_factory() as session:
                row = await session.get(TaskRow, task_id)
                if row is None:
                    return False
                await session.delete(row)
                await session.commit()
        except SQLAlchemyError as e:
            raise self._failed("delete_task", e) from e
        await self._changes.notify()
        return True

    async def get_by_id(self, task_id: str) -> Task | None:
        try:
            async with self._session_factory() as session:
                row = await session.get(TaskRow, task_id)
                return row.to_domain() if row is not None else None
        except SQLAlchemyError as e:
            raise self._failed("get_task", e) from e

    def _select(self, *criteria: object) -> AsyncIterator[list[Task]]:
        stmt = select(TaskRow).where(*criteria).order_by(TaskRow.created_at)  # type: ignore[arg-type]

        async def snapshot() -> list[Task]:
            try:
                async with self._session_factory() as session:
                    result = await session.execute(stmt)
                    return [row.to_domain() for row in result.scalars().all()]
            except SQLAlchemyError as e:
                raise self._failed("query_tasks", e) from e

        return self._changes.watch(snapshot)

    def observe_for_week(self, week_id: str, owner_id: str) -> AsyncIterator[list[Task]]:
        return self._select(TaskRow.week_id == week_id, TaskRow.owner_id == owner_id)

    def observe_by_status(self, status: TaskStatus, owner_id: str) -> AsyncIterator[list[Task]]:
        return self._select(TaskRow.status == status.value, TaskRow.owner_id == owner_id)

    def observe_incomplete_for_week(self, week_id: str, owner_id: str) -> AsyncIterator[list[Task]]:
        return self._select(
            TaskRow.week_id == week_id,
            TaskRow.owner_id == owner_id,
            TaskRow.status != TaskStatus.COMPLETED.value,
        )


class SqlWeekStore(_SqlStore):
    """WeekStore over the ``weeks`` table."""

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        today: Callable[[], date] = date.today,
    ) -> None:
        super().__init__(session_factory)
        self._today = today

    async def get_current_id(self) -> str:
        return week_calendar.current_week_id(self._today())

    async def get_previous_id(self, week_id: str) -> str:
        return week_calendar.previous_week_id(week_id)

    async def _get_or_create(self, session: AsyncSession, week_id: str, owner_id: str) -> WeekRow:
        row = await session.get(WeekRow, (week_id, owner_id))
        if row is None:
            start, end = week_calendar.week_bounds(week_id)
            row = WeekRow(id=week_id, owner_id=owner_id, start_date=start, end_date=end)
            session.add(row)
        return row

    async def get_or_create_current(self, owner_id: str) -> Week:
        week_id = await self.get_current_id()
        try:
            async with self._session_factory() as session:
                row = await self._get_or_create(session, week_id, owner_id)
                created = row in session.new
                week = row.to_domain()
                await session.commit()
        except SQLAlchemyError as e:
            raise self._failed("get_or_create_week", e) from e
        if created:
            logger.info("week_created week_id=%s", week_id)
            await self._changes.notify()
        return week

    async def get_by_id(self, week_id: str, owner_id: str) -> Week | None:
        try:
            async with self._session_factory() as session:
                row = await session.get(WeekRow, (week_id, owner_id))
                return row.to_domain() if row is not None else None
        except SQLAlchemyError as e:
            raise self._failed("get_week", e) from e

    async def mark_planning_completed(self, week_id: str, owner_id: str) -> None:
        try:
            async with self._session_factory() as session:
                row = await self._get_or_create(session, week_id, owner_id)
                row.planning_completed_at = datetime.now(UTC)
                await session.commit()
        except SQLAlchemyError as e:
            raise self._failed("mark_planning_completed", e) from e
        await self._changes.notify()

    async def update_review(
        self,
        week_id: str,
        owner_id: str,
        rating: int | None,
        note: str | None = None,
    ) -> None:
        try:
            async with self._session_factory() as session:
                row = await self._get_or_create(session, week_id, owner_id)
                row.overall_rating = rating
                row.review_note = note
                row.reviewed_at = datetime.now(UTC)
                await session.commit()
        except SQLAlchemyError as e:
            raise self._failed("update_review", e) from e
        await self._changes.notify()

    def observe_for_user(self, owner_id: str) -> AsyncIterator[list[Week]]:
        stmt = select(WeekRow).where(WeekRow.owner_id == owner_id).order_by(WeekRow.id.desc())

        async def snapshot() -> list[Week]:
            try:
                async with self._session_factory() as session:
                    result = await session.execute(stmt)
                    return [row.to_domain() for row in result.scalars().all()]
            except SQLAlchemyError as e:
                raise self._failed("query_weeks", e) from e

        return self._changes.watch(snapshot)

    def observe_with_stats(self, owner_id: str) -> AsyncIterator[list[WeekWithStats]]:
        """Weeks with task totals, newest first.

        Counts come from the tasks table, so task writes through a different
        store instance only show up on the next week write.
        """
        completed = func.sum(case((TaskRow.status == TaskStatus.COMPLETED.value, 1), else_=0))
        stmt = (
            select(WeekRow, func.count(TaskRow.id), completed)
            .outerjoin(
                TaskRow,
                (TaskRow.week_id == WeekRow.id) & (TaskRow.owner_id == WeekRow.owner_id),
            )
            .where(WeekRow.owner_id == owner_id)
            .group_by(WeekRow.id, WeekRow.owner_id)
            .order_by(WeekRow.id.desc())
        )

        async def snapshot() -> list[WeekWithStats]:
            try:
                async with self._session_factory() as session:
                    result = await session.execute(stmt)
                    return [
                        WeekWithStats(
                            week=row.to_domain(),
                            total_tasks=int(total or 0),
                            completed_tasks=int(done or 0),
                        )
                        for row, total, done in result.all()
                    ]
            except SQLAlchemyError as e:
                raise self._failed("query_weeks_with_stats", e) from e

        return self._changes.watch(snapshot)


class SqlGoalStore(_SqlStore):
    """GoalStore over the ``goals`` table."""

    async def get_active_suggestions(self, owner_id: str) -> list[Goal]:
        stmt = (
            select(GoalRow)
            .where(GoalRow.owner_id == owner_id, GoalRow.status == GoalStatus.ACTIVE.value)
            .order_by(GoalRow.name)
        )
        try:
            async with self._session_factory() as session:
                result = await session.execute(stmt)
                return [row.to_domain() for row in result.scalars().all()]
        except SQLAlchemyError as e:
            raise self._failed("get_active_goals", e) from e

    async def increment_progress(self, goal_id: str, amount: int) -> None:
        try:
            async with self._session_factory() as session:
                row = await session.get(GoalRow, goal_id)
                if row is None:
                    logger.warning("goal_not_found goal_id=%s", goal_id)
                    return
                row.current_progress = (row.current_progress or 0) + amount
                await session.commit()
        except SQLAlchemyError as e:
            raise self._failed("increment_goal_progress", e) from e


__all__ = [
    "SqlGoalStore",
    "SqlTaskStore",
    "SqlWeekStore",
    "create_schema",
    "create_session_factory",
]
