"""
Shared test fixtures for Tandem.

This module provides common fixtures used across all test modules:
- Environment setup (dev mode, short note debounce)
- A fixed "today" (Wednesday 2026-10-14, ISO week 2026-W42)
- In-memory task/week/goal/partner stores
- An auth context with a signed-in user
- Progress stores and milestone preferences without Redis
- A task factory

Usage:
    All fixtures are automatically available to any test in the tests/ directory.
"""

from __future__ import annotations

import os
from datetime import UTC, date, datetime, timedelta

import pytest

# ---------------------------------------------------------------------------
# 1. Environment setup -- must run before any application imports
# ---------------------------------------------------------------------------

os.environ.setdefault("TANDEM_DEV_MODE", "1")
os.environ.setdefault("TANDEM_NOTE_DEBOUNCE_MS", "20")

# ---------------------------------------------------------------------------
# Application imports (after env vars are set)
# ---------------------------------------------------------------------------

from tandem.core.auth import AuthContext, AuthenticatedUser  # noqa: E402
from tandem.models.task import Task, TaskStatus  # noqa: E402
from tandem.modules.planning_state import PlanningProgressState  # noqa: E402
from tandem.modules.review_state import ReviewProgressState  # noqa: E402
from tandem.services.progress_store import MilestonePreferences, ProgressStore  # noqa: E402
from tandem.services.streak import StreakService  # noqa: E402
from tandem.stores.memory import (  # noqa: E402
    InMemoryGoalStore,
    InMemoryPartnerStore,
    InMemoryTaskStore,
    InMemoryWeekStore,
)

USER_ID = "user-1"
PARTNER_ID = "user-2"
TODAY = date(2026, 10, 14)
CURRENT_WEEK = "2026-W42"
PREVIOUS_WEEK = "2026-W41"
BASE_TIME = datetime(2026, 10, 1, 9, 0, tzinfo=UTC)


# ---------------------------------------------------------------------------
# 2. Stores
# ---------------------------------------------------------------------------

@pytest.fixture()
def task_store():
    return InMemoryTaskStore()


@pytest.fixture()
def week_store(task_store):
    """Week store whose calendar is pinned to TODAY."""
    return InMemoryWeekStore(task_store=task_store, today=lambda: TODAY)


@pytest.fixture()
def goal_store():
    return InMemoryGoalStore()


@pytest.fixture()
def partner_store():
    return InMemoryPartnerStore()


# ---------------------------------------------------------------------------
# 3. Auth and persistence
# ---------------------------------------------------------------------------

@pytest.fixture()
def auth():
    return AuthContext(AuthenticatedUser(id=USER_ID, display_name="Sam"))


@pytest.fixture()
def planning_progress():
    return ProgressStore(PlanningProgressState, "planning", USER_ID, ttl=3600)


@pytest.fixture()
def review_progress():
    return ProgressStore(ReviewProgressState, "review", USER_ID, ttl=3600)


@pytest.fixture()
def milestone_preferences():
    return MilestonePreferences(USER_ID)


@pytest.fixture()
def streak_service(week_store, partner_store, milestone_preferences):
    return StreakService(week_store, partner_store, milestone_preferences)


# ---------------------------------------------------------------------------
# 4. make_task -- factory with increasing creation times
# ---------------------------------------------------------------------------

@pytest.fixture()
def make_task():
    """
    Build a Task; ``minute`` offsets ``created_at`` from a fixed base time.

    Example usage in a test::

        def test_something(make_task):
            task = make_task("t1", status=TaskStatus.TRIED, minute=3)
    """

    def factory(
        task_id: str,
        week_id: str = CURRENT_WEEK,
        status: TaskStatus = TaskStatus.PENDING,
        owner_id: str = USER_ID,
        minute: int = 0,
        **fields,
    ) -> Task:
        created = BASE_TIME + timedelta(minutes=minute)
        return Task(
            id=task_id,
            title=fields.pop("title", f"Task {task_id}"),
            owner_id=owner_id,
            week_id=week_id,
            status=status,
            created_by=fields.pop("created_by", owner_id),
            created_at=created,
            updated_at=created,
            **fields,
        )

    return factory
