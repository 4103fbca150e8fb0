"""
Tests for the in-memory stores.

Covers:
- Task CRUD and id assignment
- Observation: immediate value, re-emission after writes, unsubscribe
- Week lazy creation, review and planning stamps, stats
- Goals and partners
"""

import asyncio

import pytest

from tandem.lib.streams import first
from tandem.models.goal import Goal, GoalStatus
from tandem.models.task import TaskStatus
from tandem.stores.memory import InMemoryGoalStore, InMemoryPartnerStore

USER = "user-1"


class TestInMemoryTaskStore:
    @pytest.mark.asyncio
    async def test_create_assigns_id_when_empty(self, task_store, make_task):
        created = await task_store.create(make_task(""))
        assert created.id
        assert await task_store.get_by_id(created.id) == created

    @pytest.mark.asyncio
    async def test_update_status_and_note(self, task_store, make_task):
        await task_store.create(make_task("t1"))

        updated = await task_store.update_status("t1", TaskStatus.TRIED)
        await task_store.update_review_note("t1", "close")

        assert updated.status is TaskStatus.TRIED
        stored = await task_store.get_by_id("t1")
        assert stored.status is TaskStatus.TRIED
        assert stored.review_note == "close"

    @pytest.mark.asyncio
    async def test_update_unknown_returns_none(self, task_store):
        assert await task_store.update_status("missing", TaskStatus.SKIPPED) is None

    @pytest.mark.asyncio
    async def test_delete(self, task_store, make_task):
        await task_store.create(make_task("t1"))
        assert await task_store.delete("t1") is True
        assert await task_store.delete("t1") is False

    @pytest.mark.asyncio
    async def test_observe_incomplete_excludes_completed(self, task_store, make_task):
        await task_store.create(make_task("a", week_id="2026-W41", minute=1))
        await task_store.create(make_task("b", week_id="2026-W41", status=TaskStatus.COMPLETED))
        await task_store.create(make_task("c", week_id="2026-W41", status=TaskStatus.SKIPPED))
        await task_store.create(make_task("d", week_id="2026-W42"))

        tasks = await first(task_store.observe_incomplete_for_week("2026-W41", USER))
        assert [t.id for t in tasks] == ["c", "a"]

    @pytest.mark.asyncio
    async def test_observe_by_status_scoped_to_owner(self, task_store, make_task):
        await task_store.create(make_task("mine", status=TaskStatus.PENDING_ACCEPTANCE))
        await task_store.create(
            make_task("theirs", owner_id="user-2", status=TaskStatus.PENDING_ACCEPTANCE)
        )
        tasks = await first(task_store.observe_by_status(TaskStatus.PENDING_ACCEPTANCE, USER))
        assert [t.id for t in tasks] == ["mine"]

    @pytest.mark.asyncio
    async def test_observe_emits_after_change(self, task_store, make_task):
        stream = task_store.observe_for_week("2026-W42", USER)
        assert await stream.__anext__() == []

        await task_store.create(make_task("t1"))
        tasks = await asyncio.wait_for(stream.__anext__(), timeout=1)
        assert [t.id for t in tasks] == ["t1"]
        await stream.aclose()


class TestInMemoryWeekStore:
    @pytest.mark.asyncio
    async def test_get_or_create_is_lazy_and_stable(self, week_store):
        week = await week_store.get_or_create_current(USER)
        again = await week_store.get_or_create_current(USER)

        assert week.id == "2026-W42"
        assert week == again
        assert await week_store.get_previous_id(week.id) == "2026-W41"

    @pytest.mark.asyncio
    async def test_update_review_stamps_reviewed_at(self, week_store):
        await week_store.get_or_create_current(USER)
        await week_store.update_review("2026-W42", USER, 4, "good week")

        week = await week_store.get_by_id("2026-W42", USER)
        assert week.is_reviewed
        assert week.overall_rating == 4
        assert week.review_note == "good week"

    @pytest.mark.asyncio
    async def test_mark_planning_completed(self, week_store):
        await week_store.mark_planning_completed("2026-W42", USER)
        week = await week_store.get_by_id("2026-W42", USER)
        assert week.is_planning_complete

    @pytest.mark.asyncio
    async def test_observe_for_user_newest_first(self, week_store):
        await week_store.update_review("2026-W40", USER, 3)
        await week_store.get_or_create_current(USER)
        weeks = await first(week_store.observe_for_user(USER))
        assert [w.id for w in weeks] == ["2026-W42", "2026-W40"]

    @pytest.mark.asyncio
    async def test_observe_with_stats(self, week_store, task_store, make_task):
        await week_store.get_or_create_current(USER)
        await task_store.create(make_task("a", status=TaskStatus.COMPLETED))
        await task_store.create(make_task("b"))

        [item] = await first(week_store.observe_with_stats(USER))
        assert item.total_tasks == 2
        assert item.completed_tasks == 1
        assert item.completion_percentage == 50


class TestInMemoryGoalAndPartnerStores:
    @pytest.mark.asyncio
    async def test_active_suggestions_and_progress(self):
        store = InMemoryGoalStore([
            Goal(id="g1", name="Run", owner_id=USER, target=10),
            Goal(id="g2", name="Old", owner_id=USER, status=GoalStatus.EXPIRED),
        ])
        suggestions = await store.get_active_suggestions(USER)
        assert [g.id for g in suggestions] == ["g1"]

        await store.increment_progress("g1", 1)
        goal = await store.get_by_id("g1")
        assert goal.current_progress == 1
        assert goal.progress_text == "1/10"

    @pytest.mark.asyncio
    async def test_partner_link_is_symmetric(self):
        store = InMemoryPartnerStore([("a", "b")])
        assert await store.get_partner_id("a") == "b"
        assert await store.get_partner_id("b") == "a"
        assert await store.get_partner_id("c") is None
