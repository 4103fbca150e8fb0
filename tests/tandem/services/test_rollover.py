"""
Tests for the RolloverEngine.

Covers:
- Only PENDING / PENDING_ACCEPTANCE tasks are candidates
- materialize copies content, sets PENDING and provenance, fresh id
- The original task is left untouched
"""

import pytest

from tandem.models.task import TaskPriority, TaskStatus
from tandem.services.rollover import RolloverEngine

USER = "user-1"


class TestCandidates:
    @pytest.mark.asyncio
    async def test_only_open_statuses_roll_forward(self, task_store, make_task):
        for task_id, status in [
            ("pending", TaskStatus.PENDING),
            ("request", TaskStatus.PENDING_ACCEPTANCE),
            ("done", TaskStatus.COMPLETED),
            ("tried", TaskStatus.TRIED),
            ("skipped", TaskStatus.SKIPPED),
            ("declined", TaskStatus.DECLINED),
        ]:
            await task_store.create(make_task(task_id, week_id="2026-W41", status=status))

        candidates = await RolloverEngine(task_store).candidates_for("2026-W41", USER)
        assert {t.id for t in candidates} == {"pending", "request"}

    @pytest.mark.asyncio
    async def test_no_tasks_no_candidates(self, task_store):
        assert await RolloverEngine(task_store).candidates_for("2026-W41", USER) == []


class TestMaterialize:
    def test_copies_content_and_sets_provenance(self, make_task):
        original = make_task(
            "orig",
            week_id="2026-W41",
            status=TaskStatus.PENDING_ACCEPTANCE,
            title="  Call the bank ✓ ",
            notes="ask about fees",
            priority=TaskPriority.P1,
            labels=("money",),
            linked_goal_id="g1",
            review_note="old note",
        )

        rolled = RolloverEngine.materialize(original, "2026-W42")

        assert rolled.id and rolled.id != original.id
        assert rolled.title == original.title
        assert rolled.notes == "ask about fees"
        assert rolled.priority is TaskPriority.P1
        assert rolled.labels == ("money",)
        assert rolled.linked_goal_id == "g1"
        assert rolled.week_id == "2026-W42"
        assert rolled.status is TaskStatus.PENDING
        assert rolled.rolled_from_week_id == "2026-W41"
        assert rolled.review_note is None

    def test_original_untouched(self, make_task):
        original = make_task("orig", week_id="2026-W41")
        RolloverEngine.materialize(original, "2026-W42")
        assert original.week_id == "2026-W41"
        assert original.rolled_from_week_id is None

    @pytest.mark.parametrize("status", list(TaskStatus))
    def test_never_returns_terminal_state(self, make_task, status):
        rolled = RolloverEngine.materialize(make_task("x", status=status), "2026-W43")
        assert rolled.status is TaskStatus.PENDING
