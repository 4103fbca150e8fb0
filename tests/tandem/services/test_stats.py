"""
Tests for completion statistics.

Covers:
- Review stats tally (only COMPLETED counts toward completion)
- Per-week completion stats from the task store
- Trend chart data: past weeks only, oldest first, partner series
"""

import pytest

from tandem.models.task import TaskStatus
from tandem.services.stats import (
    TREND_WEEKS,
    completion_stats_for_week,
    completion_trends,
    get_review_stats,
)

USER = "user-1"
PARTNER = "user-2"


class TestReviewStats:
    def test_one_of_each(self):
        stats = get_review_stats({
            "a": TaskStatus.COMPLETED,
            "b": TaskStatus.TRIED,
            "c": TaskStatus.SKIPPED,
        })
        assert (stats.total_tasks, stats.done_count, stats.tried_count, stats.skipped_count) == (3, 1, 1, 1)
        assert stats.completion_percentage == 33

    def test_empty(self):
        stats = get_review_stats({})
        assert stats.total_tasks == 0
        assert stats.completion_percentage == 0


class TestCompletionStatsForWeek:
    @pytest.mark.asyncio
    async def test_counts_completed_only(self, task_store, make_task):
        await task_store.create(make_task("a", status=TaskStatus.COMPLETED))
        await task_store.create(make_task("b", status=TaskStatus.TRIED))
        await task_store.create(make_task("c"))
        await task_store.create(make_task("other", week_id="2026-W41", status=TaskStatus.COMPLETED))

        stats = await completion_stats_for_week(task_store, "2026-W42", USER)
        assert stats.display_text == "1/3"
        assert stats.percentage == 33


class TestCompletionTrends:
    @pytest.mark.asyncio
    async def test_past_weeks_oldest_first(self, week_store, task_store, partner_store, make_task):
        for week_id in ("2026-W39", "2026-W40", "2026-W41", "2026-W42"):
            await week_store.mark_planning_completed(week_id, USER)
        await task_store.create(make_task("a", week_id="2026-W41", status=TaskStatus.COMPLETED))
        await task_store.create(make_task("b", week_id="2026-W41"))
        await task_store.create(make_task("c", week_id="2026-W40", status=TaskStatus.COMPLETED))

        trends = await completion_trends(USER, week_store, task_store, partner_store)

        assert [p.week_id for p in trends.points] == ["2026-W39", "2026-W40", "2026-W41"]
        assert [p.user_percentage for p in trends.points] == [0, 100, 50]
        assert all(p.partner_percentage is None for p in trends.points)
        assert not trends.has_partner
        assert trends.insufficient_data

    @pytest.mark.asyncio
    async def test_partner_series(self, week_store, task_store, partner_store, make_task):
        partner_store.connect(USER, PARTNER)
        await week_store.mark_planning_completed("2026-W41", USER)
        await task_store.create(
            make_task("p1", week_id="2026-W41", owner_id=PARTNER, status=TaskStatus.COMPLETED)
        )

        trends = await completion_trends(USER, week_store, task_store, partner_store)

        assert trends.has_partner
        assert trends.points[0].partner_percentage == 100
        assert trends.points[0].user_percentage == 0

    @pytest.mark.asyncio
    async def test_capped_at_trend_window(self, week_store, task_store, partner_store):
        for week in range(20, 42):
            await week_store.mark_planning_completed(f"2026-W{week}", USER)

        trends = await completion_trends(USER, week_store, task_store, partner_store)

        assert len(trends.points) == TREND_WEEKS
        assert trends.points[0].week_id == "2026-W34"
        assert trends.points[-1].week_id == "2026-W41"
        assert not trends.insufficient_data
