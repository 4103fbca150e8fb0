"""
Tests for domain value objects.

Covers:
- CompletionStats invariants and integer-truncated percentage
- ReviewStats, WeekWithStats, TrendChartData
- StreakResult milestone closed set
- Week rating range and derived flags
- Task helpers
"""

from datetime import UTC, date, datetime

import pytest

from tandem.lib.exceptions import ContractViolation
from tandem.models.stats import (
    EMPTY_COMPLETION_STATS,
    CompletionStats,
    ReviewStats,
    TrendChartData,
    TrendPoint,
    WeekWithStats,
)
from tandem.models.streak import StreakResult, require_milestone
from tandem.models.task import TaskStatus
from tandem.models.week import Week


def _week(**fields) -> Week:
    return Week(
        id="2026-W42",
        start_date=date(2026, 10, 12),
        end_date=date(2026, 10, 18),
        owner_id="user-1",
        **fields,
    )


class TestCompletionStats:
    def test_percentage_truncates(self):
        assert CompletionStats(completed_count=1, total_count=3).percentage == 33
        assert CompletionStats(completed_count=2, total_count=3).percentage == 66

    def test_empty_is_zero(self):
        assert EMPTY_COMPLETION_STATS.percentage == 0

    def test_display_text(self):
        assert CompletionStats(completed_count=6, total_count=8).display_text == "6/8"

    @pytest.mark.parametrize("completed,total", [(-1, 3), (4, 3), (0, -1)])
    def test_invariant_violations(self, completed, total):
        with pytest.raises(ContractViolation):
            CompletionStats(completed_count=completed, total_count=total)


class TestReviewStats:
    def test_completion_counts_done_only(self):
        stats = ReviewStats(total_tasks=4, done_count=1, tried_count=2, skipped_count=1)
        assert stats.completion_percentage == 25

    def test_no_tasks(self):
        assert ReviewStats(0, 0, 0, 0).completion_percentage == 0


class TestWeekWithStats:
    def test_ratio_and_percentage(self):
        item = WeekWithStats(week=_week(), total_tasks=8, completed_tasks=6)
        assert item.completion_ratio == 0.75
        assert item.completion_percentage == 75
        assert not item.is_empty

    def test_empty_week(self):
        item = WeekWithStats(week=_week(), total_tasks=0, completed_tasks=0)
        assert item.completion_ratio == 0.0
        assert item.is_empty


class TestTrendChartData:
    def test_insufficient_below_four_points(self):
        points = [TrendPoint(f"2026-W0{i}", f"W0{i}", 50) for i in range(1, 4)]
        assert TrendChartData(points=points).insufficient_data
        points.append(TrendPoint("2026-W04", "W04", 80))
        assert not TrendChartData(points=points).insufficient_data


class TestStreakResult:
    @pytest.mark.parametrize("milestone", [5, 10, 20, 50])
    def test_valid_milestones(self, milestone):
        assert StreakResult(count=milestone, pending_milestone=milestone).pending_milestone == milestone

    @pytest.mark.parametrize("milestone", [0, 3, 15, 100])
    def test_milestone_outside_closed_set(self, milestone):
        with pytest.raises(ContractViolation):
            StreakResult(count=100, pending_milestone=milestone)
        with pytest.raises(ContractViolation):
            require_milestone(milestone)

    def test_negative_count(self):
        with pytest.raises(ContractViolation):
            StreakResult(count=-1)


class TestWeek:
    def test_flags(self):
        week = _week()
        assert not week.is_reviewed
        assert not week.is_planning_complete

        done = _week(reviewed_at=datetime.now(UTC), planning_completed_at=datetime.now(UTC))
        assert done.is_reviewed
        assert done.is_planning_complete

    @pytest.mark.parametrize("rating", [0, 6])
    def test_rating_range(self, rating):
        with pytest.raises(ContractViolation):
            _week(overall_rating=rating)


class TestTask:
    def test_with_status_returns_copy(self, make_task):
        task = make_task("t1")
        updated = task.with_status(TaskStatus.COMPLETED)
        assert task.status is TaskStatus.PENDING
        assert updated.is_completed
        assert updated.id == task.id

    def test_partner_request(self, make_task):
        assert make_task("t1", created_by="user-2").is_partner_request
        assert not make_task("t2").is_partner_request
