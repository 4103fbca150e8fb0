"""
Completion statistics.

Only COMPLETED counts toward completion; TRIED and SKIPPED are tallied but
count as incomplete. All percentages truncate toward zero.
"""

from __future__ import annotations

from collections.abc import Mapping

from tandem.core import week_calendar
from tandem.lib.streams import first
from tandem.models.stats import CompletionStats, ReviewStats, TrendChartData, TrendPoint
from tandem.models.task import TaskStatus
from tandem.stores.protocols import PartnerStore, TaskStore, WeekStore

TREND_WEEKS = 8


def get_review_stats(outcomes: Mapping[str, TaskStatus]) -> ReviewStats:
    """Tally review outcomes keyed by task id."""
    statuses = list(outcomes.values())
    return ReviewStats(
        total_tasks=len(statuses),
        done_count=statuses.count(TaskStatus.COMPLETED),
        tried_count=statuses.count(TaskStatus.TRIED),
        skipped_count=statuses.count(TaskStatus.SKIPPED),
    )


async def completion_stats_for_week(
    task_store: TaskStore, week_id: str, owner_id: str,
) -> CompletionStats:
    tasks = await first(task_store.observe_for_week(week_id, owner_id))
    return CompletionStats(
        completed_count=sum(1 for task in tasks if task.is_completed),
        total_count=len(tasks),
    )


async def completion_trends(
    user_id: str,
    week_store: WeekStore,
    task_store: TaskStore,
    partner_store: PartnerStore,
) -> TrendChartData:
    """Completion percentage per past week (up to eight, oldest first)."""
    current_week_id = await week_store.get_current_id()
    partner_id = await partner_store.get_partner_id(user_id)

    weeks = await first(week_store.observe_for_user(user_id))
    past_ids = sorted(
        (week.id for week in weeks if week_calendar.is_after(current_week_id, week.id)),
        reverse=True,
    )[:TREND_WEEKS]

    points = []
    for week_id in reversed(past_ids):
        user_stats = await completion_stats_for_week(task_store, week_id, user_id)
        partner_percentage = None
        if partner_id is not None:
            partner_stats = await completion_stats_for_week(task_store, week_id, partner_id)
            partner_percentage = partner_stats.percentage
        points.append(
            TrendPoint(
                week_id=week_id,
                week_label=week_calendar.week_label(week_id),
                user_percentage=user_stats.percentage,
                partner_percentage=partner_percentage,
            )
        )
    return TrendChartData(points=points, has_partner=partner_id is not None)


__all__ = ["TREND_WEEKS", "completion_stats_for_week", "completion_trends", "get_review_stats"]
