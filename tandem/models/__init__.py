"""
Models for Tandem.

Domain entities are immutable dataclasses; ``tables`` holds the SQLAlchemy
mappings used by the SQL stores.
"""

from tandem.models.goal import Goal, GoalStatus
from tandem.models.stats import (
    EMPTY_COMPLETION_STATS,
    CompletionStats,
    ReviewStats,
    TrendChartData,
    TrendPoint,
    WeekWithStats,
)
from tandem.models.streak import EMPTY_STREAK, MILESTONES, StreakResult
from tandem.models.task import REVIEW_OUTCOMES, ROLLOVER_ELIGIBLE, Task, TaskPriority, TaskStatus
from tandem.models.week import Week

__all__ = [
    "EMPTY_COMPLETION_STATS",
    "EMPTY_STREAK",
    "MILESTONES",
    "REVIEW_OUTCOMES",
    "ROLLOVER_ELIGIBLE",
    "CompletionStats",
    "Goal",
    "GoalStatus",
    "ReviewStats",
    "StreakResult",
    "Task",
    "TaskPriority",
    "TaskStatus",
    "TrendChartData",
    "TrendPoint",
    "Week",
    "WeekWithStats",
]
