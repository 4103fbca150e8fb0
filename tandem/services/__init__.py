"""Services: rollover, streaks, statistics and progress persistence."""

from tandem.services.progress_store import MilestonePreferences, ProgressStore
from tandem.services.redis_service import RedisService
from tandem.services.review_window import is_review_window_open
from tandem.services.rollover import RolloverEngine
from tandem.services.stats import completion_stats_for_week, completion_trends, get_review_stats
from tandem.services.streak import StreakService

__all__ = [
    "MilestonePreferences",
    "ProgressStore",
    "RedisService",
    "RolloverEngine",
    "StreakService",
    "completion_stats_for_week",
    "completion_trends",
    "get_review_stats",
    "is_review_window_open",
]
