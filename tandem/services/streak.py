"""
Streak Engine for Tandem.

A streak is the number of consecutive weeks, walking backward from the most
recent week on record, in which the user reviewed (solo) or both partners
reviewed (partner mode). A missing or unreviewed week breaks the chain; there
is no grace period.

Milestones are the closed set {5, 10, 20, 50}. The highest reached milestone
above the last celebrated one is reported once; callers acknowledge it with
``StreakService.mark_milestone_celebrated``.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable

from tandem.core import week_calendar
from tandem.lib.exceptions import ContractViolation
from tandem.lib.streams import first
from tandem.models.streak import CELEBRATED_VALUES, MILESTONES, StreakResult, require_milestone
from tandem.models.week import Week
from tandem.services.progress_store import MilestonePreferences
from tandem.stores.protocols import PartnerStore, WeekStore

logger = logging.getLogger(__name__)


def _reviewed_ids(weeks: Iterable[Week]) -> set[str]:
    return {week.id for week in weeks if week.is_reviewed}


def count_streak(user_weeks: Iterable[Week], partner_weeks: Iterable[Week] | None = None) -> int:
    """Length of the current review streak."""
    user_weeks = list(user_weeks)
    reviewed = _reviewed_ids(user_weeks)
    known = {week.id for week in user_weeks}
    if partner_weeks is not None:
        partner_weeks = list(partner_weeks)
        reviewed &= _reviewed_ids(partner_weeks)
        known |= {week.id for week in partner_weeks}
    if not known:
        return 0

    streak = 0
    week_id = max(known)
    while week_id in reviewed:
        streak += 1
        week_id = week_calendar.previous_week_id(week_id)
    return streak


def pending_milestone(current_streak: int, last_celebrated: int) -> int | None:
    """
    Highest milestone reached by ``current_streak`` and not yet celebrated.

    Raises:
        ContractViolation: if ``last_celebrated`` is not 0 or a milestone
    """
    if last_celebrated not in CELEBRATED_VALUES:
        raise ContractViolation(f"Last celebrated milestone must be one of {sorted(CELEBRATED_VALUES)}")
    reached = [m for m in MILESTONES if last_celebrated < m <= current_streak]
    return max(reached) if reached else None


def calculate(
    user_weeks: Iterable[Week],
    partner_weeks: Iterable[Week] | None = None,
    last_celebrated: int = 0,
) -> StreakResult:
    """Streak result for a user; passing ``partner_weeks`` switches to partner mode."""
    count = count_streak(user_weeks, partner_weeks)
    return StreakResult(
        count=count,
        is_partner_streak=partner_weeks is not None,
        pending_milestone=pending_milestone(count, last_celebrated),
    )


class StreakService:
    """Streak for a signed-in user, resolving the partner and milestone preference."""

    def __init__(
        self,
        week_store: WeekStore,
        partner_store: PartnerStore,
        preferences: MilestonePreferences,
    ) -> None:
        self._week_store = week_store
        self._partner_store = partner_store
        self._preferences = preferences

    async def calculate(self, user_id: str) -> StreakResult:
        partner_id = await self._partner_store.get_partner_id(user_id)
        last_celebrated = await self._preferences.last_celebrated_milestone()
        user_weeks = await first(self._week_store.observe_for_user(user_id))
        partner_weeks = None
        if partner_id is not None:
            partner_weeks = await first(self._week_store.observe_for_user(partner_id))
        result = calculate(user_weeks, partner_weeks, last_celebrated)
        logger.info(
            "streak_calculated count=%d partner=%s pending_milestone=%s",
            result.count, result.is_partner_streak, result.pending_milestone,
        )
        return result

    async def mark_milestone_celebrated(self, milestone: int) -> None:
        await self._preferences.set_last_celebrated_milestone(require_milestone(milestone))


__all__ = ["StreakService", "calculate", "count_streak", "pending_milestone"]
