"""
Rollover Engine for Tandem.

Carries unfinished work forward: tasks left PENDING or PENDING_ACCEPTANCE in
the previous week are offered as candidates, and an accepted candidate is
cloned into the new week with provenance (``rolled_from_week_id``). The
original task is never touched; persisting the clone is the caller's job.
"""

from __future__ import annotations

import logging
import uuid
from datetime import UTC, datetime

from tandem.lib.streams import first
from tandem.models.task import ROLLOVER_ELIGIBLE, Task, TaskStatus
from tandem.stores.protocols import TaskStore

logger = logging.getLogger(__name__)


class RolloverEngine:
    """Selects rollover candidates and materializes rollover tasks."""

    def __init__(self, task_store: TaskStore) -> None:
        self._task_store = task_store

    async def candidates_for(self, previous_week_id: str, owner_id: str) -> list[Task]:
        """
        Tasks of ``previous_week_id`` that may roll forward.

        TRIED, SKIPPED and DECLINED are outcomes of a prior review and do not
        roll forward; neither does COMPLETED. Order follows the store.
        """
        incomplete = await first(
            self._task_store.observe_incomplete_for_week(previous_week_id, owner_id)
        )
        candidates = [task for task in incomplete if task.status in ROLLOVER_ELIGIBLE]
        logger.debug(
            "rollover_candidates week_id=%s count=%d", previous_week_id, len(candidates),
        )
        return candidates

    @staticmethod
    def materialize(original: Task, target_week_id: str) -> Task:
        """A fresh PENDING copy of ``original`` in ``target_week_id``."""
        now = datetime.now(UTC)
        return Task(
            id=str(uuid.uuid4()),
            title=original.title,
            owner_id=original.owner_id,
            week_id=target_week_id,
            status=TaskStatus.PENDING,
            created_by=original.owner_id,
            notes=original.notes,
            priority=original.priority,
            labels=original.labels,
            linked_goal_id=original.linked_goal_id,
            rolled_from_week_id=original.week_id,
            created_at=now,
            updated_at=now,
        )


__all__ = ["RolloverEngine"]
