"""
Planning Wizard State Machine and Data Structures.

Defines the wizard steps, the events the hosting UI dispatches, the in-memory
UI state and the persisted checkpoint for the weekly planning flow.

Reference: planning.py (wizard)
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum

from pydantic import BaseModel, Field

from tandem.models.goal import Goal
from tandem.models.task import Task
from tandem.models.week import Week


# =============================================================================
# Planning Steps
# =============================================================================

class PlanningStep(StrEnum):
    """Ordered wizard steps; ROLLOVER and PARTNER_REQUESTS may be skipped."""

    # Carry unfinished tasks over from last week
    ROLLOVER = "ROLLOVER"

    # Free-form task entry, with goal suggestions
    ADD_TASKS = "ADD_TASKS"

    # Accept or defer tasks the partner asked for
    PARTNER_REQUESTS = "PARTNER_REQUESTS"

    # Read-only summary, terminal
    CONFIRMATION = "CONFIRMATION"


def initial_step(has_rollover_candidates: bool) -> PlanningStep:
    """Start at ROLLOVER only when there is something to roll over.

    Partner requests are checked when leaving ADD_TASKS, not here.
    """
    return PlanningStep.ROLLOVER if has_rollover_candidates else PlanningStep.ADD_TASKS


def next_step(current: PlanningStep, has_partner_requests: bool) -> PlanningStep:
    if current is PlanningStep.ROLLOVER:
        return PlanningStep.ADD_TASKS
    if current is PlanningStep.ADD_TASKS:
        return PlanningStep.PARTNER_REQUESTS if has_partner_requests else PlanningStep.CONFIRMATION
    if current is PlanningStep.PARTNER_REQUESTS:
        return PlanningStep.CONFIRMATION
    if current is PlanningStep.CONFIRMATION:
        return PlanningStep.CONFIRMATION
    raise AssertionError(f"Unhandled planning step: {current!r}")


# =============================================================================
# Planning Events
# =============================================================================

class PlanningEvent:
    """Base class of every event the planning wizard accepts."""


@dataclass(frozen=True)
class RolloverTaskAdded(PlanningEvent):
    task_id: str


@dataclass(frozen=True)
class RolloverTaskSkipped(PlanningEvent):
    task_id: str


@dataclass(frozen=True)
class RolloverStepComplete(PlanningEvent):
    pass


@dataclass(frozen=True)
class NewTaskTextChanged(PlanningEvent):
    text: str


@dataclass(frozen=True)
class NewTaskSubmitted(PlanningEvent):
    pass


@dataclass(frozen=True)
class DoneAddingTasks(PlanningEvent):
    pass


@dataclass(frozen=True)
class GoalSuggestionSelected(PlanningEvent):
    goal_id: str


@dataclass(frozen=True)
class ClearSelectedGoal(PlanningEvent):
    pass


@dataclass(frozen=True)
class PartnerRequestAccepted(PlanningEvent):
    task_id: str


@dataclass(frozen=True)
class PartnerRequestDiscussed(PlanningEvent):
    task_id: str


@dataclass(frozen=True)
class PartnerRequestsStepComplete(PlanningEvent):
    pass


@dataclass(frozen=True)
class BackPressed(PlanningEvent):
    pass


@dataclass(frozen=True)
class ExitRequested(PlanningEvent):
    pass


@dataclass(frozen=True)
class PlanningCompleted(PlanningEvent):
    pass


# =============================================================================
# Planning UI State
# =============================================================================

@dataclass(frozen=True)
class PlanningState:
    """Snapshot of the planning wizard; every event produces a new snapshot."""

    current_step: PlanningStep = PlanningStep.ROLLOVER
    week: Week | None = None

    # Rollover step
    rollover_tasks: tuple[Task, ...] = ()
    current_rollover_index: int = 0
    processed_rollover_ids: frozenset[str] = frozenset()
    processed_rollover_count: int = 0

    # Add tasks step
    new_task_text: str = ""
    new_task_error: str | None = None
    added_tasks: tuple[Task, ...] = ()
    goal_suggestions: tuple[Goal, ...] = ()
    selected_goal: Goal | None = None

    # Partner requests step
    partner_requests: tuple[Task, ...] = ()
    current_request_index: int = 0
    processed_request_ids: frozenset[str] = frozenset()
    processed_request_count: int = 0

    # Summary counters, accumulated during this run
    rollover_tasks_added: int = 0
    new_tasks_created: int = 0
    partner_requests_accepted: int = 0

    is_loading: bool = True
    error: str | None = None

    @property
    def total_tasks_planned(self) -> int:
        return self.rollover_tasks_added + self.new_tasks_created + self.partner_requests_accepted

    @property
    def current_rollover_task(self) -> Task | None:
        if self.current_rollover_index < len(self.rollover_tasks):
            return self.rollover_tasks[self.current_rollover_index]
        return None

    @property
    def current_partner_request(self) -> Task | None:
        if self.current_request_index < len(self.partner_requests):
            return self.partner_requests[self.current_request_index]
        return None

    @property
    def has_partner_requests(self) -> bool:
        return len(self.partner_requests) > 0


# =============================================================================
# Planning Checkpoint
# =============================================================================

class PlanningProgressState(BaseModel):
    """Persisted checkpoint of an in-flight planning run, keyed to ``week_id``."""

    current_step: PlanningStep = PlanningStep.ROLLOVER
    processed_rollover_task_ids: set[str] = Field(default_factory=set)
    added_task_ids: list[str] = Field(default_factory=list)
    processed_request_ids: set[str] = Field(default_factory=set)
    rollover_tasks_added: int = 0
    new_tasks_created: int = 0
    partner_requests_accepted: int = 0
    is_in_progress: bool = False
    week_id: str | None = None


__all__ = [
    "BackPressed",
    "ClearSelectedGoal",
    "DoneAddingTasks",
    "ExitRequested",
    "GoalSuggestionSelected",
    "NewTaskSubmitted",
    "NewTaskTextChanged",
    "PartnerRequestAccepted",
    "PartnerRequestDiscussed",
    "PartnerRequestsStepComplete",
    "PlanningCompleted",
    "PlanningEvent",
    "PlanningProgressState",
    "PlanningState",
    "PlanningStep",
    "RolloverStepComplete",
    "RolloverTaskAdded",
    "RolloverTaskSkipped",
    "initial_step",
    "next_step",
]
