"""
Planning Wizard for Tandem.

Drives the weekly planning flow:
1. Rollover: carry unfinished tasks over from last week (skipped when none)
2. Add tasks: free-form entry, optionally linked to an active goal
3. Partner requests: accept or defer tasks the partner asked for (skipped when none)
4. Confirmation: summary, then mark the week's planning complete

Every event is handled sequentially. Store calls happen before the state is
updated, so a failing store leaves the state untouched and the user can
repeat the event. A checkpoint is written after each mutating event so the
run can be resumed; a checkpoint for another week is discarded on start.
"""

from __future__ import annotations

import logging
from dataclasses import replace

from tandem.config.settings import get_settings
from tandem.core.auth import AuthContext, AuthenticatedUser
from tandem.core.side_effects import SideEffect, SideEffectChannel
from tandem.lib import errors
from tandem.lib.exceptions import ContractViolation, ProgressStoreError, StateError, StoreError
from tandem.lib.logging import wizard_log_context
from tandem.lib.streams import first
from tandem.models.task import Task, TaskPriority, TaskStatus
from tandem.models.week import Week
from tandem.modules.planning_state import (
    BackPressed,
    ClearSelectedGoal,
    DoneAddingTasks,
    ExitRequested,
    GoalSuggestionSelected,
    NewTaskSubmitted,
    NewTaskTextChanged,
    PartnerRequestAccepted,
    PartnerRequestDiscussed,
    PartnerRequestsStepComplete,
    PlanningCompleted,
    PlanningEvent,
    PlanningProgressState,
    PlanningState,
    PlanningStep,
    RolloverStepComplete,
    RolloverTaskAdded,
    RolloverTaskSkipped,
    initial_step,
    next_step,
)
from tandem.services.progress_store import ProgressStore
from tandem.services.rollover import RolloverEngine
from tandem.stores.protocols import GoalStore, TaskStore, WeekStore

logger = logging.getLogger(__name__)


class PlanningWizard:
    """
    State machine for the weekly planning wizard.

    Usage:
        wizard = PlanningWizard(auth, tasks, weeks, goals, progress)
        await wizard.start()
        await wizard.on_event(RolloverTaskAdded(task_id))
        effect = await wizard.side_effects.receive()
    """

    def __init__(
        self,
        auth: AuthContext,
        task_store: TaskStore,
        week_store: WeekStore,
        goal_store: GoalStore,
        progress: ProgressStore[PlanningProgressState],
        rollover: RolloverEngine | None = None,
        language: str | None = None,
    ) -> None:
        self._auth = auth
        self._task_store = task_store
        self._week_store = week_store
        self._goal_store = goal_store
        self._progress = progress
        self._rollover = rollover or RolloverEngine(task_store)
        self._language = language or get_settings().language

        self._state = PlanningState()
        self._user: AuthenticatedUser | None = None
        self._closed = False
        self.side_effects = SideEffectChannel()

    @property
    def state(self) -> PlanningState:
        return self._state

    # =========================================================================
    # Lifecycle
    # =========================================================================

    async def start(self) -> None:
        """Wait for auth, ensure the current week exists and load step data."""
        self._ensure_open()
        user = await self._auth.await_authenticated()
        self._user = user

        try:
            week = await self._week_store.get_or_create_current(user.id)
            saved = await self._progress.load()
            resume = saved.is_in_progress and saved.week_id == week.id
            if not resume and saved.week_id is not None:
                logger.info("planning_checkpoint_discarded week_id=%s", saved.week_id)
                await self._progress.clear()
                saved = PlanningProgressState()

            previous_week_id = await self._week_store.get_previous_id(week.id)
            candidates = await self._rollover.candidates_for(previous_week_id, user.id)
            requests = await first(
                self._task_store.observe_by_status(TaskStatus.PENDING_ACCEPTANCE, user.id)
            )
            goals = await self._goal_store.get_active_suggestions(user.id)

            added: list[Task] = []
            for task_id in saved.added_task_ids:
                task = await self._task_store.get_by_id(task_id)
                if task is not None:
                    added.append(task)
        except StoreError as e:
            logger.warning("planning_load_failed error=%s", e)
            self._state = replace(
                self._state,
                is_loading=False,
                error=errors.get_message(errors.LOAD_FAILED, self._language),
            )
            return

        # A request still waiting for acceptance is offered once, as a request.
        request_ids = {t.id for t in requests}
        rollover_tasks = tuple(
            t for t in candidates
            if t.id not in request_ids and t.id not in saved.processed_rollover_task_ids
        )
        partner_requests = tuple(t for t in requests if t.id not in saved.processed_request_ids)
        step = saved.current_step if resume else initial_step(len(rollover_tasks) > 0)

        self._state = PlanningState(
            current_step=step,
            week=week,
            rollover_tasks=rollover_tasks,
            processed_rollover_ids=frozenset(saved.processed_rollover_task_ids),
            added_tasks=tuple(added),
            goal_suggestions=tuple(goals),
            partner_requests=partner_requests,
            processed_request_ids=frozenset(saved.processed_request_ids),
            rollover_tasks_added=saved.rollover_tasks_added,
            new_tasks_created=saved.new_tasks_created,
            partner_requests_accepted=saved.partner_requests_accepted,
            is_loading=False,
        )
        logger.info(
            "planning_started week_id=%s step=%s resumed=%s rollover=%d requests=%d",
            week.id, step, resume, len(rollover_tasks), len(partner_requests),
        )

    async def close(self) -> None:
        """Tear down; later events raise StateError."""
        self._closed = True

    # =========================================================================
    # Event dispatch
    # =========================================================================

    async def on_event(self, event: PlanningEvent) -> None:
        """Handle one UI event."""
        self._ensure_ready()
        with wizard_log_context("planning", self._require_user().id, self._require_week().id):
            await self._dispatch(event)

    async def _dispatch(self, event: PlanningEvent) -> None:
        if isinstance(event, RolloverTaskAdded):
            await self._handle_rollover_added(event.task_id)
        elif isinstance(event, RolloverTaskSkipped):
            await self._handle_rollover_skipped(event.task_id)
        elif isinstance(event, RolloverStepComplete):
            self._require_step(PlanningStep.ROLLOVER)
            await self._advance()
        elif isinstance(event, NewTaskTextChanged):
            self._require_step(PlanningStep.ADD_TASKS)
            self._state = replace(self._state, new_task_text=event.text, new_task_error=None)
        elif isinstance(event, NewTaskSubmitted):
            await self._handle_new_task_submitted()
        elif isinstance(event, DoneAddingTasks):
            self._require_step(PlanningStep.ADD_TASKS)
            await self._advance()
        elif isinstance(event, GoalSuggestionSelected):
            self._handle_goal_selected(event.goal_id)
        elif isinstance(event, ClearSelectedGoal):
            self._state = replace(self._state, selected_goal=None)
        elif isinstance(event, PartnerRequestAccepted):
            await self._handle_request_accepted(event.task_id)
        elif isinstance(event, PartnerRequestDiscussed):
            await self._handle_request_discussed(event.task_id)
        elif isinstance(event, PartnerRequestsStepComplete):
            self._require_step(PlanningStep.PARTNER_REQUESTS)
            await self._advance()
        elif isinstance(event, BackPressed):
            self.side_effects.send(SideEffect.navigate_back())
        elif isinstance(event, ExitRequested):
            await self._checkpoint()
            logger.info("planning_exited step=%s", self._state.current_step)
            self.side_effects.send(SideEffect.exit_wizard())
        elif isinstance(event, PlanningCompleted):
            await self._handle_planning_completed()
        else:
            raise ContractViolation(f"Unhandled planning event: {type(event).__name__}")

    # =========================================================================
    # Step handlers
    # =========================================================================

    async def _advance(self) -> None:
        step = next_step(self._state.current_step, self._state.has_partner_requests)
        logger.info("planning_step_changed from=%s to=%s", self._state.current_step, step)
        self._state = replace(self._state, current_step=step)
        await self._checkpoint()
        self.side_effects.send(SideEffect.navigate_to_step(step.value))

    async def _handle_rollover_added(self, task_id: str) -> None:
        self._require_step(PlanningStep.ROLLOVER)
        original = self._require_current(self._state.current_rollover_task, task_id)
        week = self._require_week()

        try:
            created = await self._task_store.create(self._rollover.materialize(original, week.id))
        except StoreError as e:
            self._report(errors.TASK_CREATE_FAILED, e)
            return

        state = self._state
        self._state = replace(
            state,
            current_rollover_index=state.current_rollover_index + 1,
            processed_rollover_ids=state.processed_rollover_ids | {original.id},
            added_tasks=(*state.added_tasks, created),
            rollover_tasks_added=state.rollover_tasks_added + 1,
        )
        logger.info("rollover_task_added task_id=%s from_week=%s", created.id, original.week_id)
        await self._checkpoint()
        self.side_effects.send(SideEffect.trigger_haptic())

    async def _handle_rollover_skipped(self, task_id: str) -> None:
        self._require_step(PlanningStep.ROLLOVER)
        original = self._require_current(self._state.current_rollover_task, task_id)
        state = self._state
        self._state = replace(
            state,
            current_rollover_index=state.current_rollover_index + 1,
            processed_rollover_ids=state.processed_rollover_ids | {original.id},
            processed_rollover_count=state.processed_rollover_count + 1,
        )
        await self._checkpoint()

    async def _handle_new_task_submitted(self) -> None:
        self._require_step(PlanningStep.ADD_TASKS)
        user = self._require_user()
        week = self._require_week()
        state = self._state

        title = state.new_task_text.strip()
        if not title:
            self._state = replace(
                state, new_task_error=errors.get_message(errors.TITLE_REQUIRED, self._language),
            )
            return

        task = Task(
            id="",
            title=title,
            owner_id=user.id,
            week_id=week.id,
            status=TaskStatus.PENDING,
            created_by=user.id,
            priority=TaskPriority.P4,
            linked_goal_id=state.selected_goal.id if state.selected_goal else None,
        )
        try:
            created = await self._task_store.create(task)
        except StoreError as e:
            self._report(errors.TASK_CREATE_FAILED, e)
            return

        self._state = replace(
            state,
            new_task_text="",
            new_task_error=None,
            selected_goal=None,
            added_tasks=(*state.added_tasks, created),
            new_tasks_created=state.new_tasks_created + 1,
        )
        logger.info("planning_task_created task_id=%s goal_linked=%s",
                    created.id, created.linked_goal_id is not None)
        await self._checkpoint()
        self.side_effects.send(SideEffect.clear_focus())

    def _handle_goal_selected(self, goal_id: str) -> None:
        for goal in self._state.goal_suggestions:
            if goal.id == goal_id:
                self._state = replace(self._state, selected_goal=goal)
                return
        raise ContractViolation(f"Goal {goal_id} is not a suggestion")

    async def _handle_request_accepted(self, task_id: str) -> None:
        self._require_step(PlanningStep.PARTNER_REQUESTS)
        request = self._require_current(self._state.current_partner_request, task_id)

        try:
            updated = await self._task_store.update_status(request.id, TaskStatus.PENDING)
        except StoreError as e:
            self._report(errors.REQUEST_ACCEPT_FAILED, e)
            return

        state = self._state
        accepted = 1 if updated is not None else 0
        if updated is None:
            logger.warning("partner_request_missing task_id=%s", request.id)
        self._state = replace(
            state,
            current_request_index=state.current_request_index + 1,
            processed_request_ids=state.processed_request_ids | {request.id},
            partner_requests_accepted=state.partner_requests_accepted + accepted,
        )
        await self._checkpoint()
        if updated is not None:
            self.side_effects.send(SideEffect.trigger_haptic())

    async def _handle_request_discussed(self, task_id: str) -> None:
        self._require_step(PlanningStep.PARTNER_REQUESTS)
        request = self._require_current(self._state.current_partner_request, task_id)
        self.side_effects.send(
            SideEffect.show_message(
                errors.get_message(errors.DISCUSS_DEFERRED, self._language),
                code=errors.DISCUSS_DEFERRED,
            )
        )
        state = self._state
        self._state = replace(
            state,
            current_request_index=state.current_request_index + 1,
            processed_request_ids=state.processed_request_ids | {request.id},
            processed_request_count=state.processed_request_count + 1,
        )
        await self._checkpoint()

    async def _handle_planning_completed(self) -> None:
        self._require_step(PlanningStep.CONFIRMATION)
        user = self._require_user()
        week = self._require_week()

        try:
            await self._week_store.mark_planning_completed(week.id, user.id)
        except StoreError as e:
            self._report(errors.PLANNING_COMPLETE_FAILED, e)
            return

        await self._clear_checkpoint()
        logger.info(
            "planning_completed week_id=%s total=%d rollover=%d new=%d accepted=%d",
            week.id,
            self._state.total_tasks_planned,
            self._state.rollover_tasks_added,
            self._state.new_tasks_created,
            self._state.partner_requests_accepted,
        )
        self.side_effects.send(SideEffect.exit_wizard())

    # =========================================================================
    # Checkpointing
    # =========================================================================

    def _snapshot(self) -> PlanningProgressState:
        state = self._state
        return PlanningProgressState(
            current_step=state.current_step,
            processed_rollover_task_ids=set(state.processed_rollover_ids),
            added_task_ids=[task.id for task in state.added_tasks],
            processed_request_ids=set(state.processed_request_ids),
            rollover_tasks_added=state.rollover_tasks_added,
            new_tasks_created=state.new_tasks_created,
            partner_requests_accepted=state.partner_requests_accepted,
            is_in_progress=True,
            week_id=state.week.id if state.week else None,
        )

    async def _checkpoint(self) -> None:
        # Runs after the durable effect; a lost checkpoint only costs resumability.
        try:
            await self._progress.save(self._snapshot())
        except ProgressStoreError as e:
            logger.warning("planning_checkpoint_failed error=%s", e)

    async def _clear_checkpoint(self) -> None:
        try:
            await self._progress.clear()
        except ProgressStoreError as e:
            logger.warning("planning_checkpoint_clear_failed error=%s", e)

    # =========================================================================
    # Guards
    # =========================================================================

    def _report(self, code: str, error: StoreError) -> None:
        logger.warning("planning_store_failed code=%s error=%s", code, error)
        self.side_effects.send(
            SideEffect.show_message(errors.get_message(code, self._language), code=code)
        )

    def _ensure_open(self) -> None:
        if self._closed:
            raise StateError("Planning wizard is closed")

    def _ensure_ready(self) -> None:
        self._ensure_open()
        if self._user is None or self._state.week is None:
            raise StateError("Planning wizard is not loaded")

    def _require_user(self) -> AuthenticatedUser:
        if self._user is None:
            raise StateError("Planning wizard is not loaded")
        return self._user

    def _require_week(self) -> Week:
        week = self._state.week
        if week is None:
            raise StateError("Planning wizard is not loaded")
        return week

    def _require_step(self, step: PlanningStep) -> None:
        if self._state.current_step is not step:
            raise ContractViolation(
                f"Event for step {step} while at {self._state.current_step}"
            )

    @staticmethod
    def _require_current(current: Task | None, task_id: str) -> Task:
        if current is None or current.id != task_id:
            raise ContractViolation(f"Task {task_id} is not the current item")
        return current


__all__ = ["PlanningWizard"]
