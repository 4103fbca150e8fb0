"""
Review Wizard for Tandem.

Drives the weekly review flow:
1. Mode select: solo, or together on one device
2. Rating: overall 1-5 rating plus optional note, saved on continue
3. Task review: Done / Tried / Skipped per task, each saved immediately
4. Summary: completion percentage (Done only) and updated streak

A quick finish marks every task without an outcome as SKIPPED and completes
the review in one step. Notes are written after a quiet period; ``close``
cancels pending note writes. A checkpoint for the current week is offered
for resumption and nothing else happens until the user resumes or discards
it.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import replace
from datetime import UTC, datetime

from tandem.config.settings import get_settings
from tandem.core.auth import AuthContext, AuthenticatedUser
from tandem.core.side_effects import SideEffect, SideEffectChannel
from tandem.lib import errors
from tandem.lib.debounce import Debouncer
from tandem.lib.exceptions import ContractViolation, ProgressStoreError, StateError, StoreError
from tandem.lib.logging import wizard_log_context
from tandem.lib.streams import first
from tandem.models.task import REVIEW_OUTCOMES, Task, TaskStatus
from tandem.models.week import Week
from tandem.modules.review_state import (
    REACTION_EMOJI,
    AddReaction,
    CompleteReview,
    ContinueToTasks,
    DiscardProgress,
    DismissError,
    Done,
    NextTask,
    PassToPartner,
    PreviousTask,
    QuickFinish,
    ResumeProgress,
    Retry,
    ReviewEvent,
    ReviewMode,
    ReviewProgressState,
    ReviewState,
    ReviewStep,
    SelectMode,
    SelectRating,
    SelectTaskOutcome,
    StartNextWeek,
    UpdateRatingNote,
    UpdateTaskNote,
    order_for_review,
    restore_review_order,
)
from tandem.services.progress_store import ProgressStore
from tandem.services.review_window import is_review_window_open
from tandem.services.stats import get_review_stats
from tandem.services.streak import StreakService
from tandem.stores.protocols import GoalStore, TaskStore, WeekStore

logger = logging.getLogger(__name__)

# Events still accepted while a saved review waits for resume or discard.
_PROGRESS_DECISION_EVENTS = (ResumeProgress, DiscardProgress, DismissError, Retry)


class ReviewWizard:
    """
    State machine for the weekly review wizard.

    Usage:
        wizard = ReviewWizard(auth, tasks, weeks, progress, streaks)
        await wizard.start()
        if wizard.state.has_incomplete_progress:
            await wizard.on_event(ResumeProgress())
        await wizard.on_event(SelectMode(ReviewMode.SOLO))
        ...
        await wizard.close()
    """

    def __init__(
        self,
        auth: AuthContext,
        task_store: TaskStore,
        week_store: WeekStore,
        progress: ProgressStore[ReviewProgressState],
        streak_service: StreakService,
        goal_store: GoalStore | None = None,
        note_debounce: float | None = None,
        language: str | None = None,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        settings = get_settings()
        self._auth = auth
        self._task_store = task_store
        self._week_store = week_store
        self._progress = progress
        self._streaks = streak_service
        self._goal_store = goal_store
        self._note_debounce = (
            note_debounce if note_debounce is not None else settings.note_debounce_seconds
        )
        self._language = language or settings.language
        self._clock = clock

        self._state = ReviewState()
        self._user: AuthenticatedUser | None = None
        self._persisted_review: tuple[int | None, str | None] | None = None
        self._rating_note_debouncer = Debouncer(self._note_debounce, name="rating_note")
        self._task_note_debouncers: dict[str, Debouncer] = {}
        self._closed = False
        self.side_effects = SideEffectChannel()

    @property
    def state(self) -> ReviewState:
        return self._state

    # =========================================================================
    # Lifecycle
    # =========================================================================

    async def start(self) -> None:
        """Wait for auth, then load the week, its tasks, the streak and any checkpoint."""
        self._ensure_open()
        await self._load()

    async def _load(self) -> None:
        user = await self._auth.await_authenticated()
        self._user = user
        self._state = replace(self._state, is_loading=True)

        try:
            week = await self._week_store.get_or_create_current(user.id)
            saved = await self._progress.load()
            has_incomplete = saved.is_in_progress and saved.week_id == week.id
            if not has_incomplete and saved.week_id is not None:
                logger.info("review_checkpoint_discarded week_id=%s", saved.week_id)
                await self._progress.clear()
            tasks = await first(self._task_store.observe_for_week(week.id, user.id))
            streak = await self._streaks.calculate(user.id)
        except StoreError as e:
            logger.warning("review_load_failed error=%s", e)
            self._state = replace(
                self._state,
                is_loading=False,
                error=errors.get_message(errors.LOAD_FAILED, self._language),
            )
            return

        self._state = replace(
            self._state,
            week=week,
            is_review_window_open=is_review_window_open(self._clock()),
            tasks_to_review=order_for_review(tasks),
            streak=streak,
            has_incomplete_progress=has_incomplete,
            is_loading=False,
            error=None,
        )
        logger.info(
            "review_loaded week_id=%s tasks=%d streak=%d resumable=%s",
            week.id, len(tasks), streak.count, has_incomplete,
        )

    async def close(self) -> None:
        """Drop pending note writes and wait for started ones; later events raise StateError."""
        self._closed = True
        await self._rating_note_debouncer.cancel()
        for debouncer in self._task_note_debouncers.values():
            await debouncer.cancel()
        self._task_note_debouncers.clear()

    # =========================================================================
    # Event dispatch
    # =========================================================================

    async def on_event(self, event: ReviewEvent) -> None:
        """Handle one UI event."""
        self._ensure_open()
        user_id = self._user.id if self._user else None
        week_id = self._state.week.id if self._state.week else None
        with wizard_log_context("review", user_id, week_id):
            await self._dispatch(event)

    async def _dispatch(self, event: ReviewEvent) -> None:
        if isinstance(event, DismissError):
            self._state = replace(self._state, error=None)
            return
        if isinstance(event, Retry):
            await self._load()
            return

        self._ensure_loaded()
        if self._state.has_incomplete_progress and not isinstance(event, _PROGRESS_DECISION_EVENTS):
            raise StateError("Resume or discard the saved review first")

        if isinstance(event, ResumeProgress):
            await self._handle_resume()
        elif isinstance(event, DiscardProgress):
            await self._handle_discard()
        elif isinstance(event, SelectMode):
            self._require_step(ReviewStep.MODE_SELECT)
            self._state = replace(self._state, review_mode=event.mode)
            await self._go_to(ReviewStep.RATING)
        elif isinstance(event, SelectRating):
            await self._handle_select_rating(event.rating)
        elif isinstance(event, UpdateRatingNote):
            self._require_step(ReviewStep.RATING)
            self._state = replace(self._state, overall_note=event.note)
            self._rating_note_debouncer.schedule(self._checkpoint)
        elif isinstance(event, ContinueToTasks):
            await self._handle_continue_to_tasks()
        elif isinstance(event, SelectTaskOutcome):
            await self._handle_select_outcome(event.task_id, event.status)
        elif isinstance(event, UpdateTaskNote):
            self._handle_update_task_note(event.task_id, event.note)
        elif isinstance(event, NextTask):
            await self._handle_next_task()
        elif isinstance(event, PreviousTask):
            await self._handle_previous_task()
        elif isinstance(event, QuickFinish):
            await self.quick_finish()
        elif isinstance(event, CompleteReview):
            await self.complete_review()
        elif isinstance(event, StartNextWeek):
            self._require_step(ReviewStep.SUMMARY)
            if await self.complete_review():
                self.side_effects.send(SideEffect.exit_wizard(destination="planning"))
        elif isinstance(event, Done):
            self._require_step(ReviewStep.SUMMARY)
            if await self.complete_review():
                self.side_effects.send(SideEffect.exit_wizard())
        elif isinstance(event, PassToPartner):
            self.side_effects.send(SideEffect.show_pass_to_partner())
        elif isinstance(event, AddReaction):
            if event.emoji not in REACTION_EMOJI:
                raise ContractViolation(f"Invalid reaction emoji: {event.emoji!r}")
            self._require_task(event.task_id)
            logger.debug("review_reaction_added task_id=%s", event.task_id)
        else:
            raise ContractViolation(f"Unhandled review event: {type(event).__name__}")

    # =========================================================================
    # Rating step
    # =========================================================================

    async def _handle_select_rating(self, rating: int) -> None:
        self._require_step(ReviewStep.RATING)
        if isinstance(rating, bool) or not isinstance(rating, int) or not 1 <= rating <= 5:
            self._state = replace(
                self._state,
                rating_error=errors.get_message(errors.RATING_REQUIRED, self._language),
            )
            return
        self._state = replace(self._state, overall_rating=rating, rating_error=None)
        await self._checkpoint()

    async def _handle_continue_to_tasks(self) -> None:
        self._require_step(ReviewStep.RATING)
        state = self._state
        if not state.can_proceed_from_rating:
            message = errors.get_message(errors.RATING_REQUIRED, self._language)
            self._state = replace(state, rating_error=message)
            self.side_effects.send(SideEffect.show_message(message, code=errors.RATING_REQUIRED))
            return

        try:
            await self._persist_review()
        except StoreError as e:
            self._report(errors.RATING_SAVE_FAILED, e)
            return

        if state.tasks_to_review:
            self._state = replace(self._state, current_task_index=0)
            await self._go_to(ReviewStep.TASK_REVIEW)
        else:
            await self._go_to_summary()

    # =========================================================================
    # Task review step
    # =========================================================================

    async def _handle_select_outcome(self, task_id: str, status: TaskStatus) -> None:
        if status not in REVIEW_OUTCOMES:
            raise ContractViolation(f"Invalid review outcome: {status}")
        self._require_step(ReviewStep.TASK_REVIEW)
        task = self._require_task(task_id)
        previous = self._state.task_outcomes.get(task_id, task.status)

        try:
            await self._task_store.update_status(task_id, status)
        except StoreError as e:
            self._report(errors.OUTCOME_SAVE_FAILED, e)
            return

        self._state = replace(
            self._state, task_outcomes={**self._state.task_outcomes, task_id: status},
        )
        if status == TaskStatus.COMPLETED and previous != TaskStatus.COMPLETED:
            await self._advance_goal(task)
        await self._checkpoint()

    async def _advance_goal(self, task: Task) -> None:
        if self._goal_store is None or task.linked_goal_id is None:
            return
        try:
            await self._goal_store.increment_progress(task.linked_goal_id, 1)
        except StoreError as e:
            # The outcome itself is saved; only the goal counter lags.
            logger.warning("goal_progress_failed goal_id=%s error=%s", task.linked_goal_id, e)

    def _handle_update_task_note(self, task_id: str, note: str) -> None:
        self._require_step(ReviewStep.TASK_REVIEW)
        self._require_task(task_id)
        self._state = replace(self._state, task_notes={**self._state.task_notes, task_id: note})

        debouncer = self._task_note_debouncers.get(task_id)
        if debouncer is None:
            debouncer = Debouncer(self._note_debounce, name=f"task_note:{task_id}")
            self._task_note_debouncers[task_id] = debouncer

        async def write_note() -> None:
            try:
                await self._task_store.update_review_note(task_id, note.strip() or None)
            except StoreError as e:
                logger.warning("task_note_save_failed task_id=%s error=%s", task_id, e)
                return
            await self._checkpoint()

        debouncer.schedule(write_note)

    async def _handle_next_task(self) -> None:
        self._require_step(ReviewStep.TASK_REVIEW)
        if self._state.is_last_task:
            await self._go_to_summary()
            return
        index = self._state.current_task_index + 1
        self._state = replace(self._state, current_task_index=index)
        await self._checkpoint()
        self.side_effects.send(SideEffect.navigate_to_step(ReviewStep.TASK_REVIEW.value, index))

    async def _handle_previous_task(self) -> None:
        self._require_step(ReviewStep.TASK_REVIEW)
        if self._state.current_task_index == 0:
            await self._go_to(ReviewStep.RATING)
            return
        index = self._state.current_task_index - 1
        self._state = replace(self._state, current_task_index=index)
        await self._checkpoint()
        self.side_effects.send(SideEffect.navigate_to_step(ReviewStep.TASK_REVIEW.value, index))

    # =========================================================================
    # Quick finish and completion
    # =========================================================================

    async def quick_finish(self) -> None:
        """Mark every task without an outcome SKIPPED, complete the review, show the summary.

        Tasks that already have an outcome are never re-marked, so repeating
        a quick finish changes nothing.
        """
        if self._state.current_step is ReviewStep.MODE_SELECT:
            raise ContractViolation("Quick finish is not available before a mode is selected")

        outcomes = dict(self._state.task_outcomes)
        unreviewed = [t for t in self._state.tasks_to_review if t.id not in outcomes]
        self._state = replace(self._state, is_saving=True)
        try:
            for task in unreviewed:
                await self._task_store.update_status(task.id, TaskStatus.SKIPPED)
                outcomes[task.id] = TaskStatus.SKIPPED
        except StoreError as e:
            # Outcomes already written stay recorded; a retry continues with the rest.
            self._state = replace(self._state, task_outcomes=outcomes, is_saving=False)
            self._report(errors.REVIEW_COMPLETE_FAILED, e)
            return

        logger.info("review_quick_finish skipped=%d", len(unreviewed))
        self._state = replace(
            self._state,
            task_outcomes=outcomes,
            current_step=ReviewStep.SUMMARY,
            stats=get_review_stats(outcomes),
            is_saving=False,
        )
        if await self.complete_review():
            self.side_effects.send(SideEffect.navigate_to_step(ReviewStep.SUMMARY.value))

    async def complete_review(self) -> bool:
        """
        Finalize the review: persist rating/note if needed, clear the
        checkpoint and recompute the streak. Safe to call repeatedly.

        Returns:
            True when the review is complete, False when a store failed
            (a message has been emitted)
        """
        user = self._require_user()
        if self._state.review_completed:
            return True

        try:
            await self._persist_review()
            await self._progress.clear()
            streak = await self._streaks.calculate(user.id)
        except StoreError as e:
            self._report(errors.REVIEW_COMPLETE_FAILED, e)
            return False

        self._state = replace(
            self._state,
            streak=streak,
            review_completed=True,
            has_incomplete_progress=False,
        )
        logger.info(
            "review_completed week_id=%s streak=%d pending_milestone=%s",
            self._require_week().id, streak.count, streak.pending_milestone,
        )
        return True

    async def _persist_review(self) -> None:
        """Write rating and note to the week unless exactly these values are already saved."""
        user = self._require_user()
        week = self._require_week()
        review = (self._state.overall_rating, self._state.overall_note.strip() or None)
        if review == self._persisted_review:
            return
        await self._week_store.update_review(week.id, user.id, review[0], review[1])
        self._persisted_review = review

    # =========================================================================
    # Resume / discard
    # =========================================================================

    async def _handle_resume(self) -> None:
        if not self._state.has_incomplete_progress:
            raise ContractViolation("No saved review to resume")
        try:
            saved = await self._progress.load()
        except StoreError as e:
            self._report(errors.LOAD_FAILED, e)
            return

        week = self._require_week()
        if not saved.is_in_progress or saved.week_id != week.id:
            self._state = replace(self._state, has_incomplete_progress=False)
            return

        tasks = restore_review_order(self._state.tasks_to_review, saved.task_order)
        last_index = max(len(tasks) - 1, 0)
        self._state = replace(
            self._state,
            tasks_to_review=tasks,
            review_mode=saved.review_mode,
            current_step=saved.current_step,
            overall_rating=saved.overall_rating,
            overall_note=saved.overall_note,
            current_task_index=min(saved.current_task_index, last_index),
            task_outcomes=dict(saved.task_outcomes),
            task_notes=dict(saved.task_notes),
            stats=(
                get_review_stats(saved.task_outcomes)
                if saved.current_step is ReviewStep.SUMMARY else None
            ),
            has_incomplete_progress=False,
        )
        logger.info("review_resumed step=%s index=%d",
                    saved.current_step, self._state.current_task_index)

        step = saved.current_step
        if step is ReviewStep.TASK_REVIEW:
            self.side_effects.send(
                SideEffect.navigate_to_step(step.value, self._state.current_task_index)
            )
        elif step is not ReviewStep.MODE_SELECT:
            self.side_effects.send(SideEffect.navigate_to_step(step.value))

    async def _handle_discard(self) -> None:
        try:
            await self._progress.clear()
        except StoreError as e:
            self._report(errors.LOAD_FAILED, e)
            return
        self._state = replace(
            self._state,
            has_incomplete_progress=False,
            review_mode=ReviewMode.SOLO,
            current_step=ReviewStep.MODE_SELECT,
            overall_rating=None,
            overall_note="",
            rating_error=None,
            current_task_index=0,
            task_outcomes={},
            task_notes={},
            stats=None,
        )
        logger.info("review_progress_discarded")

    # =========================================================================
    # Navigation and checkpointing
    # =========================================================================

    async def _go_to(self, step: ReviewStep) -> None:
        logger.info("review_step_changed from=%s to=%s", self._state.current_step, step)
        self._state = replace(self._state, current_step=step)
        await self._checkpoint()
        if step is ReviewStep.TASK_REVIEW:
            self.side_effects.send(
                SideEffect.navigate_to_step(step.value, self._state.current_task_index)
            )
        else:
            self.side_effects.send(SideEffect.navigate_to_step(step.value))

    async def _go_to_summary(self) -> None:
        self._state = replace(self._state, stats=get_review_stats(self._state.task_outcomes))
        await self._go_to(ReviewStep.SUMMARY)

    def _snapshot(self) -> ReviewProgressState:
        state = self._state
        return ReviewProgressState(
            week_id=state.week.id if state.week else None,
            review_mode=state.review_mode,
            current_step=state.current_step,
            overall_rating=state.overall_rating,
            overall_note=state.overall_note,
            current_task_index=state.current_task_index,
            task_outcomes=dict(state.task_outcomes),
            task_notes=dict(state.task_notes),
            task_order=[task.id for task in state.tasks_to_review],
            is_in_progress=True,
            last_updated_at=int(datetime.now(UTC).timestamp() * 1000),
        )

    async def _checkpoint(self) -> None:
        # A finished review has no checkpoint; late note writes must not recreate it.
        if self._state.review_completed or self._closed:
            return
        try:
            await self._progress.save(self._snapshot())
        except ProgressStoreError as e:
            logger.warning("review_checkpoint_failed error=%s", e)

    # =========================================================================
    # Guards
    # =========================================================================

    def _report(self, code: str, error: StoreError) -> None:
        logger.warning("review_store_failed code=%s error=%s", code, error)
        self.side_effects.send(
            SideEffect.show_message(errors.get_message(code, self._language), code=code)
        )

    def _ensure_open(self) -> None:
        if self._closed:
            raise StateError("Review wizard is closed")

    def _ensure_loaded(self) -> None:
        if self._user is None or self._state.week is None:
            raise StateError("Review wizard is not loaded")

    def _require_user(self) -> AuthenticatedUser:
        if self._user is None:
            raise StateError("Review wizard is not loaded")
        return self._user

    def _require_week(self) -> Week:
        week = self._state.week
        if week is None:
            raise StateError("Review wizard is not loaded")
        return week

    def _require_step(self, step: ReviewStep) -> None:
        if self._state.current_step is not step:
            raise ContractViolation(f"Event for step {step} while at {self._state.current_step}")

    def _require_task(self, task_id: str) -> Task:
        for task in self._state.tasks_to_review:
            if task.id == task_id:
                return task
        raise ContractViolation(f"Task {task_id} is not part of this review")


__all__ = ["ReviewWizard"]
