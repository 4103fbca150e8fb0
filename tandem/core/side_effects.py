"""
Side Effects for Tandem.

Side effects are one-shot instructions a wizard emits for the hosting UI
(navigate, show a transient message, haptic feedback). The UI is the sole
consumer; each emitted effect is delivered at most once.
"""

from __future__ import annotations

import asyncio
import uuid
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum
from typing import Any


class SideEffectType(Enum):
    """Closed vocabulary of UI side effects."""

    NAVIGATE_TO_STEP = "navigate_to_step"
    NAVIGATE_BACK = "navigate_back"
    EXIT_WIZARD = "exit_wizard"
    SHOW_MESSAGE = "show_message"
    TRIGGER_HAPTIC = "trigger_haptic"
    CLEAR_FOCUS = "clear_focus"
    SHOW_PASS_TO_PARTNER = "show_pass_to_partner"


@dataclass(frozen=True)
class SideEffect:
    """A side effect to be consumed by the hosting UI.

    Attributes:
        effect_type: The type of side effect
        payload: Data the UI needs to act on the effect
        id: Unique identifier for this effect
        created_at: When the effect was created
    """

    effect_type: SideEffectType
    payload: dict[str, Any] = field(default_factory=dict)
    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    created_at: datetime = field(default_factory=lambda: datetime.now(UTC))

    @classmethod
    def navigate_to_step(cls, step: str, task_index: int | None = None) -> SideEffect:
        """Navigate to a wizard step (and, for task review, a task index)."""
        payload: dict[str, Any] = {"step": step}
        if task_index is not None:
            payload["task_index"] = task_index
        return cls(effect_type=SideEffectType.NAVIGATE_TO_STEP, payload=payload)

    @classmethod
    def navigate_back(cls) -> SideEffect:
        return cls(effect_type=SideEffectType.NAVIGATE_BACK)

    @classmethod
    def exit_wizard(cls, destination: str | None = None) -> SideEffect:
        """Leave the wizard, optionally handing over to another flow."""
        payload = {"destination": destination} if destination else {}
        return cls(effect_type=SideEffectType.EXIT_WIZARD, payload=payload)

    @classmethod
    def show_message(cls, message: str, code: str | None = None) -> SideEffect:
        return cls(
            effect_type=SideEffectType.SHOW_MESSAGE,
            payload={"message": message, "code": code},
        )

    @classmethod
    def trigger_haptic(cls) -> SideEffect:
        return cls(effect_type=SideEffectType.TRIGGER_HAPTIC)

    @classmethod
    def clear_focus(cls) -> SideEffect:
        return cls(effect_type=SideEffectType.CLEAR_FOCUS)

    @classmethod
    def show_pass_to_partner(cls) -> SideEffect:
        return cls(effect_type=SideEffectType.SHOW_PASS_TO_PARTNER)


class SideEffectChannel:
    """Buffered, single-consumer channel of side effects.

    ``receive`` and ``drain`` remove effects from the buffer, so a delivered
    effect is never seen twice.
    """

    def __init__(self) -> None:
        self._queue: asyncio.Queue[SideEffect] = asyncio.Queue()

    def send(self, effect: SideEffect) -> None:
        self._queue.put_nowait(effect)

    async def receive(self) -> SideEffect:
        """Wait for the next effect."""
        return await self._queue.get()

    def drain(self) -> list[SideEffect]:
        """Take every buffered effect without waiting."""
        effects: list[SideEffect] = []
        while not self._queue.empty():
            effects.append(self._queue.get_nowait())
        return effects

    def __len__(self) -> int:
        return self._queue.qsize()


__all__ = ["SideEffect", "SideEffectChannel", "SideEffectType"]
