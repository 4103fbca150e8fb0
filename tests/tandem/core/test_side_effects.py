"""Tests for side effects and the one-shot side-effect channel."""

import pytest

from tandem.core.side_effects import SideEffect, SideEffectChannel, SideEffectType


class TestSideEffectFactories:
    def test_navigate_to_step_with_index(self):
        effect = SideEffect.navigate_to_step("TASK_REVIEW", task_index=2)
        assert effect.effect_type is SideEffectType.NAVIGATE_TO_STEP
        assert effect.payload == {"step": "TASK_REVIEW", "task_index": 2}

    def test_navigate_to_step_without_index(self):
        assert SideEffect.navigate_to_step("SUMMARY").payload == {"step": "SUMMARY"}

    def test_exit_wizard_destination(self):
        assert SideEffect.exit_wizard().payload == {}
        assert SideEffect.exit_wizard(destination="planning").payload == {"destination": "planning"}

    def test_show_message(self):
        effect = SideEffect.show_message("Saved", code="X")
        assert effect.effect_type is SideEffectType.SHOW_MESSAGE
        assert effect.payload == {"message": "Saved", "code": "X"}

    def test_effects_have_unique_ids(self):
        assert SideEffect.trigger_haptic().id != SideEffect.trigger_haptic().id


class TestSideEffectChannel:
    """Each effect is delivered at most once."""

    def test_drain_delivers_once(self):
        channel = SideEffectChannel()
        channel.send(SideEffect.clear_focus())
        channel.send(SideEffect.navigate_back())

        assert len(channel) == 2
        drained = channel.drain()
        assert [e.effect_type for e in drained] == [
            SideEffectType.CLEAR_FOCUS,
            SideEffectType.NAVIGATE_BACK,
        ]
        assert channel.drain() == []

    @pytest.mark.asyncio
    async def test_receive_returns_in_order(self):
        channel = SideEffectChannel()
        channel.send(SideEffect.trigger_haptic())
        channel.send(SideEffect.show_pass_to_partner())

        first = await channel.receive()
        second = await channel.receive()
        assert first.effect_type is SideEffectType.TRIGGER_HAPTIC
        assert second.effect_type is SideEffectType.SHOW_PASS_TO_PARTNER
        assert len(channel) == 0
