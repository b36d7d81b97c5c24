"""Tests for the interaction mode state machine."""

import pytest

from slideplay.application.mode_machine import ModeMachine, ModeSnapshot
from slideplay.domain.value_objects.modes import FullscreenMode, ModeTransition, ViewerMode


class TestModeMachine:
    """Test cases for ModeMachine transitions."""

    @pytest.fixture
    def machine(self):
        return ModeMachine()

    def test_initial_state(self, machine):
        assert machine.state == ModeSnapshot(ViewerMode.PRESENTATION, FullscreenMode.NONE)
        assert not machine.state.is_magnified
        assert not machine.state.edit_active

    def test_enter_and_exit_live_edit(self, machine):
        assert machine.request(ModeTransition.ENTER_LIVE_EDIT) is True
        assert machine.mode == ViewerMode.LIVE_EDIT
        assert machine.state.edit_active
        assert machine.request(ModeTransition.EXIT_LIVE_EDIT) is True
        assert machine.mode == ViewerMode.PRESENTATION

    def test_live_edit_and_builder_are_mutually_exclusive(self, machine):
        machine.request(ModeTransition.ENTER_BUILDER)
        assert machine.request(ModeTransition.ENTER_LIVE_EDIT) is False
        assert machine.mode == ViewerMode.ANIMATION_BUILDER

        machine.request(ModeTransition.EXIT_BUILDER)
        machine.request(ModeTransition.ENTER_LIVE_EDIT)
        assert machine.request(ModeTransition.ENTER_BUILDER) is False
        assert machine.mode == ViewerMode.LIVE_EDIT

    def test_exit_from_wrong_mode_is_rejected(self, machine):
        assert machine.request(ModeTransition.EXIT_LIVE_EDIT) is False
        assert machine.request(ModeTransition.EXIT_BUILDER) is False

    def test_fullscreen_is_orthogonal_to_base_mode(self, machine):
        machine.request(ModeTransition.ENTER_LIVE_EDIT)
        assert machine.request(ModeTransition.ENTER_FULLSCREEN_VIEW) is True
        assert machine.state == ModeSnapshot(ViewerMode.LIVE_EDIT, FullscreenMode.VIEW)
        assert machine.request(ModeTransition.EXIT_FULLSCREEN) is True
        assert machine.state == ModeSnapshot(ViewerMode.LIVE_EDIT, FullscreenMode.NONE)

    def test_fullscreen_edit_makes_text_editable_in_presentation(self, machine):
        machine.request(ModeTransition.ENTER_FULLSCREEN_EDIT)
        assert machine.mode == ViewerMode.PRESENTATION
        assert machine.state.is_magnified
        assert machine.state.edit_active

    def test_exit_fullscreen_when_not_fullscreen_is_noop(self, machine):
        assert machine.request(ModeTransition.EXIT_FULLSCREEN) is False

    def test_subscribers_get_before_and_after(self, machine):
        seen = []
        unsubscribe = machine.subscribe(lambda before, after: seen.append((before, after)))

        machine.request(ModeTransition.ENTER_FULLSCREEN_VIEW)
        machine.request(ModeTransition.ENTER_FULLSCREEN_VIEW)  # rejected, no change

        assert len(seen) == 1
        before, after = seen[0]
        assert before.fullscreen == FullscreenMode.NONE
        assert after.fullscreen == FullscreenMode.VIEW

        unsubscribe()
        machine.request(ModeTransition.EXIT_FULLSCREEN)
        assert len(seen) == 1
