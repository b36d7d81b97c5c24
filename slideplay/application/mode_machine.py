"""
Interaction mode state machine.

Base modes (presentation / live-edit / animation-builder) are mutually
exclusive; fullscreen is an orthogonal sub-state. ``request`` is the only way
to change either, and it may reject a transition.
"""

from dataclasses import dataclass
from typing import Callable, List

from slideplay.domain.value_objects.modes import FullscreenMode, ModeTransition, ViewerMode
from slideplay.infra.config.logging_config import get_logger


@dataclass(frozen=True)
class ModeSnapshot:
    mode: ViewerMode = ViewerMode.PRESENTATION
    fullscreen: FullscreenMode = FullscreenMode.NONE

    @property
    def is_magnified(self) -> bool:
        return self.fullscreen != FullscreenMode.NONE

    @property
    def edit_active(self) -> bool:
        return self.mode == ViewerMode.LIVE_EDIT or self.fullscreen == FullscreenMode.EDIT


ModeListener = Callable[[ModeSnapshot, ModeSnapshot], None]


def _transition(state: ModeSnapshot, request: ModeTransition) -> ModeSnapshot:
    mode, fullscreen = state.mode, state.fullscreen

    if request == ModeTransition.ENTER_LIVE_EDIT:
        if mode == ViewerMode.PRESENTATION:
            mode = ViewerMode.LIVE_EDIT
    elif request == ModeTransition.EXIT_LIVE_EDIT:
        if mode == ViewerMode.LIVE_EDIT:
            mode = ViewerMode.PRESENTATION
    elif request == ModeTransition.ENTER_BUILDER:
        if mode == ViewerMode.PRESENTATION:
            mode = ViewerMode.ANIMATION_BUILDER
    elif request == ModeTransition.EXIT_BUILDER:
        if mode == ViewerMode.ANIMATION_BUILDER:
            mode = ViewerMode.PRESENTATION
    elif request == ModeTransition.ENTER_FULLSCREEN_VIEW:
        fullscreen = FullscreenMode.VIEW
    elif request == ModeTransition.ENTER_FULLSCREEN_EDIT:
        fullscreen = FullscreenMode.EDIT
    elif request == ModeTransition.EXIT_FULLSCREEN:
        fullscreen = FullscreenMode.NONE

    return ModeSnapshot(mode=mode, fullscreen=fullscreen)


class ModeMachine:
    def __init__(self) -> None:
        self._state = ModeSnapshot()
        self._listeners: List[ModeListener] = []
        self._log = get_logger("application.mode")

    @property
    def state(self) -> ModeSnapshot:
        return self._state

    @property
    def mode(self) -> ViewerMode:
        return self._state.mode

    @property
    def fullscreen(self) -> FullscreenMode:
        return self._state.fullscreen

    def subscribe(self, listener: ModeListener) -> Callable[[], None]:
        self._listeners.append(listener)
        return lambda: self._listeners.remove(listener)

    def request(self, transition: ModeTransition) -> bool:
        """Apply a transition. Returns False (and changes nothing) if rejected."""
        before = self._state
        after = _transition(before, transition)
        if after == before:
            self._log.debug(
                "mode.transition.rejected",
                request=transition.value,
                mode=before.mode.value,
                fullscreen=before.fullscreen.value,
            )
            return False

        self._state = after
        self._log.info(
            "mode.transition",
            request=transition.value,
            mode=after.mode.value,
            fullscreen=after.fullscreen.value,
        )
        for listener in list(self._listeners):
            listener(before, after)
        return True
