"""
Keyboard command routing.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from slideplay.api.schemas.messages import KeyEvent
from slideplay.domain.value_objects.modes import FullscreenMode, ModeTransition, ViewerMode
from slideplay.infra.config.logging_config import get_logger

if TYPE_CHECKING:
    from slideplay.application.session import ViewerSession

DIGIT_KEYS = frozenset("123456789")


class CommandDispatcher:
    """Maps key events onto mode, animation and navigation commands.

    Precedence: fullscreen-edit passes every key through except Escape; keys
    typed into an editable element are never intercepted; advance/retreat step
    through animation groups before changing slides.
    """

    def __init__(self, session: "ViewerSession") -> None:
        self._session = session
        self._log = get_logger("application.dispatcher")

    async def handle_key(self, event: KeyEvent) -> bool:
        """Returns True when the key was consumed."""
        session = self._session
        modes = session.modes

        if modes.fullscreen == FullscreenMode.EDIT:
            if event.key == "Escape":
                return await session.request_mode(ModeTransition.EXIT_FULLSCREEN)
            return False

        if event.in_editable:
            return False

        key = event.key
        if key in ("f", "F"):
            return await self._toggle_fullscreen(edit=event.shift)
        if key in ("e", "E"):
            return await self._toggle(ViewerMode.LIVE_EDIT)
        if key in ("a", "A"):
            return await self._toggle(ViewerMode.ANIMATION_BUILDER)
        if key == "Escape":
            return await self._escape()

        if len(session.deck) == 0:
            return False
        if key in ("ArrowRight", " ", "Space"):
            await self.advance()
            return True
        if key == "ArrowLeft":
            await self.retreat()
            return True
        if key == "Home":
            return await session.go_to(1)
        if key == "End":
            return await session.go_to(len(session.deck))
        if key in DIGIT_KEYS:
            number = int(key)
            if number > len(session.deck):
                return False
            return await session.go_to(number)
        if key in ("s", "S"):
            if not session.engine.has_animations:
                return False
            session.engine.reveal_all()
            return True
        if key in ("ArrowUp", "ArrowDown") and event.alt:
            return await session.move_current_slide(-1 if key == "ArrowUp" else 1)

        return False

    async def advance(self) -> None:
        session = self._session
        if (
            self._steps_animations()
            and session.engine.has_unrevealed
            and session.engine.reveal_next_group()
        ):
            return
        await session.next_slide()

    async def retreat(self) -> None:
        session = self._session
        if (
            self._steps_animations()
            and session.engine.step > 0
            and session.engine.hide_last_group()
        ):
            return
        await session.previous_slide()

    def _steps_animations(self) -> bool:
        modes = self._session.modes
        return (
            modes.mode == ViewerMode.PRESENTATION
            and modes.state.is_magnified
            and self._session.engine.has_animations
        )

    async def _toggle_fullscreen(self, edit: bool) -> bool:
        session = self._session
        if session.modes.state.is_magnified:
            return await session.request_mode(ModeTransition.EXIT_FULLSCREEN)
        if edit:
            return await session.request_mode(ModeTransition.ENTER_FULLSCREEN_EDIT)
        return await session.request_mode(ModeTransition.ENTER_FULLSCREEN_VIEW)

    async def _toggle(self, mode: ViewerMode) -> bool:
        session = self._session
        current = session.modes.mode
        enter, leave = {
            ViewerMode.LIVE_EDIT: (ModeTransition.ENTER_LIVE_EDIT, ModeTransition.EXIT_LIVE_EDIT),
            ViewerMode.ANIMATION_BUILDER: (ModeTransition.ENTER_BUILDER, ModeTransition.EXIT_BUILDER),
        }[mode]
        if current == mode:
            return await session.request_mode(leave)
        if current == ViewerMode.PRESENTATION:
            return await session.request_mode(enter)
        self._log.debug("dispatcher.toggle.ignored", requested=mode.value, mode=current.value)
        return False

    async def _escape(self) -> bool:
        session = self._session
        if session.modes.state.is_magnified:
            return await session.request_mode(ModeTransition.EXIT_FULLSCREEN)
        if session.modes.mode == ViewerMode.LIVE_EDIT:
            return await session.request_mode(ModeTransition.EXIT_LIVE_EDIT)
        if session.modes.mode == ViewerMode.ANIMATION_BUILDER:
            return await session.request_mode(ModeTransition.EXIT_BUILDER)
        return False
