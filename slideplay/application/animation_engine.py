"""
Build-step animation engine.

Drives group visibility on the active slide's surface. The build step is the
number of groups currently revealed; this engine is its only writer.
"""

from __future__ import annotations

import asyncio
from typing import List, Optional

from soupsieve import SelectorSyntaxError

from slideplay.application.ports import SurfaceResolver
from slideplay.domain.entities.slide import Slide
from slideplay.infra.config.logging_config import get_logger
from slideplay.infra.config.settings import Settings, get_settings
from slideplay.infra.surface.surface import SlideSurface, SurfaceMutation

HIDDEN = "animation-hidden"
VISIBLE = "animation-visible"
INSTANT = "animation-instant"


def groups_for_slide(slide: Optional[Slide]) -> List[List[str]]:
    """Selector lists for each group, ascending by ``order`` (stable on ties)."""
    if slide is None:
        return []
    if slide.animation_groups:
        ordered = sorted(slide.animation_groups, key=lambda group: group.order)
        return [group.selectors for group in ordered]
    if slide.build_groups:
        return [list(group) for group in slide.build_groups]
    return []


class AnimationEngine:
    def __init__(
        self, resolve_surface: SurfaceResolver, settings: Optional[Settings] = None
    ) -> None:
        self._resolve = resolve_surface
        self._settings = settings or get_settings()
        self._groups: List[List[str]] = []
        self._step = 0
        self._slide_number: Optional[int] = None
        self._pending: Optional[asyncio.Task] = None
        self._log = get_logger("application.animation")

    # ---------- state ----------
    @property
    def step(self) -> int:
        return self._step

    @property
    def total_groups(self) -> int:
        return len(self._groups)

    @property
    def has_animations(self) -> bool:
        return bool(self._groups)

    @property
    def has_unrevealed(self) -> bool:
        return self._step < len(self._groups)

    @property
    def slide_number(self) -> Optional[int]:
        return self._slide_number

    # ---------- lifecycle ----------
    async def enter_slide(
        self, slide: Optional[Slide], *, backward: bool, magnified: bool
    ) -> bool:
        """Initialize visibility for a newly active slide.

        Returns True once the initial state has been applied to the surface.
        """
        self.cancel()
        self._slide_number = slide.number if slide else None
        self._groups = groups_for_slide(slide)
        self._step = 0
        if not self._groups:
            return False
        return await self._initialize(show_all=backward, magnified=magnified)

    async def reapply(self, *, magnified: bool) -> bool:
        """Restore the current step on a rebuilt surface without flashing."""
        self.cancel()
        if not self._groups:
            return False
        return await self._initialize(show_all=False, magnified=magnified)

    def cancel(self) -> None:
        if self._pending is not None and not self._pending.done():
            self._pending.cancel()
        self._pending = None

    async def _initialize(self, *, show_all: bool, magnified: bool) -> bool:
        task = asyncio.ensure_future(self._wait_for_surface())
        self._pending = task
        try:
            surface = await task
        except asyncio.CancelledError:
            current = asyncio.current_task()
            if task.cancelled() and current is not None and not current.cancelling():
                # Superseded by newer navigation or teardown
                return False
            raise
        finally:
            if self._pending is task:
                self._pending = None

        if surface is None:
            # Content stays visible, just not animated
            self._step = len(self._groups)
            return False

        self._apply_initial(surface, show_all=show_all, magnified=magnified)
        return True

    async def _wait_for_surface(self) -> Optional[SlideSurface]:
        """Bounded poll for a surface, then a one-shot observer for its content."""
        settings = self._settings
        surface = None
        for _ in range(max(1, settings.surface_poll_attempts)):
            surface = self._resolve()
            if surface is not None:
                break
            await asyncio.sleep(settings.surface_poll_interval_s)

        if surface is None:
            self._log.warning(
                "animation.surface.not_ready",
                slide_number=self._slide_number,
                reason="no_surface",
            )
            return None
        if surface.has_content():
            return surface

        ready = asyncio.Event()

        def on_mutation(records: List[SurfaceMutation]) -> None:
            if any(r.kind == "childList" and r.added for r in records):
                if surface.has_content():
                    ready.set()

        disconnect = surface.observe(on_mutation)
        try:
            await asyncio.wait_for(ready.wait(), settings.surface_observe_timeout_s)
        except asyncio.TimeoutError:
            pass
        finally:
            disconnect()

        if surface.is_attached and surface.has_content():
            return surface
        self._log.warning(
            "animation.surface.not_ready",
            slide_number=self._slide_number,
            reason="empty_surface",
        )
        return None

    def _apply_initial(self, surface: SlideSurface, *, show_all: bool, magnified: bool) -> None:
        surface.assign_build_ids()
        total = len(self._groups)

        if not magnified or show_all or self._step >= total:
            # Nothing to reveal outside a magnified display; backward entry is fully built
            for group in self._groups:
                self._show(surface, group, instant=True)
            self._step = total
        elif self._step > 0:
            # Single pass per group so already-revealed groups never blink
            for index, group in enumerate(self._groups):
                if index < self._step:
                    self._show(surface, group, instant=True)
                else:
                    self._hide(surface, group)
        else:
            for group in self._groups:
                self._hide(surface, group)

        self._log.debug(
            "animation.initialized",
            slide_number=self._slide_number,
            step=self._step,
            total=total,
            magnified=magnified,
        )

    # ---------- stepping ----------
    def reveal_next_group(self, surface: Optional[SlideSurface] = None) -> bool:
        if self._step >= len(self._groups):
            return False
        surface = self._attached(surface)
        if surface is None:
            return False
        self._show(surface, self._groups[self._step])
        self._step += 1
        return True

    def hide_last_group(self, surface: Optional[SlideSurface] = None) -> bool:
        if self._step <= 0:
            return False
        surface = self._attached(surface)
        if surface is None:
            return False
        self._hide(surface, self._groups[self._step - 1])
        self._step -= 1
        return True

    def reveal_all(self, surface: Optional[SlideSurface] = None) -> None:
        surface = self._attached(surface)
        if surface is not None:
            for group in self._groups:
                self._show(surface, group, instant=True)
        self._step = len(self._groups)

    def set_fully_built(self, surface: Optional[SlideSurface] = None) -> None:
        self.reveal_all(surface)

    # ---------- surface helpers ----------
    def _attached(self, surface: Optional[SlideSurface]) -> Optional[SlideSurface]:
        if surface is None:
            surface = self._resolve()
        if surface is None or not surface.is_attached:
            return None
        return surface

    def _select(self, surface: SlideSurface, selector: str):
        try:
            return surface.select(selector)
        except SelectorSyntaxError:
            self._log.debug("animation.selector.invalid", selector=selector)
            return []

    def _show(self, surface: SlideSurface, group: List[str], instant: bool = False) -> None:
        for selector in group:
            for element in self._select(surface, selector):
                if instant:
                    surface.update_classes(element, add=(VISIBLE, INSTANT), remove=(HIDDEN,))
                else:
                    surface.update_classes(element, add=(VISIBLE,), remove=(HIDDEN, INSTANT))

    def _hide(self, surface: SlideSurface, group: List[str]) -> None:
        for selector in group:
            for element in self._select(surface, selector):
                surface.update_classes(element, add=(HIDDEN,), remove=(VISIBLE, INSTANT))
