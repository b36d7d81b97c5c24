"""
Viewer session: one open deck and everything acting on it.

Owns the deck, the current slide and the surface host, wires the mode machine,
animation engine, live editor, builder and export pipeline together, and
routes every inbound host message or UI event.
"""

from __future__ import annotations

import asyncio
from typing import List, Optional, Set, assert_never

from slideplay.api.schemas.messages import (
    BuildCompleteMessage,
    BuilderCreateGroupEvent,
    BuilderDeleteGroupEvent,
    BuilderToggleElementEvent,
    BuildProgressMessage,
    BuildStartedMessage,
    CaptureErrorMessage,
    CaptureResultMessage,
    DeckLoadedMessage,
    ElementBlurEvent,
    ElementClickEvent,
    ElementInputEvent,
    ExportCancelledMessage,
    ExportFolderReadyMessage,
    ExportRequestEvent,
    InboundMessage,
    KeyEvent,
    ReorderSlidesMessage,
    SaveResultMessage,
    SlideUpdatedMessage,
    UiEvent,
)
from slideplay.application.animation_engine import AnimationEngine
from slideplay.application.builder import AnimationBuilder
from slideplay.application.capture import CaptureClient
from slideplay.application.dispatcher import CommandDispatcher
from slideplay.application.export_pipeline import ExportPipeline
from slideplay.application.live_edit import LiveEditor
from slideplay.application.mode_machine import ModeMachine, ModeSnapshot
from slideplay.application.ports import HostChannelPort
from slideplay.domain.entities.build_progress import BuildProgress
from slideplay.domain.entities.slide import Deck, Slide
from slideplay.domain.value_objects.modes import ModeTransition, ViewerMode
from slideplay.infra.config.logging_config import get_logger
from slideplay.infra.config.settings import Settings, get_settings
from slideplay.infra.export.pdf_assembler import PdfAssembler
from slideplay.infra.surface.surface import SurfaceHost


class ViewerSession:
    def __init__(
        self,
        channel: HostChannelPort,
        settings: Optional[Settings] = None,
        deck: Optional[Deck] = None,
    ) -> None:
        self.settings = settings or get_settings()
        self.channel = channel
        self.deck = deck if deck is not None else Deck()
        self.current_slide = 1
        self.navigated_backward = False

        self.modes = ModeMachine()
        self.surfaces = SurfaceHost()
        self.engine = AnimationEngine(self.surfaces.resolve, self.settings)
        self.editor = LiveEditor(channel, self.surfaces.resolve, self.deck, self.settings)
        self.builder = AnimationBuilder(channel, self.surfaces.resolve, self.deck)
        self.capture = CaptureClient(channel, self.settings)
        self.exports = ExportPipeline(
            channel,
            self.capture,
            self.modes,
            self.deck,
            PdfAssembler(self.settings.slide_width, self.settings.slide_height),
        )
        self.build_progress = BuildProgress()
        self.dispatcher = CommandDispatcher(self)

        self._tasks: Set[asyncio.Task] = set()
        self._log = get_logger("application.session")

    # ---------- slides ----------
    @property
    def active_slide(self) -> Optional[Slide]:
        return self.deck.get(self.current_slide)

    async def load_deck(
        self, slides: List[Slide], deck_id: Optional[str] = None, name: Optional[str] = None
    ) -> None:
        await self.editor.on_mode_exit()
        self.deck.deck_id = deck_id
        self.deck.name = name
        self.deck.slides = sorted(slides, key=lambda s: s.number)
        self.current_slide = 1
        self.navigated_backward = False
        self._log.info("session.deck.loaded", deck_id=deck_id, slides=len(self.deck))
        await self._show_current()

    async def go_to(self, number: int, backward: bool = False) -> bool:
        if self.deck.get(number) is None:
            return False
        if self.editor.active_element is not None:
            await self.editor.handle_blur()
        self.current_slide = number
        self.navigated_backward = backward
        await self._show_current()
        return True

    async def next_slide(self) -> bool:
        if len(self.deck) == 0:
            return False
        target = 1 if self.current_slide >= len(self.deck) else self.current_slide + 1
        return await self.go_to(target)

    async def previous_slide(self) -> bool:
        if len(self.deck) == 0:
            return False
        target = len(self.deck) if self.current_slide <= 1 else self.current_slide - 1
        return await self.go_to(target, backward=True)

    async def move_current_slide(self, offset: int) -> bool:
        """Swap the current slide with a neighbour and tell the host."""
        state = self.modes.state
        if state.mode != ViewerMode.PRESENTATION or state.is_magnified:
            return False
        target = self.current_slide + offset
        if not 1 <= target <= len(self.deck):
            return False

        new_order = [s.number for s in self.deck.slides]
        here, there = self.current_slide - 1, target - 1
        new_order[here], new_order[there] = new_order[there], new_order[here]
        self.deck.reorder(new_order)
        self.current_slide = target
        self.navigated_backward = False
        await self.channel.send(ReorderSlidesMessage(new_order=new_order))
        self._log.info("session.slides.reordered", new_order=new_order)
        await self._show_current()
        return True

    async def _show_current(self) -> None:
        slide = self.active_slide
        if slide is None:
            self.surfaces.unmount()
            await self.engine.enter_slide(None, backward=False, magnified=False)
            return
        self.surfaces.render(slide.number, slide.markup)
        await self.engine.enter_slide(
            slide,
            backward=self.navigated_backward,
            magnified=self.modes.state.is_magnified,
        )
        if self.modes.mode == ViewerMode.ANIMATION_BUILDER:
            self.builder.scan(slide.number)

    async def _rebuild_surface(self) -> None:
        """Re-render the current slide in place, keeping the build step."""
        slide = self.active_slide
        if slide is None:
            return
        if self.editor.active_element is not None:
            # Dirty text lives only on the old surface; persist it before re-rendering
            await self.editor.handle_blur()
            slide = self.active_slide
        self.editor.on_surface_rebuilt()
        self.surfaces.render(slide.number, slide.markup)
        await self.engine.reapply(magnified=self.modes.state.is_magnified)

    # ---------- modes ----------
    async def request_mode(self, transition: ModeTransition) -> bool:
        before = self.modes.state
        if not self.modes.request(transition):
            return False
        await self._after_mode_change(before, self.modes.state)
        return True

    async def _after_mode_change(self, before: ModeSnapshot, after: ModeSnapshot) -> None:
        if before.edit_active and not after.edit_active:
            await self.editor.on_mode_exit()
        if before.mode == ViewerMode.ANIMATION_BUILDER and after.mode != ViewerMode.ANIMATION_BUILDER:
            self.builder.reset()
        if before.is_magnified != after.is_magnified:
            await self._rebuild_surface()
        if after.mode == ViewerMode.ANIMATION_BUILDER and before.mode != ViewerMode.ANIMATION_BUILDER:
            if self.active_slide is not None:
                self.builder.scan(self.current_slide)

    # ---------- inbound ----------
    async def receive(self, message: InboundMessage | UiEvent) -> None:
        """Route one parsed inbound message or UI event."""
        self.channel.deliver(message)

        match message:
            case CaptureResultMessage() | CaptureErrorMessage():
                if not self.capture.is_pending(message.request_id):
                    self._log.info("export.capture.late_result", request_id=message.request_id)
            case ExportFolderReadyMessage() | ExportCancelledMessage():
                if not self.exports.is_exporting:
                    self._log.debug("export.destination.unexpected", type=message.type)
            case SaveResultMessage():
                await self.editor.handle_save_result(message)
            case SlideUpdatedMessage():
                await self._on_slide_updated(message)
            case DeckLoadedMessage():
                await self.load_deck(
                    [payload.to_domain() for payload in message.slides],
                    deck_id=message.deck_id,
                    name=message.deck_name,
                )
            case BuildStartedMessage():
                self.build_progress.start(
                    message.build_id, message.mode, message.total_slides, message.start_slide
                )
            case BuildProgressMessage():
                self.build_progress.progress(
                    message.current_slide, message.total_slides, message.built_count
                )
            case BuildCompleteMessage():
                self.build_progress.finish(
                    message.built_count, message.error_count, message.cancelled
                )
            case KeyEvent():
                await self.dispatcher.handle_key(message)
            case ElementClickEvent():
                await self._on_element_click(message.build_id)
            case ElementInputEvent():
                self._on_element_input(message)
            case ElementBlurEvent():
                await self.editor.handle_blur()
            case BuilderToggleElementEvent():
                self.builder.toggle_element(message.build_id)
            case BuilderCreateGroupEvent():
                if await self.builder.create_group() is not None:
                    await self._refresh_animations()
            case BuilderDeleteGroupEvent():
                if await self.builder.delete_group(message.group_id):
                    await self._refresh_animations()
            case ExportRequestEvent():
                self._spawn(self._run_export(message))
            case _:
                assert_never(message)

    async def _on_slide_updated(self, message: SlideUpdatedMessage) -> None:
        number = message.slide_number
        self.deck.upsert(number, message.markup)
        self._log.info("session.slide.updated", slide_number=number)

        if self.build_progress.active and number != self.current_slide:
            await self.go_to(number)
            return
        if number != self.current_slide:
            return
        if self.editor.active_element is not None:
            # Re-rendering would drop the element being edited
            self._log.debug("session.slide.render_deferred", slide_number=number)
            return
        await self._rebuild_surface()

    async def _on_element_click(self, build_id: str) -> None:
        if self.modes.mode == ViewerMode.ANIMATION_BUILDER:
            self.builder.toggle_element(build_id)
            return
        if not self.modes.state.edit_active:
            return
        surface = self.surfaces.resolve()
        if surface is None:
            return
        element = surface.find_by_build_id(build_id)
        if element is not None:
            await self.editor.activate(self.current_slide, element)

    def _on_element_input(self, event: ElementInputEvent) -> None:
        element = self.editor.active_element
        if element is None:
            return
        if element.get("data-build-id") != event.build_id:
            self._log.debug("live_edit.input.ignored", build_id=event.build_id)
            return
        self.editor.handle_input(event.text)

    async def _refresh_animations(self) -> None:
        await self.engine.enter_slide(
            self.active_slide, backward=True, magnified=self.modes.state.is_magnified
        )

    # ---------- background work ----------
    async def _run_export(self, event: ExportRequestEvent) -> None:
        if event.kind == "current-png":
            await self.exports.export_current_png(self.current_slide)
        elif event.kind == "all-png":
            await self.exports.export_all_png()
        else:
            await self.exports.export_pdf(event.preset)

    def _spawn(self, coro) -> asyncio.Task:
        task = asyncio.ensure_future(coro)
        self._tasks.add(task)
        task.add_done_callback(self._task_done)
        return task

    def _task_done(self, task: asyncio.Task) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            self._log.error("session.task.failed", error=str(exc), exc_info=exc)

    async def wait_idle(self) -> None:
        """Wait for spawned background work (exports) to finish."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    async def close(self) -> None:
        self.engine.cancel()
        await self.editor.on_mode_exit()
        for task in list(self._tasks):
            task.cancel()
        if self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)
        self.surfaces.unmount()
