"""
Live inline text editing with debounced persistence.

idle -> activated -> dirty -(debounce)-> saving -> saved -> idle

Blur or switching to another element flushes a dirty edit immediately. Only
one save is in flight at a time; a save triggered while another is
unacknowledged is held and sent once the acknowledgment arrives.
"""

from __future__ import annotations

from typing import Optional, Tuple

from bs4 import Tag

from slideplay.api.schemas.messages import SaveResultMessage, SaveSlideMessage
from slideplay.application.ports import HostChannelPort, SurfaceResolver
from slideplay.domain.entities.slide import Deck
from slideplay.domain.value_objects.modes import EditState, SaveStatus
from slideplay.infra.config.logging_config import get_logger
from slideplay.infra.config.settings import Settings, get_settings
from slideplay.infra.surface.markup import to_portable_document
from slideplay.infra.timers import CancellableTimer

EDITABLE_TAGS = frozenset({"h1", "h2", "h3", "h4", "h5", "h6", "p", "li", "span"})
ACTIVE_CLASS = "editable-active"


class LiveEditor:
    def __init__(
        self,
        channel: HostChannelPort,
        resolve_surface: SurfaceResolver,
        deck: Deck,
        settings: Optional[Settings] = None,
    ) -> None:
        self._channel = channel
        self._resolve = resolve_surface
        self._deck = deck
        self._settings = settings or get_settings()
        self._log = get_logger("application.live_edit")

        self._state = EditState.IDLE
        self._status = SaveStatus.IDLE
        self._slide_number: Optional[int] = None
        self._element: Optional[Tag] = None
        self._dirty = False

        self._debounce: Optional[CancellableTimer] = None
        self._status_timer: Optional[CancellableTimer] = None

        self._in_flight: Optional[Tuple[int, str]] = None
        self._held: Optional[Tuple[int, str]] = None

    # ---------- state ----------
    @property
    def state(self) -> EditState:
        return self._state

    @property
    def save_status(self) -> SaveStatus:
        return self._status

    @property
    def is_dirty(self) -> bool:
        return self._dirty

    @property
    def active_element(self) -> Optional[Tag]:
        return self._element

    @property
    def slide_number(self) -> Optional[int]:
        return self._slide_number

    @property
    def has_pending_timer(self) -> bool:
        return self._debounce is not None and self._debounce.active

    @property
    def save_in_flight(self) -> bool:
        return self._in_flight is not None

    @staticmethod
    def is_editable(element: Optional[Tag]) -> bool:
        return element is not None and element.name in EDITABLE_TAGS

    # ---------- element lifecycle ----------
    async def activate(self, slide_number: int, element: Tag) -> bool:
        """Make one text element editable. A dirty previous element is flushed first."""
        if not self.is_editable(element):
            return False
        if element is self._element:
            return True

        if self._element is not None:
            if self._dirty:
                await self.flush()
            self._deactivate_element()

        surface = self._resolve()
        if surface is None:
            return False

        self._slide_number = slide_number
        self._element = element
        surface.set_attribute(element, "contenteditable", "true")
        surface.update_classes(element, add=(ACTIVE_CLASS,))
        if not self._dirty:
            self._state = EditState.ACTIVATED
        self._log.debug("live_edit.activated", slide_number=slide_number, tag=element.name)
        return True

    def handle_input(self, text: Optional[str] = None) -> None:
        """Mark the active element dirty and (re)start the debounce window."""
        if self._element is None:
            return
        if text is not None:
            surface = self._resolve()
            if surface is not None:
                surface.set_text(self._element, text)

        self._dirty = True
        self._state = EditState.DIRTY
        if self._debounce is not None:
            self._debounce.cancel()
        self._debounce = CancellableTimer(
            self._settings.debounce_s, self._on_debounce, name="live_edit.debounce"
        ).start()

    async def handle_blur(self) -> None:
        if self._element is None:
            return
        if self._dirty:
            await self.flush()
        self._deactivate_element()
        if self._state == EditState.ACTIVATED:
            self._state = EditState.IDLE

    async def flush(self) -> None:
        """Save immediately if dirty, dropping any pending debounce."""
        if self._debounce is not None:
            self._debounce.cancel()
            self._debounce = None
        if self._dirty:
            await self._save()

    async def on_mode_exit(self) -> None:
        """Leave editing: cancel timers and deactivate. Dispatched saves still complete."""
        if self._debounce is not None:
            self._debounce.cancel()
            self._debounce = None
        if self._status_timer is not None:
            self._status_timer.cancel()
            self._status_timer = None
        if self._dirty:
            self._log.info("live_edit.pending.discarded", slide_number=self._slide_number)
        self._dirty = False
        self._deactivate_element()
        self._slide_number = None
        self._state = EditState.SAVING if self._in_flight else EditState.IDLE
        if self._in_flight is None:
            self._status = SaveStatus.IDLE

    def on_surface_rebuilt(self) -> None:
        """The element handle belongs to a detached surface; forget it."""
        if self._debounce is not None:
            self._debounce.cancel()
            self._debounce = None
        self._element = None

    # ---------- persistence ----------
    async def _on_debounce(self) -> None:
        self._debounce = None
        await self._save()

    async def _save(self) -> None:
        surface = self._resolve()
        if surface is None or self._slide_number is None:
            self._log.warning("live_edit.save.no_surface", slide_number=self._slide_number)
            return

        markup = to_portable_document(surface.inner_html())
        self._dirty = False
        snapshot = (self._slide_number, markup)

        if self._in_flight is not None:
            self._held = snapshot
            self._deck.upsert(*snapshot)
            self._log.debug("live_edit.save.held", slide_number=self._slide_number)
            return
        await self._dispatch(snapshot)

    async def _dispatch(self, snapshot: Tuple[int, str]) -> None:
        slide_number, markup = snapshot
        self._in_flight = snapshot
        self._deck.upsert(slide_number, markup)
        self._state = EditState.SAVING
        self._set_status(SaveStatus.SAVING)
        await self._channel.send(SaveSlideMessage(slide_number=slide_number, markup=markup))
        self._log.info("live_edit.save.dispatched", slide_number=slide_number, size=len(markup))

    async def handle_save_result(self, message: SaveResultMessage) -> None:
        if self._in_flight is None:
            self._log.debug("live_edit.save.unexpected_result", success=message.success)
            return

        slide_number, _ = self._in_flight
        self._in_flight = None

        if message.success:
            self._log.info("live_edit.save.succeeded", slide_number=slide_number)
            self._set_status(SaveStatus.SAVED, self._settings.saved_display_ms / 1000)
            if not self._dirty:
                self._state = EditState.SAVED
        else:
            self._log.warning(
                "live_edit.save.failed", slide_number=slide_number, error=message.error
            )
            self._set_status(SaveStatus.ERROR, self._settings.error_display_ms / 1000)
            if self._held is None:
                # Keep the edit so the next trigger or flush re-sends it
                self._dirty = True
                self._state = EditState.DIRTY

        if self._held is not None:
            held, self._held = self._held, None
            await self._dispatch(held)

    def _set_status(self, status: SaveStatus, revert_after_s: Optional[float] = None) -> None:
        if self._status_timer is not None:
            self._status_timer.cancel()
            self._status_timer = None
        self._status = status
        if revert_after_s is not None:
            self._status_timer = CancellableTimer(
                revert_after_s, self._reset_status, name="live_edit.status"
            ).start()

    def _reset_status(self) -> None:
        self._status_timer = None
        self._status = SaveStatus.IDLE
        if self._state == EditState.SAVED:
            self._state = EditState.ACTIVATED if self._element is not None else EditState.IDLE

    def _deactivate_element(self) -> None:
        element, self._element = self._element, None
        if element is None:
            return
        surface = self._resolve()
        if surface is None:
            return
        surface.set_attribute(element, "contenteditable", None)
        surface.update_classes(element, remove=(ACTIVE_CLASS,))
