"""
Rendering surface bridge.

A ``SlideSurface`` is the isolated region one slide's markup attaches to. It is
backed by a BeautifulSoup fragment and reports structural and attribute
changes to observers, the same way a DOM mutation observer would.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Iterable, List, Literal, Optional

from bs4 import BeautifulSoup, Doctype, Tag

from slideplay.infra.config.logging_config import get_logger
from slideplay.infra.surface.build_ids import (
    BUILD_ID_ATTR,
    SELECTABLE_ELEMENT_SELECTOR,
    assign_stable_build_ids,
)
from slideplay.infra.surface.markup import RUNTIME_STYLE_ATTR, adapt_css_for_surface

log = get_logger("infra.surface")

ANIMATION_STYLES = (
    ".animation-hidden { opacity: 0; visibility: hidden; "
    "transition: opacity 0.4s ease, visibility 0.4s ease; }\n"
    ".animation-visible { opacity: 1; visibility: visible; "
    "transition: opacity 0.4s ease; }\n"
    ".animation-instant { transition: none !important; }"
)


@dataclass(frozen=True)
class SurfaceMutation:
    kind: Literal["childList", "attributes"]
    target: Optional[Tag] = None
    added: int = 0


MutationCallback = Callable[[List[SurfaceMutation]], None]


class SlideSurface:
    def __init__(self, slide_number: Optional[int] = None) -> None:
        self.slide_number = slide_number
        self._fragment = BeautifulSoup("", "html.parser")
        style = self._fragment.new_tag("style", attrs={RUNTIME_STYLE_ATTR: ""})
        style.string = ANIMATION_STYLES
        self._fragment.append(style)
        self._attached = True
        self._observers: List[MutationCallback] = []

    # ---------- lifecycle ----------
    @property
    def is_attached(self) -> bool:
        return self._attached

    def detach(self) -> None:
        self._attached = False
        self._observers.clear()

    def has_content(self) -> bool:
        """True once anything other than <style> tags has been attached."""
        return any(
            isinstance(child, Tag) and child.name != "style"
            for child in self._fragment.contents
        )

    def attach_markup(self, markup: str, slide_number: Optional[int] = None) -> None:
        """Attach a slide document, flattening html/head/body into the fragment."""
        if not self._attached:
            raise RuntimeError("Cannot attach markup to a detached surface")
        if slide_number is not None:
            self.slide_number = slide_number

        parsed = BeautifulSoup(adapt_css_for_surface(markup), "html.parser")
        if parsed.body is not None:
            sources = [part for part in (parsed.head, parsed.body) if part is not None]
        else:
            sources = [parsed.html or parsed]

        for child in list(self._fragment.contents):
            if not (isinstance(child, Tag) and child.has_attr(RUNTIME_STYLE_ATTR)):
                child.extract()

        added = 0
        for source in sources:
            for child in list(source.contents):
                if isinstance(child, Doctype):
                    continue
                self._fragment.append(child.extract())
                added += 1

        log.debug("surface.attach", slide_number=self.slide_number, nodes=added)
        self._notify([SurfaceMutation(kind="childList", added=added)])

    # ---------- observation ----------
    def observe(self, callback: MutationCallback) -> Callable[[], None]:
        self._observers.append(callback)

        def disconnect() -> None:
            if callback in self._observers:
                self._observers.remove(callback)

        return disconnect

    def _notify(self, records: List[SurfaceMutation]) -> None:
        for callback in list(self._observers):
            callback(records)

    # ---------- queries ----------
    def select(self, selector: str) -> List[Tag]:
        if not self._attached:
            return []
        return self._fragment.select(selector)

    def find_by_build_id(self, build_id: str) -> Optional[Tag]:
        matches = self.select(f'[{BUILD_ID_ATTR}="{build_id}"]')
        return matches[0] if matches else None

    def assign_build_ids(self, selector: str = SELECTABLE_ELEMENT_SELECTOR) -> int:
        return assign_stable_build_ids(self.select(selector))

    # ---------- mutation ----------
    def update_classes(
        self, element: Tag, add: Iterable[str] = (), remove: Iterable[str] = ()
    ) -> None:
        dropped = set(remove)
        classes = [c for c in element.get("class", []) if c not in dropped]
        for name in add:
            if name not in classes:
                classes.append(name)
        if classes:
            element["class"] = classes
        elif element.has_attr("class"):
            del element["class"]
        self._notify([SurfaceMutation(kind="attributes", target=element)])

    def set_attribute(self, element: Tag, name: str, value: Optional[str]) -> None:
        if value is None:
            if element.has_attr(name):
                del element[name]
        else:
            element[name] = value
        self._notify([SurfaceMutation(kind="attributes", target=element)])

    def set_text(self, element: Tag, text: str) -> None:
        element.string = text
        self._notify([SurfaceMutation(kind="childList", target=element, added=1)])

    def inner_html(self) -> str:
        return "".join(str(child) for child in self._fragment.contents)


class SurfaceHost:
    """The display region holding the surface for the slide on screen.

    Rebuilding (e.g. on magnification toggle) detaches the previous surface, so
    callers holding an old handle see ``is_attached == False``.
    """

    def __init__(self) -> None:
        self._surface: Optional[SlideSurface] = None

    def resolve(self) -> Optional[SlideSurface]:
        if self._surface is not None and self._surface.is_attached:
            return self._surface
        return None

    def mount(self, slide_number: Optional[int] = None) -> SlideSurface:
        if self._surface is not None:
            self._surface.detach()
        self._surface = SlideSurface(slide_number)
        return self._surface

    def render(self, slide_number: int, markup: str) -> SlideSurface:
        surface = self.mount(slide_number)
        surface.attach_markup(markup)
        return surface

    def unmount(self) -> None:
        if self._surface is not None:
            self._surface.detach()
            self._surface = None
