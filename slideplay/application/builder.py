"""
Animation group authoring while in animation-builder mode.
"""

from __future__ import annotations

from typing import List, Optional

from slideplay.api.schemas.messages import AnimationGroupPayload, SaveAnimationsMessage
from slideplay.application.ports import HostChannelPort, SurfaceResolver
from slideplay.domain.entities.slide import AnimationGroup, Deck
from slideplay.infra.config.logging_config import get_logger
from slideplay.infra.surface.build_ids import BUILD_ID_ATTR


class AnimationBuilder:
    def __init__(
        self, channel: HostChannelPort, resolve_surface: SurfaceResolver, deck: Deck
    ) -> None:
        self._channel = channel
        self._resolve = resolve_surface
        self._deck = deck
        self._slide_number: Optional[int] = None
        self._elements: List[str] = []
        self._selected: List[str] = []
        self._log = get_logger("application.builder")

    @property
    def slide_number(self) -> Optional[int]:
        return self._slide_number

    @property
    def selectable_elements(self) -> List[str]:
        return list(self._elements)

    @property
    def selected(self) -> List[str]:
        return list(self._selected)

    def groups(self) -> List[AnimationGroup]:
        if self._slide_number is None:
            return []
        slide = self._deck.get(self._slide_number)
        if slide is None:
            return []
        return sorted(slide.animation_groups, key=lambda g: g.order)

    def scan(self, slide_number: int) -> List[str]:
        """Assign build ids on the attached surface and list selectable elements."""
        if slide_number != self._slide_number:
            self._selected = []
        self._slide_number = slide_number
        surface = self._resolve()
        if surface is None:
            self._elements = []
            return []
        surface.assign_build_ids()
        self._elements = [
            element[BUILD_ID_ATTR]
            for element in surface.select(f"[{BUILD_ID_ATTR}]")
        ]
        self._selected = [b for b in self._selected if b in self._elements]
        self._log.debug("builder.scan", slide_number=slide_number, elements=len(self._elements))
        return self.selectable_elements

    def toggle_element(self, build_id: str) -> bool:
        if build_id not in self._elements:
            return False
        if build_id in self._selected:
            self._selected.remove(build_id)
        else:
            self._selected.append(build_id)
        return True

    async def create_group(self) -> Optional[AnimationGroup]:
        if self._slide_number is None or not self._selected:
            return None
        existing = self.groups()
        order = len(existing) + 1
        taken = {g.id for g in existing}
        suffix = order
        while f"group-{suffix}" in taken:
            suffix += 1

        group = AnimationGroup(
            id=f"group-{suffix}", order=order, element_ids=tuple(self._selected)
        )
        self._selected = []
        await self._save([*existing, group])
        return group

    async def delete_group(self, group_id: str) -> bool:
        existing = self.groups()
        remaining = [g for g in existing if g.id != group_id]
        if len(remaining) == len(existing):
            return False
        renumbered = [
            AnimationGroup(id=g.id, order=index, element_ids=g.element_ids)
            for index, g in enumerate(remaining, start=1)
        ]
        await self._save(renumbered)
        return True

    async def _save(self, groups: List[AnimationGroup]) -> None:
        slide_number = self._slide_number
        self._deck.set_animation_groups(slide_number, groups)
        await self._channel.send(
            SaveAnimationsMessage(
                slide_number=slide_number,
                groups=[AnimationGroupPayload.from_domain(g) for g in groups],
            )
        )
        self._log.info("builder.groups.saved", slide_number=slide_number, groups=len(groups))

    def reset(self) -> None:
        self._slide_number = None
        self._elements = []
        self._selected = []
