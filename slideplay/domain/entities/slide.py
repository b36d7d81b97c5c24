"""
Slide and deck domain entities.
"""

from dataclasses import dataclass, field, replace
from typing import List, Optional


@dataclass(frozen=True)
class AnimationGroup:
    id: str
    order: int
    element_ids: tuple[str, ...] = ()

    @property
    def selectors(self) -> List[str]:
        return [f'[data-build-id="{element_id}"]' for element_id in self.element_ids]


@dataclass
class Slide:
    number: int
    markup: str
    animation_groups: List[AnimationGroup] = field(default_factory=list)
    # Older manifests stored raw selector lists instead of ordered groups
    build_groups: List[List[str]] = field(default_factory=list)
    title: Optional[str] = None

    def has_animations(self) -> bool:
        return bool(self.animation_groups or self.build_groups)


@dataclass
class Deck:
    deck_id: Optional[str] = None
    name: Optional[str] = None
    slides: List[Slide] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.slides)

    def get(self, number: int) -> Optional[Slide]:
        return next((s for s in self.slides if s.number == number), None)

    def upsert(self, number: int, markup: str) -> Slide:
        """Replace a slide's markup, or insert a new slide in sorted position."""
        for index, slide in enumerate(self.slides):
            if slide.number == number:
                self.slides[index] = replace(slide, markup=markup)
                return self.slides[index]

        created = Slide(number=number, markup=markup, title=f"Slide {number}")
        self.slides = sorted([*self.slides, created], key=lambda s: s.number)
        return created

    def reorder(self, new_order: List[int]) -> None:
        """Reorder by a list of original slide numbers and renumber sequentially."""
        if sorted(new_order) != sorted(s.number for s in self.slides):
            raise ValueError("New order must be a permutation of the current slides")
        by_number = {s.number: s for s in self.slides}
        self.slides = [
            replace(by_number[original], number=position)
            for position, original in enumerate(new_order, start=1)
        ]

    def set_animation_groups(self, number: int, groups: List[AnimationGroup]) -> Slide:
        for index, slide in enumerate(self.slides):
            if slide.number == number:
                self.slides[index] = replace(slide, animation_groups=list(groups))
                return self.slides[index]
        raise ValueError(f"Slide {number} does not exist")
