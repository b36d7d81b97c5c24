"""
Passive snapshot of the host's slide-generation feedback channel.
"""

from dataclasses import dataclass
from typing import Optional


@dataclass
class BuildProgress:
    active: bool = False
    build_id: Optional[str] = None
    mode: Optional[str] = None
    total_slides: int = 0
    current_slide: int = 0
    built_count: int = 0
    error_count: int = 0
    status: str = "idle"

    def start(self, build_id: str, mode: str, total_slides: int, start_slide: int) -> None:
        self.active = True
        self.build_id = build_id
        self.mode = mode
        self.total_slides = total_slides
        self.current_slide = start_slide
        self.built_count = 0
        self.error_count = 0
        self.status = "building"

    def progress(self, current_slide: int, total_slides: int, built_count: int) -> None:
        self.current_slide = current_slide
        self.total_slides = total_slides
        self.built_count = built_count

    def finish(self, built_count: int, error_count: int, cancelled: bool) -> None:
        self.active = False
        self.built_count = built_count
        self.error_count = error_count
        if cancelled:
            self.status = "cancelled"
        elif error_count:
            self.status = "error"
        else:
            self.status = "complete"
