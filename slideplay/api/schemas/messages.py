"""
Host channel and UI event schemas.

Every message kind is a closed, tagged variant keyed on ``type``. Parsing goes
through pydantic ``TypeAdapter``s, so an unknown ``type`` is rejected at the
boundary instead of falling through a string switch.
"""

from __future__ import annotations

from typing import Annotated, Any, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError
from pydantic.alias_generators import to_camel

from slideplay.domain.entities.slide import AnimationGroup, Slide
from slideplay.domain.exceptions import InvalidMessageError
from slideplay.domain.value_objects.export import ExportFormat
from slideplay.domain.value_objects.quality import CaptureOptions


class WireMessage(BaseModel):
    """Base message: camelCase on the wire, snake_case in Python."""

    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, frozen=True
    )

    def to_wire(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


# ---------- SHARED PAYLOADS ----------
class AnimationGroupPayload(WireMessage):
    id: str
    order: int
    element_ids: List[str] = Field(default_factory=list)

    @classmethod
    def from_domain(cls, group: AnimationGroup) -> "AnimationGroupPayload":
        return cls(id=group.id, order=group.order, element_ids=list(group.element_ids))

    def to_domain(self) -> AnimationGroup:
        return AnimationGroup(
            id=self.id, order=self.order, element_ids=tuple(self.element_ids)
        )


class SlidePayload(WireMessage):
    number: int = Field(..., ge=1)
    markup: str
    title: Optional[str] = None
    animation_groups: List[AnimationGroupPayload] = Field(default_factory=list)
    build_groups: List[List[str]] = Field(default_factory=list)

    def to_domain(self) -> Slide:
        return Slide(
            number=self.number,
            markup=self.markup,
            title=self.title,
            animation_groups=[g.to_domain() for g in self.animation_groups],
            build_groups=[list(g) for g in self.build_groups],
        )


# ---------- OUTBOUND (core -> host) ----------
class CaptureRequestMessage(WireMessage):
    type: Literal["capture-request"] = "capture-request"
    request_id: str
    markup: str
    options: Optional[CaptureOptions] = None


class ExportFileMessage(WireMessage):
    type: Literal["export-file"] = "export-file"
    format: ExportFormat
    data: str
    file_name: str
    deck_id: Optional[str] = None


class SaveSlideMessage(WireMessage):
    type: Literal["save-slide"] = "save-slide"
    slide_number: int
    markup: str


class ReorderSlidesMessage(WireMessage):
    type: Literal["reorder-slides"] = "reorder-slides"
    new_order: List[int]


class BatchCompleteMessage(WireMessage):
    type: Literal["batch-complete"] = "batch-complete"
    total: int
    error_count: int


class SaveAnimationsMessage(WireMessage):
    type: Literal["save-animations"] = "save-animations"
    slide_number: int
    groups: List[AnimationGroupPayload]


OutboundMessage = Annotated[
    Union[
        CaptureRequestMessage,
        ExportFileMessage,
        SaveSlideMessage,
        ReorderSlidesMessage,
        BatchCompleteMessage,
        SaveAnimationsMessage,
    ],
    Field(discriminator="type"),
]


# ---------- INBOUND (host -> core) ----------
class CaptureResultMessage(WireMessage):
    type: Literal["capture-result"] = "capture-result"
    request_id: str
    data_uri: str


class CaptureErrorMessage(WireMessage):
    type: Literal["capture-error"] = "capture-error"
    request_id: str
    error: str = "Capture failed"


class SaveResultMessage(WireMessage):
    type: Literal["save-result"] = "save-result"
    success: bool
    file_name: Optional[str] = None
    error: Optional[str] = None


class ExportFolderReadyMessage(WireMessage):
    type: Literal["export-folder-ready"] = "export-folder-ready"


class ExportCancelledMessage(WireMessage):
    type: Literal["export-cancelled"] = "export-cancelled"


class SlideUpdatedMessage(WireMessage):
    type: Literal["slide-updated"] = "slide-updated"
    slide_number: int = Field(..., ge=1)
    markup: str


class DeckLoadedMessage(WireMessage):
    type: Literal["deck-loaded"] = "deck-loaded"
    deck_id: Optional[str] = None
    deck_name: Optional[str] = None
    slides: List[SlidePayload] = Field(default_factory=list)


class BuildStartedMessage(WireMessage):
    type: Literal["build-started"] = "build-started"
    build_id: str
    mode: Literal["all", "one", "resume"] = "all"
    total_slides: int = 0
    start_slide: int = 1


class BuildProgressMessage(WireMessage):
    type: Literal["build-progress"] = "build-progress"
    current_slide: int
    total_slides: int
    built_count: int
    status: Literal["building", "built", "error"] = "building"


class BuildCompleteMessage(WireMessage):
    type: Literal["build-complete"] = "build-complete"
    built_count: int
    error_count: int = 0
    cancelled: bool = False


InboundMessage = Union[
    CaptureResultMessage,
    CaptureErrorMessage,
    SaveResultMessage,
    ExportFolderReadyMessage,
    ExportCancelledMessage,
    SlideUpdatedMessage,
    DeckLoadedMessage,
    BuildStartedMessage,
    BuildProgressMessage,
    BuildCompleteMessage,
]


# ---------- UI EVENTS (surface -> core) ----------
class KeyEvent(WireMessage):
    type: Literal["key"] = "key"
    key: str
    shift: bool = False
    alt: bool = False
    in_editable: bool = False


class ElementClickEvent(WireMessage):
    type: Literal["element-click"] = "element-click"
    build_id: str


class ElementInputEvent(WireMessage):
    type: Literal["element-input"] = "element-input"
    build_id: str
    text: Optional[str] = None


class ElementBlurEvent(WireMessage):
    type: Literal["element-blur"] = "element-blur"
    build_id: str


class BuilderToggleElementEvent(WireMessage):
    type: Literal["builder-toggle-element"] = "builder-toggle-element"
    build_id: str


class BuilderCreateGroupEvent(WireMessage):
    type: Literal["builder-create-group"] = "builder-create-group"


class BuilderDeleteGroupEvent(WireMessage):
    type: Literal["builder-delete-group"] = "builder-delete-group"
    group_id: str


class ExportRequestEvent(WireMessage):
    type: Literal["export-request"] = "export-request"
    kind: Literal["current-png", "all-png", "pdf"]
    preset: Optional[Literal["best", "standard", "compact"]] = None


UiEvent = Union[
    KeyEvent,
    ElementClickEvent,
    ElementInputEvent,
    ElementBlurEvent,
    BuilderToggleElementEvent,
    BuilderCreateGroupEvent,
    BuilderDeleteGroupEvent,
    ExportRequestEvent,
]

ClientMessage = Annotated[
    Union[InboundMessage, UiEvent],
    Field(discriminator="type"),
]

_outbound_adapter: TypeAdapter = TypeAdapter(OutboundMessage)
_client_adapter: TypeAdapter = TypeAdapter(ClientMessage)


def parse_client_message(raw: str | bytes | dict) -> Any:
    """Parse an inbound host message or UI event."""
    try:
        if isinstance(raw, dict):
            return _client_adapter.validate_python(raw)
        return _client_adapter.validate_json(raw)
    except ValidationError as e:
        raise InvalidMessageError(str(e)) from e


def parse_outbound_message(raw: str | bytes | dict) -> Any:
    try:
        if isinstance(raw, dict):
            return _outbound_adapter.validate_python(raw)
        return _outbound_adapter.validate_json(raw)
    except ValidationError as e:
        raise InvalidMessageError(str(e)) from e
