"""Capture quality value objects."""

from enum import Enum
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


class ImageFormat(str, Enum):
    PNG = "png"
    JPEG = "jpeg"


class QualityPreset(str, Enum):
    """Named PDF quality presets."""

    BEST = "best"
    STANDARD = "standard"
    COMPACT = "compact"


class CaptureOptions(BaseModel):
    """Format/quality requested from the renderer."""

    model_config = ConfigDict(frozen=True)

    format: ImageFormat = ImageFormat.PNG
    quality: Optional[int] = Field(None, ge=1, le=100)

    @property
    def is_lossless(self) -> bool:
        return self.format == ImageFormat.PNG

    @property
    def mime_type(self) -> str:
        return "image/jpeg" if self.format == ImageFormat.JPEG else "image/png"


class PresetConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    label: str
    format: Literal["png", "jpeg"]
    quality: Optional[int] = None
    description: str


QUALITY_PRESETS: dict[QualityPreset, PresetConfig] = {
    QualityPreset.BEST: PresetConfig(
        label="Best Quality",
        format="png",
        description="Lossless PNG capture, largest file size",
    ),
    QualityPreset.STANDARD: PresetConfig(
        label="Standard",
        format="jpeg",
        quality=82,
        description="JPEG capture at high quality, good balance of size and fidelity",
    ),
    QualityPreset.COMPACT: PresetConfig(
        label="Compact",
        format="jpeg",
        quality=65,
        description="Smaller JPEG capture for sharing",
    ),
}


def resolve_preset(preset: Optional[QualityPreset]) -> Optional[CaptureOptions]:
    """Resolve a named preset into capture options; None means the native PNG path."""
    if preset is None:
        return None
    config = QUALITY_PRESETS[QualityPreset(preset)]
    return CaptureOptions(format=ImageFormat(config.format), quality=config.quality)
