"""Data models for image conversion."""

from pathlib import Path
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from imgconv.core.constants import (
    DEFAULT_AVIF_SPEED,
    DEFAULT_PNG_COMPRESS_LEVEL,
    DEFAULT_QUALITY,
    DEFAULT_WEBP_METHOD,
    MAX_QUALITY,
    MIN_QUALITY,
)
from imgconv.core.formats import SupportedFormat


def clamp_quality(value: Any) -> int:
    """Clamp a quality value into 0-100 instead of rejecting it."""
    return max(MIN_QUALITY, min(MAX_QUALITY, int(value)))


class ConversionSettings(BaseModel):
    """Encoder settings shared by every conversion an engine performs."""

    model_config = ConfigDict(frozen=True)

    quality: int = Field(
        default=DEFAULT_QUALITY,
        description="Output quality for lossy formats (0-100, clamped)",
    )
    png_compress_level: int = Field(
        default=DEFAULT_PNG_COMPRESS_LEVEL, ge=0, le=9, description="zlib level"
    )
    webp_method: int = Field(
        default=DEFAULT_WEBP_METHOD, ge=0, le=6, description="WebP encoder effort"
    )
    avif_speed: int = Field(
        default=DEFAULT_AVIF_SPEED, ge=0, le=10, description="AVIF encoder speed"
    )

    @field_validator("quality", mode="before")
    @classmethod
    def validate_quality(cls, v: Any) -> int:
        """Cap values above 100 and raise values below 0."""
        return clamp_quality(v)


class ConversionRequest(BaseModel):
    """A single file conversion, created per call and never persisted."""

    model_config = ConfigDict(frozen=True)

    input_path: Path
    output_path: Path
    target_format: SupportedFormat


class ImageMetadata(BaseModel):
    """Basic properties of a decoded image."""

    format: SupportedFormat
    width: int
    height: int
    color_mode: str
    has_transparency: bool = False


class ConversionResult(BaseModel):
    """Outcome of a successful conversion."""

    input_path: Path
    output_path: Path
    target_format: SupportedFormat
    source_format: SupportedFormat
    width: int
    height: int
    output_size: int = Field(..., ge=0, description="Bytes written")
    processing_time: Optional[float] = Field(
        None, description="Processing time in seconds"
    )

    @property
    def dimensions(self) -> tuple[int, int]:
        return (self.width, self.height)
