"""Data models for the image converter."""

from imgconv.models.conversion import (
    ConversionRequest,
    ConversionResult,
    ConversionSettings,
    ImageMetadata,
)

__all__ = [
    "ConversionRequest",
    "ConversionResult",
    "ConversionSettings",
    "ImageMetadata",
]
