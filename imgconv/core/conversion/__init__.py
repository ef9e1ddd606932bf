"""Conversion pipeline: codec and engine."""

from imgconv.core.conversion.codec import ImageCodec, RasterImage
from imgconv.core.conversion.engine import ConversionEngine

__all__ = ["ConversionEngine", "ImageCodec", "RasterImage"]
