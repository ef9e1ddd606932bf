"""Minimal helper functions for format conversion tests."""

import io
from pathlib import Path

import pytest
from PIL import Image

from imgconv.core.conversion.formats.avif_handler import AVIF_AVAILABLE

ALL_FORMATS = ["jpeg", "png", "webp", "avif"]

requires_avif = pytest.mark.skipif(
    not AVIF_AVAILABLE, reason="Pillow built without AVIF support"
)


def format_params(formats=ALL_FORMATS):
    """Parametrize values, marking AVIF ones to skip when it is unavailable."""
    return [
        pytest.param(fmt, marks=requires_avif) if fmt == "avif" else fmt
        for fmt in formats
    ]


def create_test_image_for_format(
    format: str, width: int = 64, height: int = 48, mode: str = None
) -> bytes:
    """Create a simple test image for the given format."""
    pillow_format = {"jpg": "JPEG", "jpeg": "JPEG"}.get(
        format.lower(), format.upper()
    )
    # Use RGB for formats that don't support transparency
    if mode is None:
        mode = "RGB" if pillow_format == "JPEG" else "RGBA"

    color = (200, 30, 30, 255) if mode == "RGBA" else (200, 30, 30)
    if mode == "L":
        color = 128
    img = Image.new(mode, (width, height), color=color)

    buffer = io.BytesIO()
    img.save(buffer, format=pillow_format)
    return buffer.getvalue()


def write_test_image(
    path: Path, format: str = "png", width: int = 64, height: int = 48
) -> Path:
    """Write a test image to ``path`` and return it."""
    path.write_bytes(create_test_image_for_format(format, width, height))
    return path


def detect_format(data: bytes) -> str:
    """Let Pillow identify encoded bytes, independent of our own sniffing."""
    with Image.open(io.BytesIO(data)) as img:
        return img.format
