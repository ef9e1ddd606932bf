"""Pytest fixtures for image converter tests."""

import logging
from pathlib import Path

import pytest
import structlog

from imgconv.core.conversion.engine import ConversionEngine
from tests.helpers.format_helpers import write_test_image


@pytest.fixture(autouse=True)
def reset_logging():
    """Undo logging configuration done by CLI invocations."""
    yield
    structlog.contextvars.clear_contextvars()
    structlog.reset_defaults()
    logging.basicConfig(
        handlers=[logging.NullHandler()], level=logging.WARNING, force=True
    )


@pytest.fixture
def engine():
    """Engine with default settings."""
    return ConversionEngine(quality=85)


@pytest.fixture
def sample_png(tmp_path) -> Path:
    """64x48 RGBA PNG on disk."""
    return write_test_image(tmp_path / "sample.png", "png")


@pytest.fixture
def sample_jpeg(tmp_path) -> Path:
    """64x48 RGB JPEG on disk."""
    return write_test_image(tmp_path / "sample.jpg", "jpeg")


@pytest.fixture
def mixed_dir(tmp_path) -> Path:
    """Input directory with two good images, one corrupt image and one text file."""
    input_dir = tmp_path / "input"
    input_dir.mkdir()
    write_test_image(input_dir / "a.png", "png", 32, 32)
    write_test_image(input_dir / "b.jpg", "jpeg", 40, 20)
    (input_dir / "c.png").write_bytes(b"this is not a png")
    (input_dir / "notes.txt").write_text("not an image")
    return input_dir
