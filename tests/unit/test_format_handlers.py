"""Unit tests for format handlers."""

import io
from unittest.mock import patch

import pytest
from PIL import Image

from imgconv.core.conversion.formats.avif_handler import AVIFHandler
from imgconv.core.conversion.formats.jpeg_handler import JPEGHandler
from imgconv.core.conversion.formats.png_handler import PNGHandler
from imgconv.core.conversion.formats.webp_handler import WebPHandler
from imgconv.core.exceptions import DecodeError, EncodeError
from imgconv.core.formats import SupportedFormat
from imgconv.models.conversion import ConversionSettings
from tests.helpers.format_helpers import (
    create_test_image_for_format,
    detect_format,
    requires_avif,
)


def _encode(handler, image, **settings):
    buffer = io.BytesIO()
    handler.save_image(image, buffer, ConversionSettings(**settings))
    return buffer.getvalue()


class TestJPEGHandler:
    """Test JPEG format handler."""

    @pytest.fixture
    def handler(self):
        return JPEGHandler()

    def test_can_handle(self, handler):
        assert handler.can_handle("jpeg")
        assert handler.can_handle("JPG")
        assert not handler.can_handle("png")

    def test_matches_signature(self, handler):
        assert handler.matches_signature(create_test_image_for_format("jpeg"))
        assert not handler.matches_signature(create_test_image_for_format("png"))
        assert not handler.matches_signature(b"")

    def test_load_image(self, handler):
        img = handler.load_image(create_test_image_for_format("jpeg", 30, 20))
        assert img.size == (30, 20)
        assert img.mode == "RGB"

    def test_load_cmyk_converts_to_rgb(self, handler):
        buffer = io.BytesIO()
        Image.new("CMYK", (8, 8)).save(buffer, format="JPEG")

        img = handler.load_image(buffer.getvalue())
        assert img.mode == "RGB"

    def test_load_truncated_data(self, handler):
        data = create_test_image_for_format("jpeg")
        with pytest.raises(DecodeError) as exc_info:
            handler.load_image(data[:20])
        assert exc_info.value.details["input_format"] == "jpeg"

    def test_save_flattens_transparency(self, handler):
        """Test that RGBA input is flattened onto white."""
        image = Image.new("RGBA", (10, 10), (255, 0, 0, 0))

        data = _encode(handler, image, quality=95)

        assert detect_format(data) == "JPEG"
        with Image.open(io.BytesIO(data)) as out:
            assert out.mode == "RGB"
            r, g, b = out.getpixel((5, 5))
            assert min(r, g, b) > 240

    @pytest.mark.parametrize(
        "quality,expected",
        [(0, 1), (50, 47), (85, 80), (100, 95)],
    )
    def test_quality_mapping(self, handler, quality, expected):
        params = handler.get_quality_param(ConversionSettings(quality=quality))
        assert params["quality"] == expected

    def test_subsampling_follows_quality(self, handler):
        assert handler.get_quality_param(ConversionSettings(quality=95))[
            "subsampling"
        ] == 0
        assert handler.get_quality_param(ConversionSettings(quality=60))[
            "subsampling"
        ] == 2

    def test_quality_changes_size(self, handler):
        image = Image.effect_noise((64, 64), 64).convert("RGB")

        low = _encode(handler, image, quality=10)
        high = _encode(handler, image, quality=95)

        assert len(low) < len(high)


class TestPNGHandler:
    """Test PNG format handler."""

    @pytest.fixture
    def handler(self):
        return PNGHandler()

    def test_matches_signature(self, handler):
        assert handler.matches_signature(create_test_image_for_format("png"))
        assert not handler.matches_signature(create_test_image_for_format("jpeg"))

    def test_quality_is_ignored(self, handler):
        """PNG output does not depend on the quality hint."""
        image = Image.new("RGB", (16, 16), (10, 200, 30))

        assert _encode(handler, image, quality=5) == _encode(
            handler, image, quality=100
        )

    def test_compress_level_param(self, handler):
        params = handler.get_quality_param(ConversionSettings(png_compress_level=9))
        assert params == {"compress_level": 9}

    def test_preserves_transparency(self, handler):
        image = Image.new("RGBA", (4, 4), (0, 0, 255, 0))

        data = _encode(handler, image)

        with Image.open(io.BytesIO(data)) as out:
            assert out.mode == "RGBA"
            assert out.getpixel((0, 0))[3] == 0

    def test_keeps_grayscale(self, handler):
        data = _encode(handler, Image.new("L", (4, 4), 100))
        with Image.open(io.BytesIO(data)) as out:
            assert out.mode == "L"

    def test_load_garbage(self, handler):
        with pytest.raises(DecodeError):
            handler.load_image(b"\x89PNG\r\n\x1a\n" + b"\x00" * 16)


class TestWebPHandler:
    """Test WebP format handler."""

    @pytest.fixture
    def handler(self):
        return WebPHandler()

    def test_matches_signature(self, handler):
        assert handler.matches_signature(create_test_image_for_format("webp"))
        # RIFF container that is not WebP
        assert not handler.matches_signature(b"RIFF\x00\x00\x00\x00WAVEfmt ")

    def test_save_image(self, handler):
        data = _encode(handler, Image.new("RGB", (20, 10), (0, 128, 0)))

        assert detect_format(data) == "WEBP"
        assert handler.load_image(data).size == (20, 10)

    def test_keeps_alpha(self, handler):
        data = _encode(handler, Image.new("RGBA", (8, 8), (0, 0, 0, 0)))
        assert handler.load_image(data).mode == "RGBA"

    def test_quality_param(self, handler):
        assert handler.get_quality_param(ConversionSettings(quality=0)) == {
            "quality": 0
        }


class TestAVIFHandler:
    """Test AVIF format handler."""

    @pytest.fixture
    def handler(self):
        return AVIFHandler()

    def test_matches_signature(self, handler):
        header = b"\x00\x00\x00\x1cftypavif"
        assert handler.matches_signature(header + b"\x00" * 16)
        assert handler.matches_signature(b"\x00\x00\x00\x1cftypavis" + b"\x00" * 16)

    def test_rejects_other_isobmff_brands(self, handler):
        assert not handler.matches_signature(b"\x00\x00\x00\x1cftypheic" + b"\x00" * 8)
        assert not handler.matches_signature(b"\x00\x00\x00")

    def test_matches_heif_container_with_avif_brand(self, handler):
        """A mif1/msf1 major brand counts when AVIF is a compatible brand."""
        header = b"\x00\x00\x00\x20ftypmif1\x00\x00\x00\x00avifmif1miafMA1B"
        assert handler.matches_signature(header + b"\x00" * 8)

        header = b"\x00\x00\x00\x18ftypmsf1\x00\x00\x00\x00msf1avis"
        assert handler.matches_signature(header)

    def test_rejects_heif_container_without_avif_brand(self, handler):
        header = b"\x00\x00\x00\x18ftypmif1\x00\x00\x00\x00mif1heic"
        assert not handler.matches_signature(header + b"\x00" * 8)

    def test_compatible_brands_stop_at_box_end(self, handler):
        # "avif" after the ftyp box belongs to the next box
        header = b"\x00\x00\x00\x14ftypmif1\x00\x00\x00\x00mif1"
        assert not handler.matches_signature(header + b"avif" + b"\x00" * 8)

    @requires_avif
    def test_load_mif1_major_brand(self, handler):
        data = bytearray(_encode(handler, Image.new("RGB", (20, 10), (10, 90, 30))))
        data[8:12] = b"mif1"

        assert handler.matches_signature(bytes(data))
        assert handler.load_image(bytes(data)).size == (20, 10)

    def test_quality_param(self, handler):
        params = handler.get_quality_param(ConversionSettings(quality=95))
        assert params == {"quality": 95, "subsampling": "4:4:4"}

        params = handler.get_quality_param(ConversionSettings(quality=50))
        assert params["subsampling"] == "4:2:0"

    @requires_avif
    def test_save_and_load(self, handler):
        data = _encode(handler, Image.new("RGB", (16, 12), (90, 90, 200)))

        assert handler.matches_signature(data)
        assert handler.load_image(data).size == (16, 12)

    def test_unavailable(self, handler, monkeypatch):
        monkeypatch.setattr(
            "imgconv.core.conversion.formats.avif_handler.AVIF_AVAILABLE", False
        )

        with pytest.raises(EncodeError):
            _encode(handler, Image.new("RGB", (4, 4)))
        with pytest.raises(DecodeError):
            handler.load_image(b"\x00\x00\x00\x1cftypavif")

    def test_unavailable_warns_once_on_use(self, handler, monkeypatch):
        module = "imgconv.core.conversion.formats.avif_handler"
        monkeypatch.setattr(f"{module}.AVIF_AVAILABLE", False)
        monkeypatch.setattr(f"{module}._unavailable_warned", False)

        with patch(f"{module}.logger") as logger:
            for _ in range(2):
                with pytest.raises(DecodeError):
                    handler.load_image(b"\x00\x00\x00\x1cftypavif")

        logger.warning.assert_called_once()


class TestPrepareImage:
    """Test color mode preparation shared by all handlers."""

    def test_palette_with_transparency_flattened_for_jpeg(self):
        image = Image.new("P", (4, 4), 0)
        image.info["transparency"] = 0

        prepared = JPEGHandler().prepare_image(image)
        assert prepared.mode == "RGB"

    def test_unsupported_mode_converted(self):
        prepared = WebPHandler().prepare_image(Image.new("CMYK", (4, 4)))
        assert prepared.mode == "RGB"

    def test_la_becomes_rgba_for_transparent_targets(self):
        prepared = WebPHandler().prepare_image(Image.new("LA", (4, 4)))
        assert prepared.mode == "RGBA"

    def test_supported_mode_untouched(self):
        image = Image.new("RGB", (4, 4))
        assert PNGHandler().prepare_image(image) is image

    def test_extract_metadata(self):
        metadata = PNGHandler().extract_metadata(Image.new("RGBA", (7, 3)))

        assert metadata.format is SupportedFormat.PNG
        assert (metadata.width, metadata.height) == (7, 3)
        assert metadata.has_transparency
