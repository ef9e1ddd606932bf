"""AVIF format handler."""

from typing import BinaryIO, Dict, Any, List
from PIL import Image, features
import structlog

from imgconv.models.conversion import ConversionSettings
from imgconv.core.constants import (
    AVIF_BRANDS,
    FTYP_BOX,
    FULL_CHROMA_QUALITY_THRESHOLD,
    HEIF_CONTAINER_BRANDS,
)
from imgconv.core.conversion.formats.base import BaseFormatHandler
from imgconv.core.exceptions import DecodeError, EncodeError
from imgconv.core.formats import SupportedFormat

logger = structlog.get_logger()

AVIF_AVAILABLE = bool(features.check("avif"))

# Warn once, on first use, so the entry goes through the configured logging
_unavailable_warned = False


def _warn_unavailable() -> None:
    global _unavailable_warned
    if not _unavailable_warned:
        _unavailable_warned = True
        logger.warning("Pillow was built without libavif, AVIF support disabled")


def _ftyp_brands(image_data: bytes) -> List[bytes]:
    """Major brand followed by the compatible brands of a leading ftyp box."""
    if len(image_data) < 12 or image_data[4:8] != FTYP_BOX:
        return []
    # A size of 0 means the box runs to the end of the data
    box_size = int.from_bytes(image_data[0:4], "big") or len(image_data)
    box_size = min(box_size, len(image_data))
    # major brand, then minor version (skipped), then 4-byte compatible brands
    brands = [image_data[8:12]]
    brands.extend(
        image_data[offset : offset + 4] for offset in range(16, box_size - 3, 4)
    )
    return brands


class AVIFHandler(BaseFormatHandler):
    """Handler for AVIF format."""

    format = SupportedFormat.AVIF

    def matches_signature(self, image_data: bytes) -> bool:
        brands = _ftyp_brands(image_data)
        if not brands:
            return False
        major, compatible = brands[0], brands[1:]
        if major in AVIF_BRANDS:
            return True
        # Generic HEIF container that declares AVIF compatibility
        return major in HEIF_CONTAINER_BRANDS and any(
            brand in AVIF_BRANDS for brand in compatible
        )

    def load_image(self, image_data: bytes) -> Image.Image:
        if not AVIF_AVAILABLE:
            _warn_unavailable()
            raise DecodeError(
                "AVIF support not available in this Pillow build",
                details={"input_format": "avif"},
            )
        return super().load_image(image_data)

    def save_image(
        self, image: Image.Image, output_buffer: BinaryIO, settings: ConversionSettings
    ) -> None:
        """Save image as AVIF."""
        if not AVIF_AVAILABLE:
            _warn_unavailable()
            raise EncodeError(
                "AVIF support not available in this Pillow build",
                details={"output_format": "avif"},
            )
        try:
            image = self.prepare_image(image)
            save_params = self.get_quality_param(settings)
            save_params["speed"] = settings.avif_speed

            image.save(output_buffer, format="AVIF", **save_params)
            output_buffer.seek(0)

        except Exception as e:
            raise EncodeError(
                f"Failed to save image as AVIF: {str(e)}",
                details={"output_format": "avif", "reason": str(e)},
            ) from e

    def get_quality_param(self, settings: ConversionSettings) -> Dict[str, Any]:
        """Get AVIF-specific quality parameters."""
        return {
            "quality": settings.quality,
            "subsampling": (
                "4:4:4" if settings.quality > FULL_CHROMA_QUALITY_THRESHOLD else "4:2:0"
            ),
        }

    def _supports_transparency(self) -> bool:
        return True
