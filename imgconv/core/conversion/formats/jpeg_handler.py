"""JPEG format handler."""

from typing import Any, BinaryIO, Dict

from PIL import Image

from imgconv.core.constants import (
    FULL_CHROMA_QUALITY_THRESHOLD,
    JPEG_MAX_QUALITY,
    JPEG_SIGNATURE,
)
from imgconv.core.conversion.formats.base import BaseFormatHandler
from imgconv.core.exceptions import EncodeError
from imgconv.core.formats import SupportedFormat
from imgconv.models.conversion import ConversionSettings


class JPEGHandler(BaseFormatHandler):
    """Handler for JPEG format."""

    format = SupportedFormat.JPEG

    def matches_signature(self, image_data: bytes) -> bool:
        return image_data[:3] == JPEG_SIGNATURE

    def load_image(self, image_data: bytes) -> Image.Image:
        """Load JPEG image from bytes."""
        img = super().load_image(image_data)

        # Convert to RGB if needed (some JPEGs might be in CMYK)
        if img.mode == "CMYK":
            img = img.convert("RGB")
        return img

    def save_image(
        self, image: Image.Image, output_buffer: BinaryIO, settings: ConversionSettings
    ) -> None:
        """Save image as JPEG."""
        try:
            image = self.prepare_image(image)
            save_params = self.get_quality_param(settings)
            save_params["optimize"] = True

            image.save(output_buffer, format="JPEG", **save_params)
            output_buffer.seek(0)

        except Exception as e:
            raise EncodeError(
                f"Failed to save image as JPEG: {str(e)}",
                details={"output_format": "jpeg", "reason": str(e)},
            ) from e

    def get_quality_param(self, settings: ConversionSettings) -> Dict[str, Any]:
        """Get JPEG-specific quality parameters."""
        # Map 0-100 onto libjpeg's useful 1-95 range
        jpeg_quality = int((settings.quality / 100) * JPEG_MAX_QUALITY)
        jpeg_quality = max(1, min(JPEG_MAX_QUALITY, jpeg_quality))

        return {
            "quality": jpeg_quality,
            # 4:4:4 for high quality, 4:2:0 otherwise
            "subsampling": 0 if settings.quality > FULL_CHROMA_QUALITY_THRESHOLD else 2,
        }

    def _supports_transparency(self) -> bool:
        return False

    def _supports_mode(self, mode: str) -> bool:
        return mode in ("RGB", "L", "CMYK")
