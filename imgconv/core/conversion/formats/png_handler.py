"""PNG format handler."""

from typing import Any, BinaryIO, Dict

from PIL import Image

from imgconv.core.constants import PNG_SIGNATURE
from imgconv.core.conversion.formats.base import BaseFormatHandler
from imgconv.core.exceptions import EncodeError
from imgconv.core.formats import SupportedFormat
from imgconv.models.conversion import ConversionSettings


class PNGHandler(BaseFormatHandler):
    """Handler for PNG format."""

    format = SupportedFormat.PNG

    def matches_signature(self, image_data: bytes) -> bool:
        return image_data[:8] == PNG_SIGNATURE

    def save_image(
        self, image: Image.Image, output_buffer: BinaryIO, settings: ConversionSettings
    ) -> None:
        """Save image as PNG."""
        try:
            image = self.prepare_image(image)
            save_params = self.get_quality_param(settings)

            image.save(output_buffer, format="PNG", **save_params)
            output_buffer.seek(0)

        except Exception as e:
            raise EncodeError(
                f"Failed to save image as PNG: {str(e)}",
                details={"output_format": "png", "reason": str(e)},
            ) from e

    def get_quality_param(self, settings: ConversionSettings) -> Dict[str, Any]:
        """PNG is lossless; quality is ignored and only zlib effort applies."""
        return {"compress_level": settings.png_compress_level}

    def _supports_transparency(self) -> bool:
        return True

    def _supports_mode(self, mode: str) -> bool:
        return mode in ("RGB", "RGBA", "L", "LA", "P", "1", "I", "I;16")
