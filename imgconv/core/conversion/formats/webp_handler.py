"""WebP format handler."""

from typing import BinaryIO, Dict, Any
from PIL import Image

from imgconv.models.conversion import ConversionSettings
from imgconv.core.constants import RIFF_SIGNATURE, WEBP_FOURCC
from imgconv.core.conversion.formats.base import BaseFormatHandler
from imgconv.core.exceptions import EncodeError
from imgconv.core.formats import SupportedFormat


class WebPHandler(BaseFormatHandler):
    """Handler for WebP format."""

    format = SupportedFormat.WEBP

    def matches_signature(self, image_data: bytes) -> bool:
        # RIFF container with a WEBP form type
        return image_data[0:4] == RIFF_SIGNATURE and image_data[8:12] == WEBP_FOURCC

    def save_image(
        self, image: Image.Image, output_buffer: BinaryIO, settings: ConversionSettings
    ) -> None:
        """Save image as WebP."""
        try:
            image = self.prepare_image(image)
            save_params = self.get_quality_param(settings)
            save_params["method"] = settings.webp_method

            if image.mode == "RGBA":
                save_params["lossless"] = False
                save_params["exact"] = False

            image.save(output_buffer, format="WEBP", **save_params)
            output_buffer.seek(0)

        except Exception as e:
            raise EncodeError(
                f"Failed to save image as WebP: {str(e)}",
                details={"output_format": "webp", "reason": str(e)},
            ) from e

    def get_quality_param(self, settings: ConversionSettings) -> Dict[str, Any]:
        # WebP quality range is 0-100, same as ours
        return {"quality": settings.quality}

    def _supports_transparency(self) -> bool:
        return True
