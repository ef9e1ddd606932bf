"""Base format handler interface."""

from abc import ABC, abstractmethod
from io import BytesIO
from typing import Any, BinaryIO, Dict

from PIL import Image

from imgconv.core.constants import FLATTEN_BACKGROUND
from imgconv.core.exceptions import DecodeError
from imgconv.core.formats import SupportedFormat
from imgconv.models.conversion import ConversionSettings, ImageMetadata


class BaseFormatHandler(ABC):
    """Abstract base class for format handlers."""

    format: SupportedFormat

    def can_handle(self, format_name: str) -> bool:
        """Check if this handler can process the given extension or format name."""
        return format_name.lower() in self.format.aliases

    @abstractmethod
    def matches_signature(self, image_data: bytes) -> bool:
        """Check the magic bytes of the data against this format."""

    @abstractmethod
    def save_image(
        self, image: Image.Image, output_buffer: BinaryIO, settings: ConversionSettings
    ) -> None:
        """Encode image into buffer with given settings."""

    def load_image(self, image_data: bytes) -> Image.Image:
        """Decode bytes into a fully loaded image."""
        try:
            img = Image.open(BytesIO(image_data), formats=[self.format.pillow_format])
            # Force the decoder to run so corrupt data fails here
            img.load()
            return img
        except Exception as e:
            raise DecodeError(
                f"Failed to load {self.format.pillow_format} image: {str(e)}",
                details={"input_format": self.format.value, "reason": str(e)},
            ) from e

    def extract_metadata(self, image: Image.Image) -> ImageMetadata:
        return ImageMetadata(
            format=self.format,
            width=image.width,
            height=image.height,
            color_mode=image.mode,
            has_transparency=image.mode in ("RGBA", "LA", "PA")
            or "transparency" in image.info,
        )

    def get_quality_param(self, settings: ConversionSettings) -> Dict[str, Any]:
        """Get format-specific quality parameters."""
        return {"quality": settings.quality}

    def prepare_image(self, image: Image.Image) -> Image.Image:
        """Convert the color mode to one the target encoder accepts."""
        if not self._supports_transparency() and (
            image.mode in ("RGBA", "LA", "PA")
            or (image.mode == "P" and "transparency" in image.info)
        ):
            # Flatten onto an opaque background
            rgba = image.convert("RGBA")
            background = Image.new("RGB", rgba.size, FLATTEN_BACKGROUND)
            background.paste(rgba, mask=rgba.split()[3])
            return background

        if self._supports_mode(image.mode):
            return image

        if self._supports_transparency() and (
            "transparency" in image.info or image.mode in ("LA", "PA", "P")
        ):
            return image.convert("RGBA")
        return image.convert("RGB")

    def _supports_transparency(self) -> bool:
        # Override in subclasses
        return False

    def _supports_mode(self, mode: str) -> bool:
        # Override in subclasses
        return mode in ("RGB", "RGBA")
