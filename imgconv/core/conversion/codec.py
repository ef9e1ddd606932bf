"""Decode/encode capability backed by the per-format Pillow handlers."""

from dataclasses import dataclass, field
from io import BytesIO
from pathlib import Path
from typing import Dict, Iterable, Optional, Union

import structlog
from PIL import Image

from imgconv.core.conversion.formats.avif_handler import AVIFHandler
from imgconv.core.conversion.formats.base import BaseFormatHandler
from imgconv.core.conversion.formats.jpeg_handler import JPEGHandler
from imgconv.core.conversion.formats.png_handler import PNGHandler
from imgconv.core.conversion.formats.webp_handler import WebPHandler
from imgconv.core.exceptions import (
    ConfigurationError,
    DecodeError,
    EncodeError,
    FileIOError,
)
from imgconv.core.formats import SupportedFormat
from imgconv.models.conversion import ConversionSettings, ImageMetadata

logger = structlog.get_logger()


@dataclass
class RasterImage:
    """A decoded image owned by the conversion call that produced it."""

    image: Image.Image
    source_format: SupportedFormat
    metadata: Optional[ImageMetadata] = field(default=None)

    @property
    def width(self) -> int:
        return self.image.width

    @property
    def height(self) -> int:
        return self.image.height

    @property
    def size(self) -> tuple[int, int]:
        return self.image.size

    def close(self) -> None:
        self.image.close()

    def __enter__(self) -> "RasterImage":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()


def default_handlers() -> list[BaseFormatHandler]:
    return [JPEGHandler(), PNGHandler(), WebPHandler(), AVIFHandler()]


class ImageCodec:
    """Routes decode and encode calls to the handler for each format."""

    def __init__(self, handlers: Optional[Iterable[BaseFormatHandler]] = None) -> None:
        self.format_handlers: Dict[SupportedFormat, BaseFormatHandler] = {}
        for handler in handlers if handlers is not None else default_handlers():
            self.register_handler(handler)

        # Every supported format needs exactly one handler
        missing = [
            fmt.value for fmt in SupportedFormat if fmt not in self.format_handlers
        ]
        if missing:
            raise ConfigurationError(
                f"No handler registered for: {', '.join(missing)}",
                details={"config_key": "format_handlers", "missing": missing},
            )

    def register_handler(self, handler: BaseFormatHandler) -> None:
        self.format_handlers[handler.format] = handler

    def get_handler(self, fmt: SupportedFormat) -> BaseFormatHandler:
        return self.format_handlers[fmt]

    def sniff_format(self, image_data: bytes) -> SupportedFormat:
        """Identify the encoding of raw bytes from their magic bytes.

        Raises:
            DecodeError: If the bytes match none of the supported formats.
        """
        for fmt, handler in self.format_handlers.items():
            if handler.matches_signature(image_data):
                return fmt
        raise DecodeError(
            "Unrecognized image format",
            details={"reason": "no supported signature matched"},
        )

    def decode(self, path: Union[str, Path]) -> RasterImage:
        """Read and decode an image file.

        The decoder is chosen from the file's content, not its extension.

        Raises:
            FileIOError: If the file cannot be read.
            DecodeError: If the content is not a decodable supported image.
        """
        path = Path(path)
        try:
            image_data = path.read_bytes()
        except OSError as e:
            raise FileIOError(
                f"Cannot read input file {path}: {e.strerror or e}",
                details={"path": str(path), "operation": "read", "reason": str(e)},
            ) from e

        try:
            return self.decode_bytes(image_data)
        except DecodeError as e:
            e.details.setdefault("input_path", str(path))
            raise

    def decode_bytes(self, image_data: bytes) -> RasterImage:
        if not image_data:
            raise DecodeError("Input file is empty", details={"reason": "empty"})

        source_format = self.sniff_format(image_data)
        handler = self.get_handler(source_format)
        image = handler.load_image(image_data)

        logger.debug(
            "Image decoded",
            source_format=source_format.value,
            width=image.width,
            height=image.height,
            mode=image.mode,
        )
        return RasterImage(
            image=image,
            source_format=source_format,
            metadata=handler.extract_metadata(image),
        )

    def encode(
        self,
        raster: RasterImage,
        target_format: SupportedFormat,
        settings: ConversionSettings,
    ) -> bytes:
        """Encode a raster to the target format.

        Only ``target_format`` selects the encoder.

        Raises:
            EncodeError: If the encoder rejects the raster.
        """
        handler = self.get_handler(target_format)
        output_buffer = BytesIO()
        handler.save_image(raster.image, output_buffer, settings)
        data = output_buffer.getvalue()
        if not data:
            raise EncodeError(
                f"Encoder produced no data for {target_format.value}",
                details={"output_format": target_format.value},
            )
        return data
