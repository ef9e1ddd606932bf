"""Supported formats and extension lookup."""

from enum import Enum
from pathlib import Path
from typing import List, Union

from imgconv.core.constants import (
    CANONICAL_EXTENSIONS,
    FORMAT_ALIASES,
    PILLOW_FORMAT_NAMES,
)
from imgconv.core.exceptions import UnsupportedFormatError, ValidationError


class SupportedFormat(str, Enum):
    """Image encodings the converter reads and writes."""

    JPEG = "jpeg"
    PNG = "png"
    WEBP = "webp"
    AVIF = "avif"

    @classmethod
    def from_extension(cls, extension: str) -> "SupportedFormat":
        """Parse an extension string such as ``"JPG"`` or ``"webp"``.

        The lookup is case-insensitive. A leading dot is not stripped.

        Raises:
            UnsupportedFormatError: If the string names no supported format.
        """
        canonical = FORMAT_ALIASES.get(extension.lower())
        if canonical is None:
            raise UnsupportedFormatError(
                f"Unsupported format: {extension}",
                details={
                    "requested_format": extension,
                    "supported_formats": supported_extensions(),
                },
            )
        return cls(canonical)

    @property
    def extension(self) -> str:
        """Canonical lowercase extension, without the dot."""
        return CANONICAL_EXTENSIONS[self.value]

    @property
    def pillow_format(self) -> str:
        return PILLOW_FORMAT_NAMES[self.value]

    @property
    def aliases(self) -> List[str]:
        return sorted(
            alias for alias, target in FORMAT_ALIASES.items() if target == self.value
        )

    @property
    def is_lossy(self) -> bool:
        return self is not SupportedFormat.PNG


def parse_format(extension: str) -> SupportedFormat:
    """Resolve an extension string to a supported format."""
    return SupportedFormat.from_extension(extension)


def canonical_extension(fmt: SupportedFormat) -> str:
    """Return the extension used when generating output file names."""
    return fmt.extension


def supported_extensions() -> List[str]:
    """All extension strings the converter recognizes."""
    return sorted(FORMAT_ALIASES)


def format_from_path(path: Union[str, Path]) -> SupportedFormat:
    """Infer a format from a path's suffix without touching the filesystem.

    Raises:
        ValidationError: If the path has no suffix.
        UnsupportedFormatError: If the suffix is not a supported extension.
    """
    suffix = Path(path).suffix
    if not suffix:
        raise ValidationError(
            f"Output file must have a valid extension: {path}",
            details={
                "field_name": "output_path",
                "field_value": str(path),
                "expected_values": supported_extensions(),
            },
        )
    return parse_format(suffix[1:])
