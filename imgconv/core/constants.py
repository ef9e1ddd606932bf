"""Constants and configuration values for the image converter."""

from typing import Dict, Tuple

# Quality bounds for lossy encoders
MIN_QUALITY = 0
MAX_QUALITY = 100
DEFAULT_QUALITY = 85

# Encoder tuning defaults
DEFAULT_PNG_COMPRESS_LEVEL = 6  # zlib level 0-9
DEFAULT_WEBP_METHOD = 4  # 0 (fast) - 6 (slowest, smallest)
DEFAULT_AVIF_SPEED = 6  # 0 (slowest) - 10 (fastest)

# JPEG quality above 95 grows files without visible gain
JPEG_MAX_QUALITY = 95
FULL_CHROMA_QUALITY_THRESHOLD = 90

# Batch processing
DEFAULT_BATCH_WORKERS = 1
MAX_BATCH_WORKERS = 32

# Extension aliases mapping to canonical format names
FORMAT_ALIASES: Dict[str, str] = {
    "jpg": "jpeg",
    "jpeg": "jpeg",
    "png": "png",
    "webp": "webp",
    "avif": "avif",
}

# Canonical extension used when naming converted files
CANONICAL_EXTENSIONS: Dict[str, str] = {
    "jpeg": "jpg",
    "png": "png",
    "webp": "webp",
    "avif": "avif",
}

# Pillow's registered format identifiers
PILLOW_FORMAT_NAMES: Dict[str, str] = {
    "jpeg": "JPEG",
    "png": "PNG",
    "webp": "WEBP",
    "avif": "AVIF",
}

# Magic bytes
JPEG_SIGNATURE = b"\xff\xd8\xff"
PNG_SIGNATURE = b"\x89PNG\r\n\x1a\n"
RIFF_SIGNATURE = b"RIFF"
WEBP_FOURCC = b"WEBP"
FTYP_BOX = b"ftyp"
AVIF_BRANDS: Tuple[bytes, ...] = (b"avif", b"avis")
# Generic HEIF major brands; AVIF then shows up among the compatible brands
HEIF_CONTAINER_BRANDS: Tuple[bytes, ...] = (b"mif1", b"msf1")

# Background used when flattening alpha for formats without transparency
FLATTEN_BACKGROUND = (255, 255, 255)

# Prefix for in-flight output files during atomic writes
TEMP_FILE_PREFIX = ".imgconv-"
TEMP_FILE_SUFFIX = ".part"
