"""Raster image conversion between JPEG, PNG, WebP and AVIF."""

__version__ = "0.3.0"
