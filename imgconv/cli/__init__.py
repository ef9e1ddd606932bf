"""
imgconv CLI Package
"""

from imgconv import __version__

__all__ = ["__version__"]
