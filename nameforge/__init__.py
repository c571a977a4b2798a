"""
NameForge - rename images by their content.

This package provides functionality to:
- Extract capture dates and GPS coordinates from image EXIF data
- Resolve coordinates to place names with a persistent cache
- Describe images with a local AI vision model
- Rename files with collision-free, optionally date-foldered names
"""

__version__ = "0.1.0"

from .config import RenameOptions
from .core import BatchSummary, ImageRecord, ImageRenamer

__all__ = ["ImageRenamer", "ImageRecord", "BatchSummary", "RenameOptions"]
