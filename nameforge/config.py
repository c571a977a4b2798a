"""
Configuration constants and run options for nameforge.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Optional

# --- Remote services ---
GEOCODER_DOMAIN = "nominatim.openstreetmap.org"
GEOCODER_USER_AGENT = "nameforge/1.0"
GEOCODER_ZOOM = 10
OLLAMA_URL = "http://localhost:11434/api/generate"

REQUEST_TIMEOUT = 30  # seconds, per remote call
RETRY_DELAY = 2  # seconds before the single inference retry

# --- Image preprocessing ---
MAX_IMAGE_SIDE = 1024

# --- Cache ---
CACHE_FILENAME = ".nameforge_cache.json"


def default_cache_path() -> Path:
    return Path.home() / CACHE_FILENAME


# --- Name fragments ---
UNKNOWN_PLACE = "UnknownPlace"
NO_GPS = "NoGPS"
UNKNOWN_DATE_FOLDER = "unknown-date"

DATE_FORMAT = "%Y-%m-%d"
DATETIME_FORMAT = "%Y-%m-%d_%H-%M-%S"
EXIF_DATE_FORMATS = ("%Y:%m:%d %H:%M:%S", "%Y-%m-%d %H:%M:%S")

# --- Input files ---
SUPPORTED_EXTENSIONS = {
    'jpg', 'jpeg', 'png', 'tiff', 'tif', 'bmp', 'webp',
    'heic', 'heif', 'raw', 'cr2', 'nef', 'arw',
}


@dataclass
class RenameOptions:
    """Options controlling a single batch run."""
    dry_run: bool = False
    organize_by_date: bool = False
    ai_content: bool = False
    ai_model: str = "llava:13b"
    ai_max_chars: int = 20
    ai_case: str = "lowercase"
    ai_language: str = "English"
    date_only: bool = False
    max_images: Optional[int] = None
    use_file_date: bool = False
    prefer_modified: bool = False
    no_date: bool = False
