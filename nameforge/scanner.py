"""
Input collection: supported image files from a file or directory path.
"""

from pathlib import Path
from typing import List

from loguru import logger

from .config import SUPPORTED_EXTENSIONS
from .errors import InputPathError

SIGNATURES = (
    b'\xff\xd8',          # JPEG
    b'\x89PNG',           # PNG
    b'GIF8',              # GIF87a / GIF89a
    b'BM',                # BMP
    b'RIFF',              # WEBP
)


def is_supported_extension(path: Path) -> bool:
    return path.suffix[1:].lower() in SUPPORTED_EXTENSIONS


def has_image_signature(path: Path) -> bool:
    """Check the first bytes of ``path`` against known image signatures."""
    try:
        with open(path, 'rb') as f:
            header = f.read(4)
    except OSError:
        return False
    if len(header) < 4:
        return False
    return header.startswith(SIGNATURES)


def is_resource_fork(path: Path) -> bool:
    return path.name.startswith('._')


def is_valid_image(path: Path) -> bool:
    return is_supported_extension(path) and has_image_signature(path)


def collect_images(input_path: Path) -> List[Path]:
    """
    List the images to process.

    A file is returned on its own; a directory yields its direct children,
    sorted by name. Raises InputPathError when nothing can be read.
    """
    input_path = Path(input_path)

    if input_path.is_file():
        if not is_valid_image(input_path):
            raise InputPathError(f"Not a valid image file: {input_path}")
        return [input_path]

    if input_path.is_dir():
        try:
            children = sorted(input_path.iterdir())
        except OSError as e:
            raise InputPathError(f"Could not open folder {input_path}: {e}") from e

        images = [
            path for path in children
            if path.is_file() and not is_resource_fork(path) and is_valid_image(path)
        ]
        logger.info(f"Found {len(images)} valid image files to process")
        return images

    raise InputPathError(f"Input path does not exist or is not accessible: {input_path}")
