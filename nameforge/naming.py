"""
Base name composition and collision-free filename allocation.
"""

from itertools import count
from pathlib import Path
from typing import Optional

from .config import UNKNOWN_DATE_FOLDER


def build_base_name(date: Optional[str], content: str) -> str:
    """Join the date and content fragments."""
    if date:
        return f"{date}_{content}"
    return content


def _strip_extension(base_name: str, extension: str) -> str:
    suffix = f".{extension}"
    if base_name.endswith(suffix):
        return base_name[:-len(suffix)]
    return base_name


def allocate_filename(directory: Path, base_name: str, extension: str) -> str:
    """
    Find a filename in ``directory`` that doesn't exist yet.

    Tries ``base.ext`` first, then ``base_1.ext``, ``base_2.ext`` and so on.
    """
    stem = _strip_extension(base_name, extension)
    candidate = f"{stem}.{extension}"
    if not (Path(directory) / candidate).exists():
        return candidate

    for counter in count(1):
        candidate = f"{stem}_{counter}.{extension}"
        if not (Path(directory) / candidate).exists():
            return candidate


def date_folder(filename: str) -> str:
    """Leading date fragment of a generated filename."""
    if '_' not in filename:
        return UNKNOWN_DATE_FOLDER
    return filename.split('_', 1)[0]


def date_folder_path(base_directory: Path, filename: str) -> Path:
    return Path(base_directory) / date_folder(filename) / filename
