"""
Capture metadata extraction: GPS coordinates and capture dates.

EXIF decoding is delegated to exifread; this module only interprets the
decoded tags and falls back to filesystem timestamps when they are missing.
"""

import os
from datetime import datetime
from pathlib import Path
from typing import Callable, Dict, List, NamedTuple, Optional, Tuple

import exifread
from loguru import logger

from .config import DATE_FORMAT, DATETIME_FORMAT, EXIF_DATE_FORMATS

LATITUDE_TAG = 'GPS GPSLatitude'
LATITUDE_REF_TAG = 'GPS GPSLatitudeRef'
LONGITUDE_TAG = 'GPS GPSLongitude'
LONGITUDE_REF_TAG = 'GPS GPSLongitudeRef'
DATE_ORIGINAL_TAG = 'EXIF DateTimeOriginal'


class Coordinate(NamedTuple):
    """GPS position in signed decimal degrees."""
    latitude: float
    longitude: float


def read_exif(path: Path) -> Optional[Dict]:
    """Decode the EXIF block of ``path``, or None if there is none."""
    try:
        with open(path, 'rb') as f:
            tags = exifread.process_file(f, details=False)
    except Exception as e:
        logger.warning(f"Could not read EXIF data from {path}: {e}")
        return None
    return tags or None


def _tag_values(tag):
    return getattr(tag, 'values', tag)


def _ratio_to_float(value) -> float:
    # exifread Ratio exposes num/den; plain numbers and Fractions convert directly
    if hasattr(value, 'num') and hasattr(value, 'den'):
        return float(value.num) / float(value.den)
    return float(value)


def dms_to_decimal(values) -> Optional[float]:
    """Convert a degree/minute/second rational triple to decimal degrees."""
    try:
        if len(values) < 3:
            return None
        degrees = _ratio_to_float(values[0])
        minutes = _ratio_to_float(values[1])
        seconds = _ratio_to_float(values[2])
    except (TypeError, ValueError, ZeroDivisionError):
        return None
    return degrees + minutes / 60.0 + seconds / 3600.0


def _reference_letter(tag, default: str) -> str:
    if tag is None:
        return default
    text = str(_tag_values(tag)).strip().strip('\x00')
    if not text:
        return default
    return text[0].upper()


def extract_coordinate(exif: Optional[Dict]) -> Optional[Coordinate]:
    """
    Read the GPS position from decoded EXIF tags.

    Returns None unless both the latitude and longitude triples are present
    and well formed. Missing hemisphere references default to N and E.
    """
    if not exif:
        return None

    lat_tag = exif.get(LATITUDE_TAG)
    lon_tag = exif.get(LONGITUDE_TAG)
    if lat_tag is None or lon_tag is None:
        return None

    latitude = dms_to_decimal(_tag_values(lat_tag))
    longitude = dms_to_decimal(_tag_values(lon_tag))
    if latitude is None or longitude is None:
        return None

    if _reference_letter(exif.get(LATITUDE_REF_TAG), 'N') == 'S':
        latitude = -latitude
    if _reference_letter(exif.get(LONGITUDE_REF_TAG), 'E') == 'W':
        longitude = -longitude

    return Coordinate(latitude, longitude)


def _format(moment: datetime, date_only: bool) -> str:
    return moment.strftime(DATE_FORMAT if date_only else DATETIME_FORMAT)


def parse_exif_datetime(text: str) -> Optional[datetime]:
    """Parse an EXIF timestamp in either accepted layout."""
    text = text.strip().strip('\x00')
    for layout in EXIF_DATE_FORMATS:
        try:
            return datetime.strptime(text, layout)
        except ValueError:
            continue
    return None


def file_timestamp(stat_result: os.stat_result, prefer_modified: bool) -> Optional[float]:
    """Pick modified or creation time, falling back to the other one."""
    modified = stat_result.st_mtime
    created = getattr(stat_result, 'st_birthtime', None)
    primary, fallback = (modified, created) if prefer_modified else (created, modified)
    return primary if primary is not None else fallback


def _exif_date(path: Path, exif: Optional[Dict], date_only: bool) -> Optional[str]:
    if exif is None:
        logger.warning(f"No EXIF data for {path}, falling back to file time")
        return None

    tag = exif.get(DATE_ORIGINAL_TAG)
    if tag is None:
        logger.warning(f"No EXIF DateTimeOriginal for {path}, falling back to file time")
        return None

    moment = parse_exif_datetime(str(_tag_values(tag)))
    if moment is None:
        logger.warning(f"Unparsable EXIF DateTimeOriginal for {path}, falling back to file time")
        return None
    return _format(moment, date_only)


def _file_date(stat_result: os.stat_result, date_only: bool, prefer_modified: bool) -> Optional[str]:
    timestamp = file_timestamp(stat_result, prefer_modified)
    if timestamp is None:
        return None
    return _format(datetime.fromtimestamp(timestamp), date_only)


def date_strategies(path: Path, exif: Optional[Dict], stat_result: os.stat_result,
                    date_only: bool, use_file_date: bool,
                    prefer_modified: bool) -> List[Tuple[str, Callable[[], Optional[str]]]]:
    """Ordered (name, strategy) pairs for resolving a file's date."""
    strategies = []
    if not use_file_date:
        strategies.append(('exif', lambda: _exif_date(path, exif, date_only)))
    strategies.append(('filesystem', lambda: _file_date(stat_result, date_only, prefer_modified)))
    return strategies


def resolve_date(path: Path, exif: Optional[Dict] = None, date_only: bool = False,
                 use_file_date: bool = False, prefer_modified: bool = False) -> Optional[str]:
    """
    Resolve the date fragment for ``path``.

    Args:
        path: Image file
        exif: Decoded EXIF tags, or None when the file has none
        date_only: Format as YYYY-MM-DD instead of YYYY-MM-DD_HH-MM-SS
        use_file_date: Skip EXIF and use filesystem time directly
        prefer_modified: Prefer modified over creation time

    Returns:
        The formatted date, or None if the file metadata is unreadable.
    """
    try:
        stat_result = os.stat(path)
    except OSError as e:
        logger.warning(f"Could not read file metadata for {path}: {e}")
        return None

    for name, strategy in date_strategies(path, exif, stat_result, date_only,
                                          use_file_date, prefer_modified):
        value = strategy()
        if value is not None:
            logger.debug(f"Date for {path.name} from {name}: {value}")
            return value
    return None
