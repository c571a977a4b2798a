"""
Reverse geocoding with a persistent, coordinate-bucketed place cache.
"""

import json
from pathlib import Path
from typing import Dict, Optional, Tuple

from geopy.exc import GeopyError
from geopy.geocoders import Nominatim
from loguru import logger

from .config import (
    GEOCODER_DOMAIN,
    GEOCODER_USER_AGENT,
    GEOCODER_ZOOM,
    REQUEST_TIMEOUT,
    UNKNOWN_PLACE,
    default_cache_path,
)


def cache_key(latitude: float, longitude: float) -> str:
    """Quantize a coordinate to micro-degrees (truncated) for cache lookup."""
    return f"{int(latitude * 1e6)}_{int(longitude * 1e6)}"


def place_from_display_name(display_name: str) -> str:
    """Take the first component of a display name, filename-friendly."""
    return display_name.split(',')[0].strip().replace(' ', '_')


class GeoCache:
    """
    Place names keyed by quantized coordinate, stored as one JSON object.

    ``dirty`` is set by every insertion so the owner knows whether the
    cache needs saving.
    """

    def __init__(self, entries: Optional[Dict[str, str]] = None, path: Optional[Path] = None):
        self.entries: Dict[str, str] = dict(entries or {})
        self.path = Path(path) if path is not None else default_cache_path()
        self.dirty = False

    @classmethod
    def load(cls, path: Optional[Path] = None) -> "GeoCache":
        """Load the cache file; a missing or corrupt file gives an empty cache."""
        cache_path = Path(path) if path is not None else default_cache_path()
        if not cache_path.exists():
            return cls(path=cache_path)

        try:
            with open(cache_path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            logger.warning(f"Ignoring unreadable GPS cache {cache_path}: {e}")
            return cls(path=cache_path)

        if not isinstance(data, dict):
            logger.warning(f"Ignoring malformed GPS cache {cache_path}")
            return cls(path=cache_path)

        entries = {str(k): str(v) for k, v in data.items()}
        logger.info(f"Loaded GPS cache with {len(entries)} entries")
        return cls(entries, path=cache_path)

    def get(self, key: str) -> Optional[str]:
        return self.entries.get(key)

    def insert(self, key: str, value: str) -> None:
        self.entries[key] = value
        self.dirty = True

    def save(self) -> bool:
        """Write the cache to disk. Failures are logged, not raised."""
        try:
            with open(self.path, 'w', encoding='utf-8') as f:
                json.dump(self.entries, f, indent=2, ensure_ascii=False)
        except (OSError, TypeError) as e:
            logger.error(f"Failed to save GPS cache: {e}")
            return False

        self.dirty = False
        logger.info(f"Saved GPS cache with {len(self.entries)} entries")
        return True

    def __contains__(self, key: str) -> bool:
        return key in self.entries

    def __len__(self) -> int:
        return len(self.entries)


class GeoResolver:
    """Cache-first coordinate to place name resolution."""

    def __init__(self, geocoder=None, timeout: float = REQUEST_TIMEOUT):
        self.geocoder = geocoder or Nominatim(user_agent=GEOCODER_USER_AGENT,
                                              domain=GEOCODER_DOMAIN)
        self.timeout = timeout

    def lookup(self, latitude: float, longitude: float) -> Optional[str]:
        """Query the geocoder; None on any failure."""
        logger.info(f"Resolving GPS coordinates ({latitude}, {longitude})...")
        try:
            location = self.geocoder.reverse(
                (latitude, longitude),
                exactly_one=True,
                zoom=GEOCODER_ZOOM,
                addressdetails=False,
                timeout=self.timeout,
            )
        except (GeopyError, ValueError) as e:
            logger.warning(f"Geocoding failed: {e}")
            return None

        if location is None:
            logger.warning(f"No place found for ({latitude}, {longitude})")
            return None

        display_name = (location.raw or {}).get('display_name')
        if not isinstance(display_name, str):
            logger.warning(f"Geocoder response has no display_name for ({latitude}, {longitude})")
            return None
        return place_from_display_name(display_name)

    def resolve(self, latitude: float, longitude: float, cache: GeoCache) -> Tuple[str, bool]:
        """
        Resolve a coordinate to a place name.

        Returns the place and whether ``cache`` was modified. Lookups that
        fail are cached as UnknownPlace as well.
        """
        key = cache_key(latitude, longitude)

        cached = cache.get(key)
        if cached is not None:
            logger.debug(f"GPS cache hit for {key}: {cached}")
            return cached, False

        strategies = (
            lambda: self.lookup(latitude, longitude),
            lambda: UNKNOWN_PLACE,
        )
        place = next(value for value in (strategy() for strategy in strategies) if value)

        cache.insert(key, place)
        return place, True
