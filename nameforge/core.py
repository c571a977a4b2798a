"""
Batch renaming: sequences metadata, place or AI naming and path allocation
for every image, and owns the GPS cache for the duration of a run.
"""

from datetime import datetime
from pathlib import Path
from typing import Dict, List, NamedTuple, Optional, Tuple

from loguru import logger

from .config import DATETIME_FORMAT, NO_GPS, RenameOptions
from .describer import ContentDescriber
from .geo import GeoCache, GeoResolver
from .metadata import Coordinate, extract_coordinate, read_exif, resolve_date
from .naming import allocate_filename, build_base_name, date_folder_path


class ImageRecord(NamedTuple):
    """Per-file facts gathered before naming."""
    filepath: Path
    date: Optional[str]
    coordinate: Optional[Coordinate]
    extension: str


class BatchSummary(NamedTuple):
    processed: int = 0
    renamed: int = 0
    failed: int = 0


class ImageRenamer:
    """
    Rename images after their place or AI-described content.

    Features:
    - Date fragment from EXIF capture time or filesystem time
    - Place names from reverse geocoding, cached across runs
    - Optional AI content names from a local vision model
    - Collision-free names, optionally inside date folders
    """

    def __init__(self, options: Optional[RenameOptions] = None,
                 resolver: Optional[GeoResolver] = None,
                 describer: Optional[ContentDescriber] = None,
                 cache_path: Optional[Path] = None):
        """
        Initialize the ImageRenamer.

        Args:
            options: Run options; defaults to RenameOptions()
            resolver: Place resolver, created on first use if omitted
            describer: AI describer, created on first use if omitted
            cache_path: GPS cache file, defaults to ~/.nameforge_cache.json
        """
        self.options = options or RenameOptions()
        self._resolver = resolver
        self._describer = describer
        self.cache_path = cache_path

    @property
    def resolver(self) -> GeoResolver:
        if self._resolver is None:
            self._resolver = GeoResolver()
        return self._resolver

    @property
    def describer(self) -> ContentDescriber:
        if self._describer is None:
            self._describer = ContentDescriber()
        return self._describer

    def build_record(self, filepath: Path, exif: Optional[Dict]) -> ImageRecord:
        opts = self.options
        date = None
        if not opts.no_date:
            date = resolve_date(filepath, exif, opts.date_only,
                                opts.use_file_date, opts.prefer_modified)
        return ImageRecord(
            filepath=filepath,
            date=date,
            coordinate=extract_coordinate(exif),
            extension=filepath.suffix[1:],
        )

    def ai_content(self, record: ImageRecord, exif: Optional[Dict]) -> str:
        """AI name, or a full timestamp when the model gives nothing."""
        opts = self.options
        name = self.describer.describe(record.filepath, opts.ai_model, opts.ai_max_chars,
                                       opts.ai_case, opts.ai_language)
        if name:
            return name

        fallback = (resolve_date(record.filepath, exif, False,
                                 opts.use_file_date, opts.prefer_modified)
                    or datetime.now().strftime(DATETIME_FORMAT))
        logger.warning(f"Failed to get AI content analysis for {record.filepath}, "
                       f"using date fallback: {fallback}")
        return fallback

    def place_content(self, record: ImageRecord, cache: GeoCache) -> Tuple[str, bool]:
        if record.coordinate is None:
            return NO_GPS, False
        return self.resolver.resolve(record.coordinate.latitude,
                                     record.coordinate.longitude, cache)

    def build_new_name(self, filepath: Path, base_folder: Path,
                       cache: GeoCache) -> Optional[Tuple[Path, bool]]:
        """
        Work out the new path for one image.

        Returns:
            (target path, whether the GPS cache was modified), or None when
            the file has no extension to keep.
        """
        exif = read_exif(filepath)
        record = self.build_record(filepath, exif)
        if not record.extension:
            logger.warning(f"Skipping {filepath}: no file extension")
            return None

        if self.options.ai_content:
            content, cache_updated = self.ai_content(record, exif), False
        else:
            content, cache_updated = self.place_content(record, cache)

        base_name = build_base_name(record.date, content)

        if self.options.organize_by_date:
            directory = date_folder_path(base_folder, f"{base_name}.{record.extension}").parent
        else:
            directory = filepath.parent

        new_filename = allocate_filename(directory, base_name, record.extension)
        return directory / new_filename, cache_updated

    def apply(self, source: Path, target: Path) -> bool:
        """Rename ``source`` to ``target`` (or just log it on a dry run)."""
        if self.options.dry_run:
            logger.info(f"Dry run: {source} -> {target}")
            return True

        try:
            target.parent.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            logger.error(f"Failed to create directory {target.parent}: {e}")
            return False

        logger.info(f"Renaming: {source} -> {target}")
        try:
            source.rename(target)
        except OSError as e:
            logger.error(f"Failed to rename {source} -> {target}: {e}")
            return False

        logger.success(f"Successfully renamed: {source} -> {target}")
        return True

    def process(self, input_path: Path, images: List[Path]) -> BatchSummary:
        """Process ``images`` found under ``input_path`` one at a time."""
        input_path = Path(input_path)
        base_folder = input_path if input_path.is_dir() else input_path.parent
        max_images = self.options.max_images

        cache = GeoCache.load(self.cache_path)
        cache_updated = False
        processed = renamed = failed = 0

        for filepath in images:
            if max_images is not None and processed >= max_images:
                logger.info(f"Reached maximum image limit of {max_images}. Stopping processing.")
                break

            logger.info(f"Processing image file: {filepath}")
            processed += 1
            try:
                result = self.build_new_name(Path(filepath), base_folder, cache)
                if result is None:
                    failed += 1
                    continue

                target, updated = result
                cache_updated |= updated

                if self.apply(Path(filepath), target):
                    renamed += 1
                else:
                    failed += 1
            except Exception as e:
                logger.error(f"Error processing {filepath}: {e}")
                failed += 1

        if cache_updated or cache.dirty:
            cache.save()

        return BatchSummary(processed=processed, renamed=renamed, failed=failed)
