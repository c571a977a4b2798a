#!/usr/bin/env python3
"""
Command-line interface for nameforge.
"""

import argparse
import sys
from pathlib import Path

from loguru import logger

from . import __version__
from .config import RenameOptions
from .core import ImageRenamer
from .errors import InputPathError
from .log_setup import setup_logging
from .scanner import collect_images


def positive_int(value: str) -> int:
    number = int(value)
    if number < 1:
        raise argparse.ArgumentTypeError(f"expected a positive integer, got {value}")
    return number


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="nameforge",
        description="Rename images by context",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  nameforge -i ~/Pictures/trip --dry-run
  nameforge -i ~/Pictures/trip --organize-by-date --date-only
  nameforge -i photo.jpg --ai-content --ai-case camelCase --ai-max-chars 30

Files are renamed as DATE_CONTENT.ext where CONTENT is the place name from
the GPS position (or NoGPS), or an AI description with --ai-content.
        """
    )

    parser.add_argument('-i', '--input', required=True, type=Path,
                        help='Image file or folder to process')
    parser.add_argument('-d', '--dry-run', action='store_true',
                        help='Show what would be renamed without renaming files')
    parser.add_argument('-o', '--organize-by-date', action='store_true',
                        help='Move images into date folders (YYYY-MM-DD)')

    ai = parser.add_argument_group('AI content analysis')
    ai.add_argument('--ai-content', action='store_true',
                    help='Name images after their content using Ollama')
    ai.add_argument('--ai-model', default='llava:13b',
                    help='Ollama model to use (default: %(default)s)')
    ai.add_argument('--ai-max-chars', type=positive_int, default=20,
                    help='Maximum characters for the AI name (default: %(default)s)')
    ai.add_argument('--ai-case', default='lowercase',
                    help='snake_case, camelCase, PascalCase, kebab-case, lowercase '
                         'or uppercase (default: %(default)s)')
    ai.add_argument('--ai-language', default='English',
                    help='Language of the AI name (default: %(default)s)')

    dates = parser.add_argument_group('dates')
    dates.add_argument('--date-only', action='store_true',
                       help='Use YYYY-MM-DD instead of YYYY-MM-DD_HH-MM-SS')
    dates.add_argument('--use-file-date', action='store_true',
                       help='Use filesystem dates instead of EXIF capture time')
    dates.add_argument('--prefer-modified', action='store_true',
                       help='With file dates, prefer modified over creation time')
    dates.add_argument('--no-date', action='store_true',
                       help='Leave the date out of the new name')

    parser.add_argument('--max-images', type=positive_int, default=None,
                        help='Stop after processing this many images')
    parser.add_argument('-v', '--verbose', action='store_true',
                        help='Show debug output')
    parser.add_argument('--version', action='version',
                        version=f'%(prog)s {__version__}')
    return parser


def options_from_args(args: argparse.Namespace) -> RenameOptions:
    return RenameOptions(
        dry_run=args.dry_run,
        organize_by_date=args.organize_by_date,
        ai_content=args.ai_content,
        ai_model=args.ai_model,
        ai_max_chars=args.ai_max_chars,
        ai_case=args.ai_case,
        ai_language=args.ai_language,
        date_only=args.date_only,
        max_images=args.max_images,
        use_file_date=args.use_file_date,
        prefer_modified=args.prefer_modified,
        no_date=args.no_date,
    )


def display_config(input_path: Path, options: RenameOptions) -> None:
    print("NameForge Configuration")
    print("-" * 50)
    print(f"Input:        {input_path}")
    print(f"Mode:         {'DRY RUN' if options.dry_run else 'LIVE'}")
    print(f"Date folders: {'ENABLED' if options.organize_by_date else 'DISABLED'}")

    if options.no_date:
        print("Date:         NONE")
    else:
        source = 'file' if options.use_file_date else 'EXIF, file fallback'
        if options.use_file_date:
            source += ' (modified)' if options.prefer_modified else ' (created)'
        layout = 'YYYY-MM-DD' if options.date_only else 'YYYY-MM-DD_HH-MM-SS'
        print(f"Date:         {layout} from {source}")

    if options.ai_content:
        print("AI Analysis:  ENABLED")
        print(f"   Model:     {options.ai_model}")
        print(f"   Max chars: {options.ai_max_chars}")
        print(f"   Case:      {options.ai_case}")
        print(f"   Language:  {options.ai_language}")
    else:
        print("AI Analysis:  DISABLED (using GPS location data instead)")

    if options.max_images is not None:
        print(f"Max images:   {options.max_images}")
    print("-" * 50)


def main(argv=None) -> int:
    """Main entry point for the nameforge command."""
    args = build_parser().parse_args(argv)
    setup_logging(args.verbose)

    options = options_from_args(args)
    display_config(args.input, options)

    try:
        images = collect_images(args.input)
    except InputPathError as e:
        logger.error(str(e))
        return 1

    if not images:
        print("No valid image files found to process.")
        return 1

    try:
        summary = ImageRenamer(options).process(args.input, images)
    except KeyboardInterrupt:
        print("\n\nOperation cancelled by user.")
        return 1

    verb = 'would be renamed' if options.dry_run else 'renamed'
    print(f"\nProcessed {summary.processed} images: {summary.renamed} {verb}, "
          f"{summary.failed} failed.")
    return 0


if __name__ == '__main__':
    sys.exit(main())
