"""Logging initialization using loguru."""

import sys

from loguru import logger

LOG_FORMAT = "<level>{level: <8}</level> | {message}"


def setup_logging(verbose: bool = False) -> None:
    """Replace loguru's default sink with a compact stderr sink."""
    logger.remove()
    logger.add(
        sys.stderr,
        format=LOG_FORMAT,
        level="DEBUG" if verbose else "INFO",
        backtrace=False,
        diagnose=False,
    )
