"""Logging configuration for ytcaptions."""

import sys

from loguru import logger

# Library use stays silent until the CLI (or the caller) configures a sink
logger.remove()

_info_format = "<level>{level: <7}</level> | {message}"
_debug_format = (
    "<dim>{time:HH:mm:ss}</dim> | <level>{level: <7}</level> | "
    "<cyan>{name}</cyan> | {message}"
)


def configure_logging(verbose: bool = False, quiet: bool = False) -> None:
    """Configure logging based on verbosity.

    Args:
        verbose: Show DEBUG level with timestamps and module names.
        quiet: Only show warnings and errors. Ignored when verbose is set.
    """
    logger.remove()
    if verbose:
        logger.add(sys.stderr, format=_debug_format, level="DEBUG")
    elif quiet:
        logger.add(sys.stderr, format=_info_format, level="WARNING")
    else:
        logger.add(sys.stderr, format=_info_format, level="INFO")


__all__ = ["logger", "configure_logging"]
