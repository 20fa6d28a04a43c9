"""Logging configuration for the Trefoil driver."""
import logging
import os
import sys
from typing import Optional

# Log files keep timestamps; stderr lines sit between program output and stay short.
FILE_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
STREAM_FORMAT = '[%(levelname)s] %(name)s: %(message)s'


def setup_logging(level: str = "WARNING", log_file: Optional[str] = None) -> None:
    """
    Configure logging for the interpreter, replacing any earlier configuration.

    Program output goes to stdout, so log records go to stderr unless a
    log file is given.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
               Unknown names fall back to WARNING.
        log_file: Optional path to log file; missing directories are created.
    """
    numeric_level = getattr(logging, level.upper(), logging.WARNING)

    if log_file:
        log_dir = os.path.dirname(log_file)
        if log_dir:
            os.makedirs(log_dir, exist_ok=True)
        logging.basicConfig(level=numeric_level, format=FILE_FORMAT, filename=log_file, force=True)
    else:
        logging.basicConfig(level=numeric_level, format=STREAM_FORMAT, stream=sys.stderr, force=True)

    logging.getLogger(__name__).info("Logging initialized at %s level", logging.getLevelName(numeric_level))


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger with the specified name.

    Args:
        name: Logger name, typically __name__ from the calling module

    Returns:
        Configured logger instance
    """
    return logging.getLogger(name)
