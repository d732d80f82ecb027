import logging
import sys
from typing import Optional

CONSOLE_FORMAT = "fetchmd: %(levelname)s: %(message)s"
FILE_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def _make_handler(handler: logging.Handler, level: int, format_string: str) -> logging.Handler:
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(format_string))
    return handler


def setup_logging(
    level: str = "WARNING",
    log_file: Optional[str] = None,
    format_string: Optional[str] = None,
    force: bool = False,
) -> logging.Logger:
    """
    Set up logging for fetchmd.

    Console records go to stderr in a short form, because stdout carries the
    converted Markdown. A log file, if given, gets timestamped records.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file: Optional file path for logging output
        format_string: Custom format applied to every handler
        force: If True, replace handlers from an earlier call

    Returns:
        The configured "fetchmd" logger
    """
    numeric_level = getattr(logging, level.upper(), logging.WARNING)
    logger = logging.getLogger("fetchmd")
    logger.setLevel(numeric_level)

    if force or not logger.handlers:
        for handler in list(logger.handlers):
            logger.removeHandler(handler)
            handler.close()

        logger.addHandler(
            _make_handler(logging.StreamHandler(sys.stderr), numeric_level, format_string or CONSOLE_FORMAT)
        )
        if log_file:
            logger.addHandler(
                _make_handler(logging.FileHandler(log_file), numeric_level, format_string or FILE_FORMAT)
            )

    # Records stay off the root logger so they are not printed twice
    logger.propagate = False

    return logger
