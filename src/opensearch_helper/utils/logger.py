"""Logging configuration for the application."""

import logging
import sys
from enum import Enum

# Werkzeug logs one line per request at INFO
REQUEST_LOGGER = "werkzeug"


class VerbosityLevel(Enum):
    """Output verbosity levels."""

    QUIET = "quiet"
    NORMAL = "normal"
    VERBOSE = "verbose"
    DEBUG = "debug"


LEVEL_MAP = {
    VerbosityLevel.QUIET: logging.ERROR,
    VerbosityLevel.NORMAL: logging.WARNING,
    VerbosityLevel.VERBOSE: logging.INFO,
    VerbosityLevel.DEBUG: logging.DEBUG,
}


def _make_handler(level: VerbosityLevel) -> logging.Handler:
    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(LEVEL_MAP[level])

    if level == VerbosityLevel.DEBUG:
        formatter = logging.Formatter(
            "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
    else:
        formatter = logging.Formatter("%(levelname)s: %(message)s")

    handler.setFormatter(formatter)
    return handler


def setup_logger(
    name: str = "opensearch_helper",
    level: VerbosityLevel = VerbosityLevel.NORMAL,
    log_requests: bool = True,
) -> logging.Logger:
    """
    Set up and configure the application logger.

    Args:
        name: Logger name
        level: Verbosity level enum
        log_requests: Also route the HTTP server's per-request log through
            the same handler and level

    Returns:
        Configured logger
    """
    logger = logging.getLogger(name)
    names = [name, REQUEST_LOGGER] if log_requests else [name]

    for logger_name in names:
        target = logging.getLogger(logger_name)
        target.handlers.clear()
        target.setLevel(LEVEL_MAP[level])
        target.addHandler(_make_handler(level))

    return logger
