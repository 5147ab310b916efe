"""
Sentinel-G - Logging Configuration
Attaches a single stdout handler to the package logger.
"""

import logging
import sys
from typing import Optional

from sentinelg.core.config import settings

PACKAGE_LOGGER = "sentinelg"

DEFAULT_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s:%(lineno)d | %(message)s"

# Third-party loggers that drown out state transitions at INFO
NOISY_LOGGERS = ("httpx", "httpcore", "uvicorn.access")


def setup_logging(
    level: Optional[str] = None,
    format_string: Optional[str] = None
) -> logging.Logger:
    """
    Configure and return the package logger.

    Safe to call more than once: the handler is replaced, not duplicated,
    and the root logger is left to the host (uvicorn, pytest).

    Args:
        level: Log level name (default from settings)
        format_string: Custom format string for log messages

    Returns:
        The "sentinelg" logger
    """
    log_level = getattr(logging, (level or settings.log_level).upper(), logging.INFO)

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(
        format_string or DEFAULT_FORMAT,
        datefmt="%Y-%m-%d %H:%M:%S",
    ))
    handler.set_name(PACKAGE_LOGGER)

    logger = logging.getLogger(PACKAGE_LOGGER)
    for existing in list(logger.handlers):
        if existing.get_name() == PACKAGE_LOGGER:
            logger.removeHandler(existing)
    logger.addHandler(handler)
    logger.setLevel(log_level)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    return logger
