from __future__ import annotations

import logging
import os
import sys

LOGGER_NAME = "expirybot"
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def configure_logging(verbose: bool = False) -> logging.Logger:
    """Send expirybot diagnostics to stderr.

    Level is DEBUG with verbose, else EXPIRYBOT_LOG_LEVEL (default WARNING).
    Report lines go to stdout and never pass through logging.
    """

    level_name = "DEBUG" if verbose else os.getenv("EXPIRYBOT_LOG_LEVEL", "WARNING")
    level = getattr(logging, level_name.upper(), logging.WARNING)

    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level)

    if not logger.handlers:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
        logger.addHandler(handler)

    logger.propagate = False
    return logger
