"""Logging setup for ofd_renderer: module loggers and a quiet switch for the package."""
from __future__ import annotations

import logging
from typing import Optional

_DEFAULT_LEVEL = logging.INFO
PACKAGE_LOGGER = "ofd_renderer"


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """Return a module-level logger with default configuration applied."""
    logger = logging.getLogger(name)
    if not logging.getLogger().handlers:
        logging.basicConfig(level=_DEFAULT_LEVEL, format="%(asctime)s [%(levelname)s] %(name)s: %(message)s")
    return logger


def set_quiet(quiet: bool) -> None:
    """Lower package chatter to warnings when running quietly."""
    logging.getLogger(PACKAGE_LOGGER).setLevel(logging.WARNING if quiet else logging.NOTSET)
