"""Centralized logging configuration for agversion.

Log lines go to stderr as ``[LEVEL] message`` so stdout stays reserved
for the version string. The logger can be configured via environment
variables:
    AGVERSION_LOGGER: Logger name (default: "agversion")
    AGVERSION_LOGLEVEL: Log level (default: "INFO")

Example:
    export AGVERSION_LOGLEVEL=DEBUG
"""

from __future__ import annotations

import logging
import os

SUCCESS: int = 25
logging.addLevelName(SUCCESS, "SUCCESS")


class TagFormatter(logging.Formatter):
    """Formatter that renders CRITICAL records with a ``FATAL`` tag."""

    tags: dict[int, str] = {logging.CRITICAL: "FATAL"}

    def format(
        self,
        record: logging.LogRecord,
    ) -> str:
        tag = self.tags.get(record.levelno)
        if tag is None:
            return super().format(record)
        original = record.levelname
        record.levelname = tag
        try:
            return super().format(record)
        finally:
            record.levelname = original


def get_logger() -> logging.Logger:
    """Get the agversion logger instance.

    Configurable via environment variables:
        AGVERSION_LOGGER: Logger name (default: "agversion")
        AGVERSION_LOGLEVEL: Log level (default: "INFO")

    Returns:
        logging.Logger: The shared logger for agversion.
    """
    name = os.environ.get("AGVERSION_LOGGER", "agversion")
    level = os.environ.get("AGVERSION_LOGLEVEL", "INFO").upper()
    new_logger = logging.getLogger(name)
    new_logger.setLevel(level)
    # Remove any existing handlers to avoid duplicates
    for handler in list(new_logger.handlers):
        new_logger.removeHandler(handler)
    # StreamHandler writes to stderr by default
    handler = logging.StreamHandler()
    handler.setLevel(level)
    handler.setFormatter(TagFormatter("[%(levelname)s] %(message)s"))
    new_logger.addHandler(handler)
    return new_logger


# Single shared logger instance for the entire package
logger: logging.Logger = get_logger()

__all__ = ["logger", "get_logger", "SUCCESS", "TagFormatter"]
