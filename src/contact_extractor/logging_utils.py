"""Logging helpers."""

from __future__ import annotations

import logging

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"
SERVER_LOGGERS = ("uvicorn", "uvicorn.error", "uvicorn.access")


def configure_logging(verbose: bool = False) -> None:
    """Configure one format for the package, uvicorn and the HTTP stack."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(level=level, format=LOG_FORMAT)
    for name in SERVER_LOGGERS:
        server_logger = logging.getLogger(name)
        server_logger.handlers.clear()
        server_logger.propagate = True
        server_logger.setLevel(level)
    # Connection pool chatter only when debugging.
    logging.getLogger("urllib3").setLevel(logging.DEBUG if verbose else logging.WARNING)


def get_logger() -> logging.Logger:
    """Return the logger used across the package."""
    return logging.getLogger("contact_extractor")
