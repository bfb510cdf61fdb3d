"""
Logging helpers for rocketcart.

Library modules only create loggers; handlers are installed by the
process that owns the output (the CLI calls setup_logging()).

Usage:
    from rocketcart.logging import get_logger
    logger = get_logger(__name__)

    logger.info("Cart committed")
"""

import logging
import os
import sys
from functools import cache
from typing import IO, Optional

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def setup_logging(stream: Optional[IO[str]] = None) -> None:
    """
    Send log records to stderr at LOG_LEVEL (default WARNING).

    Does nothing when the root logger already has handlers.
    """
    root = logging.getLogger()
    if root.handlers:
        return

    level_name = os.environ.get("LOG_LEVEL", "WARNING").upper()
    root.setLevel(getattr(logging, level_name, logging.WARNING))

    handler = logging.StreamHandler(stream or sys.stderr)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    root.addHandler(handler)

    # One line per inventory request otherwise
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)


@cache
def get_logger(name: str) -> logging.Logger:
    """
    Get or create a logger with the given name.

    Args:
        name: Logger name (typically __name__)
    """
    return logging.getLogger(name)


def sanitize_id_for_logging(id_value: object) -> str:
    """
    Product ids come straight from presenters, so they are escaped and
    truncated to 16 characters before they reach a log line (CWE-117).

    Returns "N/A" for None or an empty value.
    """
    if id_value is None or id_value == "":
        return "N/A"
    safe_value = (
        str(id_value)
        .replace("\n", "\\n")
        .replace("\r", "\\r")
        .replace("\t", "\\t")
        .replace("\x00", "")
    )
    return safe_value[:16]


__all__ = [
    "get_logger",
    "sanitize_id_for_logging",
    "setup_logging",
]
