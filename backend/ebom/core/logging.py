"""
logging.py — Logging Setup for the EBOM / LCA Backend

Purpose:
- One stream for API requests, node imports and usage-event writes,
  formatted as: timestamp | level | module | message
- Keep library chatter (SQLAlchemy engine, uvicorn access) below the
  application's own messages unless DEBUG is requested.

The pure LCA computation (services/lca) never logs; callers log results.
"""

import logging
from typing import Mapping, Optional

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Third-party loggers capped at these levels unless the root level is DEBUG
LIBRARY_LEVELS: Mapping[str, int] = {
    "sqlalchemy.engine": logging.WARNING,
    "uvicorn.access": logging.WARNING,
}


def _parse_level(level: Optional[str]) -> int:
    value = logging.getLevelName((level or "INFO").strip().upper())
    return value if isinstance(value, int) else logging.INFO


def configure_logging(level: str = "INFO", library_levels: Mapping[str, int] = LIBRARY_LEVELS) -> None:
    """
    Configure root logging. Call once, from main.py.

    An unknown level name falls back to INFO.
    """
    root_level = _parse_level(level)
    logging.basicConfig(level=root_level, format=LOG_FORMAT, datefmt=DATE_FORMAT)

    if root_level > logging.DEBUG:
        for name, lib_level in library_levels.items():
            logging.getLogger(name).setLevel(lib_level)

    logging.getLogger(__name__).info("Logging initialized with level %s", logging.getLevelName(root_level))


def get_logger(name: str) -> logging.Logger:
    """
    Usage:
        from ebom.core.logging import get_logger
        logger = get_logger(__name__)
    """
    return logging.getLogger(name)
