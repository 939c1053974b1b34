"""Logging configuration for docsql.

The library itself only attaches a ``NullHandler``; applications that want
to see translated fragments and final statements call
:func:`configure_logging`.
"""

from __future__ import annotations

import logging
import sys
from typing import IO

LOGGER_NAME = "docsql"


def configure_logging(level: str | int = "ERROR", stream: IO[str] | None = None) -> logging.Logger:
    """Attach a stream handler to the ``docsql`` logger.

    Args:
        level: Level name (``"DEBUG"`` …) or numeric level.
        stream: Output stream; defaults to stderr.

    Returns:
        The configured package logger.
    """
    logger = logging.getLogger(LOGGER_NAME)
    logger.propagate = False
    logger.setLevel(level.upper() if isinstance(level, str) else level)

    handler = next(
        (h for h in logger.handlers if isinstance(h, logging.StreamHandler)),
        None,
    )
    if handler is None:
        handler = logging.StreamHandler(stream or sys.stderr)
        handler.setFormatter(logging.Formatter("[%(levelname)s] %(name)s: %(message)s"))
        logger.addHandler(handler)
    elif stream is not None:
        handler.setStream(stream)
    return logger
