"""
Logging helpers for the trontx SDK.

Modules obtain a logger with ``get_logger(__name__)``. The library installs a
NullHandler on its root logger; applications opt in to output with
``configure_logging``.
"""

from __future__ import annotations

import logging
from typing import Optional, Union

ROOT_LOGGER_NAME = "trontx"
DEFAULT_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"

logging.getLogger(ROOT_LOGGER_NAME).addHandler(logging.NullHandler())


def get_logger(name: str) -> logging.Logger:
    """Return a logger nested under the SDK root logger."""
    if name != ROOT_LOGGER_NAME and not name.startswith(ROOT_LOGGER_NAME + "."):
        name = f"{ROOT_LOGGER_NAME}.{name}"
    return logging.getLogger(name)


def configure_logging(
    level: Union[int, str] = logging.INFO,
    fmt: Optional[str] = None,
) -> logging.Logger:
    """
    Attach a stream handler to the SDK root logger.

    Calling it again only updates the level and format.

    Args:
        level: Logging level name or number.
        fmt: Optional format string.

    Returns:
        The SDK root logger.
    """
    logger = logging.getLogger(ROOT_LOGGER_NAME)
    logger.setLevel(level)

    handler = next(
        (h for h in logger.handlers if isinstance(h, logging.StreamHandler)),
        None,
    )
    if handler is None:
        handler = logging.StreamHandler()
        logger.addHandler(handler)
    handler.setFormatter(logging.Formatter(fmt or DEFAULT_FORMAT))
    return logger


__all__ = ["get_logger", "configure_logging"]
