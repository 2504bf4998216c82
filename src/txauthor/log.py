"""Logging setup for the ``txauthor`` logger hierarchy."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from txauthor.config.settings import LogConfig

ROOT_LOGGER = "txauthor"

_handler: logging.Handler | None = None


def configure_logging(config: LogConfig) -> logging.Logger:
    """Attach a stream handler to the ``txauthor`` logger.

    Calling it again replaces the handler installed by the previous call
    rather than stacking another one.
    """
    global _handler

    logger = logging.getLogger(ROOT_LOGGER)
    if _handler is not None:
        logger.removeHandler(_handler)

    _handler = logging.StreamHandler()
    _handler.setFormatter(logging.Formatter(config.format))
    logger.addHandler(_handler)
    logger.setLevel(config.level.value)
    return logger


def installed_handler() -> logging.Handler | None:
    """Return the handler installed by :func:`configure_logging`, if any."""
    return _handler
