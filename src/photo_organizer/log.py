"""Logging setup for the command line."""

from __future__ import annotations

import logging

from rich.console import Console
from rich.logging import RichHandler

LOGGER_NAME = "photo_organizer"
_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR"]


def resolve_level(base_level: str, verbose: int = 0, quiet: bool = False) -> int:
    """Return the effective level: each -v lowers it one step, -q raises it to WARNING."""
    if quiet:
        return max(logging.WARNING, logging.getLevelName(base_level.upper()))
    position = _LEVELS.index(base_level.upper()) if base_level.upper() in _LEVELS else 1
    return logging.getLevelName(_LEVELS[max(0, position - verbose)])


def configure_logging(level: int, console: Console | None = None) -> logging.Logger:
    """Attach a single rich handler to the package logger.

    Repeated calls replace the handler, so commands invoked several times in
    one process (e.g. under test) do not duplicate output.
    """
    logger = logging.getLogger(LOGGER_NAME)
    for handler in list(logger.handlers):
        if isinstance(handler, RichHandler):
            logger.removeHandler(handler)

    handler = RichHandler(
        console=console or Console(stderr=True),
        show_time=False,
        show_path=level <= logging.DEBUG,
        markup=False,
    )
    handler.setFormatter(logging.Formatter("%(message)s"))
    logger.addHandler(handler)
    logger.setLevel(level)
    return logger


__all__ = ["configure_logging", "resolve_level", "LOGGER_NAME"]
