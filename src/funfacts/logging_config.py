"""Logging configuration for the funfacts CLI."""

from __future__ import annotations

import logging

from rich.console import Console
from rich.logging import RichHandler

LOGGER_NAME = "funfacts"


def setup_logging(level: str = "WARNING", console: Console | None = None) -> logging.Logger:
    """Route funfacts log records to a Rich handler on stderr.

    Args:
        level: Logging level name.
        console: Console to log to. Defaults to a stderr console.

    Returns:
        The configured package logger.
    """
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(getattr(logging, level.upper()))
    logger.handlers.clear()

    handler = RichHandler(
        console=console or Console(stderr=True),
        show_time=False,
        show_path=False,
        rich_tracebacks=True,
    )
    handler.setFormatter(logging.Formatter("%(message)s"))
    logger.addHandler(handler)
    logger.propagate = False

    return logger
