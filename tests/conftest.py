"""Pytest configuration and fixtures."""

from __future__ import annotations

import logging

import pytest

from funfacts.logging_config import LOGGER_NAME


@pytest.fixture(autouse=True)
def restore_package_logger():
    """Undo the handler, level and propagation changes made by setup_logging."""
    logger = logging.getLogger(LOGGER_NAME)
    handlers = list(logger.handlers)
    level = logger.level
    propagate = logger.propagate
    yield
    logger.handlers[:] = handlers
    logger.setLevel(level)
    logger.propagate = propagate
