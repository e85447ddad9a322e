"""Unit tests for logger.py"""

import logging

from blockpress.logger import LOGGER_NAME, setup_logger


def test_setup_logger_returns_package_logger():
    logger = setup_logger("DEBUG")
    assert logger.name == LOGGER_NAME
    assert logger.level == logging.DEBUG


def test_setup_logger_is_idempotent():
    """Repeated setup adjusts the level without stacking handlers."""
    first = setup_logger("INFO")
    count = len(first.handlers)
    second = setup_logger("WARNING")
    assert second is first
    assert len(second.handlers) == count
    assert second.level == logging.WARNING


def test_module_loggers_are_children():
    """Module loggers propagate to the package logger."""
    child = logging.getLogger("blockpress.core.render")
    assert child.parent.name == LOGGER_NAME or child.parent.name.startswith(LOGGER_NAME)
