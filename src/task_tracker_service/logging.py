"""Logging helpers bound to the task_tracker_service package namespace."""

from __future__ import annotations

from typing import TYPE_CHECKING

from service_commons.logging import get_named_logger
from service_commons.logging import setup_logging as _setup_logging

if TYPE_CHECKING:
    import logging

PACKAGE_LOGGER_NAME = "task_tracker_service"


def setup_logging(level: str, service_name: str, log_directory: str | None) -> logging.Logger:
    """Configure JSON logging for every logger under the service package."""
    return _setup_logging(level, service_name, PACKAGE_LOGGER_NAME, log_directory)


def get_logger(name: str) -> logging.Logger:
    """Get a module logger under the service package."""
    return get_named_logger(PACKAGE_LOGGER_NAME, name)
