"""Parley Core - shared configuration, errors and logging."""

from .exceptions import (
    ConfigException,
    ParleyException,
    StateError,
    ValidationException,
)
from .logging import configure_logging, get_logger

__all__ = [
    "ConfigException",
    "ParleyException",
    "StateError",
    "ValidationException",
    "configure_logging",
    "get_logger",
]
