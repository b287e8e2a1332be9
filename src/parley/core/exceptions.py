"""Exception hierarchy shared across Parley."""

from __future__ import annotations

from typing import Any


class ParleyException(Exception):
    """Base exception for all Parley errors.

    Carries a human-readable message plus an optional ``details`` dict that
    callers (the CLI, log records) can serialise.
    """

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """Serialize for JSON output."""
        return {
            "error": type(self).__name__,
            "message": self.message,
            "details": self.details,
        }

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} ({self.details})"
        return self.message


class ValidationException(ParleyException):
    """Raised when caller-supplied input is rejected."""

    def __init__(self, message: str, field: str | None = None, value: Any = None):
        details: dict[str, Any] = {}
        if field is not None:
            details["field"] = field
        if value is not None:
            details["value"] = value
        super().__init__(message, details)
        self.field = field
        self.value = value


class StateError(ParleyException):
    """Raised when an operation is invoked in the wrong lifecycle state."""


class ConfigException(ParleyException, ValueError):
    """Raised for invalid configuration."""
