"""Logging setup for Parley.

Modules log through ``logging.getLogger(__name__)``; this module only wires a
handler onto the package root logger so CLI runs get readable output.
"""

from __future__ import annotations

import json
import logging
import sys
from datetime import datetime, timezone

from . import defaults

ROOT_LOGGER = "parley"

_HANDLER_ATTR = "_parley_handler"


class JsonFormatter(logging.Formatter):
    """One JSON object per line."""

    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "ts": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
        }
        if record.exc_info:
            payload["exc"] = self.formatException(record.exc_info)
        return json.dumps(payload, sort_keys=True)


def configure_logging(level: str | int | None = None, fmt: str | None = None, stream=None) -> logging.Logger:
    """Install a single stream handler on the ``parley`` logger.

    Calling this again replaces the previous handler instead of stacking a
    second one.

    Args:
        level: Level name or number. Defaults to ``PARLEY_LOG_LEVEL``.
        fmt: ``"text"`` or ``"json"``. Defaults to ``PARLEY_LOG_FORMAT``.
        stream: Target stream, ``sys.stderr`` if omitted.

    Returns:
        The configured ``parley`` logger.
    """
    logger = logging.getLogger(ROOT_LOGGER)
    level = level if level is not None else defaults.LOG_LEVEL
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO
    fmt = (fmt or defaults.LOG_FORMAT).lower()

    for existing in list(logger.handlers):
        if getattr(existing, _HANDLER_ATTR, False):
            logger.removeHandler(existing)

    handler = logging.StreamHandler(stream or sys.stderr)
    if fmt == "json":
        handler.setFormatter(JsonFormatter())
    else:
        handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s"))
    setattr(handler, _HANDLER_ATTR, True)

    logger.addHandler(handler)
    logger.setLevel(level)
    return logger


def get_logger(name: str) -> logging.Logger:
    """Return a logger under the ``parley`` namespace."""
    if name == ROOT_LOGGER or name.startswith(ROOT_LOGGER + "."):
        return logging.getLogger(name)
    return logging.getLogger(f"{ROOT_LOGGER}.{name}")
