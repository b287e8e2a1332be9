"""Rule Transport: abstract interface for fetching and writing privacy rules.

Defines the ``RuleTransport`` protocol that every backend must satisfy,
along with ``TransportConfig`` and ``TransportError``.

Design goals:
* Pure protocol: no concrete base class so backends stay decoupled.
* Async-first: every I/O operation is a coroutine.
* Minimal surface: one read, one write.

See Also:
    ``parley.transport.http_transport`` for the aiohttp backend and
    ``parley.transport.memory`` for the in-process one.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Protocol, runtime_checkable

from ..core import defaults
from ..core.exceptions import ParleyException
from ..privacy.rules import PrivacyRule
from ..privacy.types import PrivacyKey

# ---------------------------------------------------------------------------
# Data classes
# ---------------------------------------------------------------------------


@dataclass
class TransportConfig:
    """Configuration blob handed to :func:`get_transport`.

    Every field has a sensible default so callers can start with
    ``TransportConfig()`` and override as needed.
    """

    # Which backend to instantiate (e.g. "memory", "http")
    backend: str = "memory"

    # HTTP backend
    base_url: str = "http://localhost:8080"
    auth_token: str = ""

    # Timeouts (seconds)
    request_timeout: float = 10.0

    # Extra backend-specific options
    extra: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_env(cls) -> "TransportConfig":
        """Build a config from the ``PARLEY_*`` environment defaults."""
        return cls(
            backend=defaults.DEFAULT_TRANSPORT,
            base_url=defaults.API_URL,
            auth_token=defaults.API_TOKEN,
            request_timeout=defaults.REQUEST_TIMEOUT,
        )


# ---------------------------------------------------------------------------
# Protocol
# ---------------------------------------------------------------------------


@runtime_checkable
class RuleTransport(Protocol):
    """Protocol every transport backend must implement."""

    async def fetch_rules(self, key: PrivacyKey) -> list[PrivacyRule]:
        """Return the current ordered rule list for *key*."""
        ...

    async def write_rules(self, key: PrivacyKey, rules: list[PrivacyRule]) -> None:
        """Replace the rule list for *key* with *rules*."""
        ...


class TransportError(ParleyException):
    """Raised when a transport operation fails."""
