"""In-process rule transport.

Keeps rule lists in a dict. Used by tests, by the CLI's default backend and
anywhere a server is not available.
"""

from __future__ import annotations

import logging
from typing import Optional

from ..privacy.rules import PrivacyRule
from ..privacy.types import PrivacyKey
from .adapter import TransportConfig, TransportError

logger = logging.getLogger(__name__)


class InMemoryRuleTransport:
    """Dict-backed :class:`~parley.transport.adapter.RuleTransport`.

    ``fail_fetch`` / ``fail_write`` make the next calls raise
    :class:`TransportError`, for exercising failure paths.
    """

    def __init__(
        self,
        config: Optional[TransportConfig] = None,
        rules: Optional[dict[PrivacyKey, list[PrivacyRule]]] = None,
    ):
        self._config = config or TransportConfig(backend="memory")
        self._rules: dict[PrivacyKey, list[PrivacyRule]] = {
            PrivacyKey.parse(key): list(value) for key, value in (rules or {}).items()
        }
        self.writes: list[tuple[PrivacyKey, list[PrivacyRule]]] = []
        self.fetches: list[PrivacyKey] = []
        self.fail_fetch = False
        self.fail_write = False

    async def fetch_rules(self, key: PrivacyKey) -> list[PrivacyRule]:
        key = PrivacyKey.parse(key)
        self.fetches.append(key)
        if self.fail_fetch:
            raise TransportError("Fetch failed", {"key": key.value})
        return list(self._rules.get(key, []))

    async def write_rules(self, key: PrivacyKey, rules: list[PrivacyRule]) -> None:
        key = PrivacyKey.parse(key)
        rules = list(rules)
        self.writes.append((key, rules))
        if self.fail_write:
            raise TransportError("Write failed", {"key": key.value})
        self._rules[key] = rules
        logger.debug(f"Stored {len(rules)} rules for {key.value}")

    def get(self, key: PrivacyKey) -> list[PrivacyRule]:
        """Synchronous peek at stored rules."""
        return list(self._rules.get(PrivacyKey.parse(key), []))
