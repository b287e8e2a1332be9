"""
HTTP rule transport over aiohttp.

Protocol:
- GET  {base_url}/privacy/{key}  ->  {"rules": [...]}
- PUT  {base_url}/privacy/{key}  <-  {"rules": [...]}

Rules are encoded with :func:`parley.privacy.rules.encode_rules`; responses
are decoded leniently, so unknown rule tags are dropped.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Dict, Optional

import aiohttp

from ..core import defaults
from ..privacy.rules import PrivacyRule, decode_rules, encode_rules
from ..privacy.types import PrivacyKey
from .adapter import TransportConfig, TransportError

logger = logging.getLogger(__name__)


class HttpRuleTransport:
    """aiohttp-backed :class:`~parley.transport.adapter.RuleTransport`."""

    def __init__(self, config: Optional[TransportConfig] = None):
        self._config = config or TransportConfig(backend="http")
        self.base_url = self._config.base_url.rstrip("/")
        self.request_timeout = self._config.request_timeout

    def _url(self, key: PrivacyKey) -> str:
        return f"{self.base_url}{defaults.PRIVACY_PATH}/{PrivacyKey.parse(key).value}"

    def _headers(self) -> Dict[str, str]:
        headers = {"Accept": "application/json"}
        if self._config.auth_token:
            headers["Authorization"] = f"Bearer {self._config.auth_token}"
        return headers

    async def _request(self, method: str, key: PrivacyKey, body: Optional[Dict[str, Any]] = None) -> Any:
        url = self._url(key)
        try:
            timeout = aiohttp.ClientTimeout(total=self.request_timeout)
            async with aiohttp.ClientSession(timeout=timeout) as session:
                async with session.request(
                    method,
                    url,
                    json=body,
                    headers=self._headers(),
                ) as resp:
                    if resp.status >= 300:
                        raise TransportError(
                            f"Server returned HTTP {resp.status}",
                            {"url": url, "body": await resp.text()},
                        )
                    if resp.status == 204 or method == "PUT":
                        return None
                    try:
                        return await resp.json()
                    except ValueError as e:
                        raise TransportError(f"Malformed response body: {e}", {"url": url}) from e
        except aiohttp.ClientError as e:
            raise TransportError(f"Connection error: {e}", {"url": url}) from e
        except asyncio.TimeoutError:
            raise TransportError("Request timeout", {"url": url})

    async def fetch_rules(self, key: PrivacyKey) -> list[PrivacyRule]:
        data = await self._request("GET", key)
        payload = data.get("rules", []) if isinstance(data, dict) else data
        rules = decode_rules(payload)
        logger.debug(f"Fetched {len(rules)} rules for {PrivacyKey.parse(key).value}")
        return rules

    async def write_rules(self, key: PrivacyKey, rules: list[PrivacyRule]) -> None:
        await self._request("PUT", key, {"rules": encode_rules(rules)})
        logger.debug(f"Wrote {len(rules)} rules for {PrivacyKey.parse(key).value}")
