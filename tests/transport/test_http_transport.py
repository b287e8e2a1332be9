"""Tests for the aiohttp rule transport."""

from __future__ import annotations

import asyncio
import json
from unittest.mock import AsyncMock, MagicMock, patch

import aiohttp
import pytest

from parley.privacy.rules import PrivacyRule
from parley.privacy.types import PrivacyKey
from parley.transport.adapter import TransportConfig, TransportError
from parley.transport.http_transport import HttpRuleTransport

# =============================================================================
# FIXTURES
# =============================================================================


def make_session(status: int = 200, json_data=None, text: str = ""):
    """Build a mock aiohttp session whose request() yields one response."""
    mock_resp = AsyncMock()
    mock_resp.status = status
    mock_resp.json = AsyncMock(return_value=json_data)
    mock_resp.text = AsyncMock(return_value=text)

    mock_session = AsyncMock()
    mock_session.__aenter__ = AsyncMock(return_value=mock_session)
    mock_session.__aexit__ = AsyncMock(return_value=False)
    mock_session.request = MagicMock(return_value=AsyncMock(
        __aenter__=AsyncMock(return_value=mock_resp),
        __aexit__=AsyncMock(return_value=False),
    ))
    return mock_session


@pytest.fixture
def transport():
    return HttpRuleTransport(TransportConfig(
        backend="http",
        base_url="https://api.example/",
        auth_token="tok",
        request_timeout=3.0,
    ))


# =============================================================================
# FETCH
# =============================================================================


class TestFetchRules:
    @pytest.mark.asyncio
    async def test_fetch_decodes_rules(self, transport) -> None:
        session = make_session(json_data={"rules": [
            {"_": "allow_contacts"},
            {"_": "disallow_chats", "chats": [4]},
        ]})
        with patch("aiohttp.ClientSession", return_value=session):
            rules = await transport.fetch_rules(PrivacyKey.PHONE_NUMBER)

        assert rules == [PrivacyRule.allow_contacts(), PrivacyRule.disallow_chats([4])]
        method, url = session.request.call_args.args
        assert method == "GET"
        assert url == "https://api.example/privacy/phone_number"
        headers = session.request.call_args.kwargs["headers"]
        assert headers["Authorization"] == "Bearer tok"

    @pytest.mark.asyncio
    async def test_fetch_drops_unknown_tags(self, transport) -> None:
        session = make_session(json_data={"rules": [
            {"_": "allow_all"},
            {"_": "allow_premium"},
        ]})
        with patch("aiohttp.ClientSession", return_value=session):
            rules = await transport.fetch_rules(PrivacyKey.FORWARDS)
        assert rules == [PrivacyRule.allow_all()]

    @pytest.mark.asyncio
    async def test_fetch_accepts_bare_list(self, transport) -> None:
        session = make_session(json_data=[{"_": "disallow_all"}])
        with patch("aiohttp.ClientSession", return_value=session):
            rules = await transport.fetch_rules(PrivacyKey.FORWARDS)
        assert rules == [PrivacyRule.disallow_all()]

    @pytest.mark.asyncio
    async def test_http_error_raises(self, transport) -> None:
        session = make_session(status=500, text="boom")
        with patch("aiohttp.ClientSession", return_value=session):
            with pytest.raises(TransportError, match="HTTP 500"):
                await transport.fetch_rules(PrivacyKey.FORWARDS)

    @pytest.mark.asyncio
    async def test_malformed_json_raises_transport_error(self, transport) -> None:
        session = make_session()
        resp = session.request.return_value.__aenter__.return_value
        resp.json = AsyncMock(side_effect=json.JSONDecodeError("Expecting value", "<html>", 0))
        with patch("aiohttp.ClientSession", return_value=session):
            with pytest.raises(TransportError, match="Malformed response body"):
                await transport.fetch_rules(PrivacyKey.FORWARDS)

    @pytest.mark.asyncio
    async def test_client_error_raises(self, transport) -> None:
        session = make_session()
        session.request = MagicMock(side_effect=aiohttp.ClientError("Connection refused"))
        with patch("aiohttp.ClientSession", return_value=session):
            with pytest.raises(TransportError, match="Connection error"):
                await transport.fetch_rules(PrivacyKey.FORWARDS)

    @pytest.mark.asyncio
    async def test_timeout_raises(self, transport) -> None:
        session = make_session()
        session.request = MagicMock(side_effect=asyncio.TimeoutError())
        with patch("aiohttp.ClientSession", return_value=session):
            with pytest.raises(TransportError, match="timeout"):
                await transport.fetch_rules(PrivacyKey.FORWARDS)


# =============================================================================
# WRITE
# =============================================================================


class TestWriteRules:
    @pytest.mark.asyncio
    async def test_write_sends_encoded_rules(self, transport) -> None:
        session = make_session(status=204)
        rules = [PrivacyRule.allow_all(), PrivacyRule.allow_users([1, 2])]
        with patch("aiohttp.ClientSession", return_value=session):
            await transport.write_rules(PrivacyKey.PROFILE_PHOTO, rules)

        method, url = session.request.call_args.args
        assert method == "PUT"
        assert url == "https://api.example/privacy/profile_photo"
        assert session.request.call_args.kwargs["json"] == {"rules": [
            {"_": "allow_all"},
            {"_": "allow_users", "users": [1, 2]},
        ]}

    @pytest.mark.asyncio
    async def test_write_error_raises(self, transport) -> None:
        session = make_session(status=403, text="forbidden")
        with patch("aiohttp.ClientSession", return_value=session):
            with pytest.raises(TransportError):
                await transport.write_rules(PrivacyKey.FORWARDS, [PrivacyRule.allow_all()])


class TestHeaders:
    def test_no_token_no_authorization(self) -> None:
        transport = HttpRuleTransport(TransportConfig(backend="http"))
        assert "Authorization" not in transport._headers()
