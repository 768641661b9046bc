"""
Pytest configuration and fixtures.
"""

import json
import os

import httpx
import pytest

# Set test environment variables before importing modules
os.environ.setdefault("KUCOIN_API_KEY", "test-key")
os.environ.setdefault("KUCOIN_API_SECRET", "test-secret")
os.environ.setdefault("KUCOIN_API_PASSPHRASE", "test-passphrase")
os.environ.setdefault("KUCOIN_TIMEOUT_S", "5")
os.environ.setdefault("MCP_AUTH_KEY", "")
os.environ.setdefault("MCP_AUTH_KEYS", "")

from kucoin_futures_mcp.client import KuCoinFuturesClient  # noqa: E402
from kucoin_futures_mcp.config import Settings  # noqa: E402


@pytest.fixture(autouse=True)
def reset_settings():
    """Reset settings cache before each test."""
    from kucoin_futures_mcp.config import get_settings

    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def settings():
    """Settings with a fixed credential triple and auth disabled."""
    return Settings(
        api_key="test-key",
        api_secret="test-secret",
        api_passphrase="test-passphrase",
        mcp_auth_key="",
        mcp_auth_keys="",
        timeout_s=5.0,
    )


class RecordingExchange:
    """
    Fake KuCoin Futures endpoint for httpx.MockTransport.

    Records every request and answers with a canned status/body.
    """

    def __init__(self, status_code: int = 200, body=None, text: str | None = None):
        self.status_code = status_code
        self.body = body if body is not None else {"code": "200000", "data": {}}
        self.text = text
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.text is not None:
            return httpx.Response(self.status_code, text=self.text)
        return httpx.Response(self.status_code, json=self.body)

    @property
    def last(self) -> httpx.Request:
        return self.requests[-1]

    @property
    def last_path(self) -> str:
        """Path plus query string exactly as sent."""
        return self.last.url.raw_path.decode("ascii")

    @property
    def last_json(self):
        return json.loads(self.last.content) if self.last.content else None


@pytest.fixture
def exchange():
    """Fake exchange answering 200 with a KuCoin-style envelope."""
    return RecordingExchange()


@pytest.fixture
def make_client(settings):
    """Factory for clients wired to a fake exchange."""

    def _make(exchange: RecordingExchange, client_settings: Settings | None = None):
        return KuCoinFuturesClient(
            client_settings or settings,
            transport=httpx.MockTransport(exchange),
        )

    return _make


@pytest.fixture
def sample_ticker_response():
    """Sample ticker response data."""
    return {
        "code": "200000",
        "data": {
            "sequence": 1001,
            "symbol": "XBTUSDTM",
            "side": "buy",
            "size": 10,
            "price": "65000.1",
            "bestBidSize": 5,
            "bestBidPrice": "65000.0",
            "bestAskPrice": "65000.2",
            "bestAskSize": 7,
            "tradeId": "abc123",
            "ts": 1700000000000000000,
        },
    }


@pytest.fixture
def make_exchange():
    """Factory for fake exchanges with a custom status/body."""
    return RecordingExchange
