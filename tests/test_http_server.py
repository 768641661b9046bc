"""
Tests for the HTTP transport.

Covers:
- CORS preflight and headers
- Auth gate on /mcp and /stream, open /health
- Query-selected response format
- Per-endpoint status codes and session header
"""

import httpx
import pytest
from starlette.testclient import TestClient

from kucoin_futures_mcp.catalog import catalog_as_dicts
from kucoin_futures_mcp.client import KuCoinFuturesClient
from kucoin_futures_mcp.config import Settings
from kucoin_futures_mcp.http_server import create_app

TICKER_CALL = {
    "jsonrpc": "2.0",
    "id": 1,
    "method": "tools/call",
    "params": {"name": "getTicker", "arguments": {"symbol": "XBTUSDTM"}},
}


@pytest.fixture
def app_client():
    """Build a TestClient around an app whose exchange is faked."""

    def _make(exchange, settings: Settings):
        def factory(client_settings):
            return KuCoinFuturesClient(client_settings, transport=httpx.MockTransport(exchange))

        return TestClient(create_app(settings=settings, client_factory=factory))

    return _make


@pytest.fixture
def secured_settings():
    return Settings(
        api_key="test-key",
        api_secret="test-secret",
        api_passphrase="test-passphrase",
        mcp_auth_key="gate-key",
    )


class TestCors:
    """Tests for CORS handling."""

    def test_options_bypasses_auth(self, app_client, exchange, secured_settings):
        client = app_client(exchange, secured_settings)

        response = client.options("/mcp")

        assert response.status_code == 200
        assert response.headers["access-control-allow-origin"] == "*"
        assert "X-MCP-Auth-Key" in response.headers["access-control-allow-headers"]

    def test_browser_preflight_bypasses_auth(self, app_client, exchange, secured_settings):
        client = app_client(exchange, secured_settings)

        response = client.options(
            "/stream",
            headers={
                "Origin": "https://n8n.example.com",
                "Access-Control-Request-Method": "POST",
                "Access-Control-Request-Headers": "Content-Type, X-MCP-Auth-Key",
            },
        )

        assert response.status_code == 200
        assert response.headers["access-control-allow-origin"] == "*"

    @pytest.mark.parametrize(
        "method, request_headers",
        [
            ("POST", "X-Requested-With"),
            ("POST", "mcp-protocol-version, Content-Type"),
            ("PUT", "Content-Type"),
            ("DELETE", "X-Custom-Trace"),
        ],
    )
    def test_any_preflight_is_accepted(
        self, app_client, exchange, secured_settings, method, request_headers
    ):
        client = app_client(exchange, secured_settings)

        response = client.options(
            "/mcp",
            headers={
                "Origin": "https://app.example.com",
                "Access-Control-Request-Method": method,
                "Access-Control-Request-Headers": request_headers,
            },
        )

        assert response.status_code == 200
        assert response.headers["access-control-allow-origin"] == "*"
        allowed = response.headers["access-control-allow-headers"].lower()
        for header in request_headers.split(","):
            assert header.strip().lower() in allowed
        assert exchange.requests == []

    def test_allow_origin_on_responses(self, app_client, exchange, settings):
        client = app_client(exchange, settings)

        response = client.post("/mcp", json={"jsonrpc": "2.0", "id": 1, "method": "ping"})

        assert response.headers["access-control-allow-origin"] == "*"


class TestAuthGate:
    """Tests for the shared-secret gate."""

    def test_missing_key_rejected(self, app_client, exchange, secured_settings):
        client = app_client(exchange, secured_settings)

        response = client.post("/mcp", json=TICKER_CALL)

        assert response.status_code == 401
        assert response.json() == {
            "jsonrpc": "2.0",
            "error": {
                "code": 401,
                "message": "Authentication required. Provide X-MCP-Auth-Key header "
                "or Authorization: Bearer <key>",
            },
        }
        assert response.headers["access-control-allow-origin"] == "*"
        assert exchange.requests == []

    def test_wrong_key_rejected(self, app_client, exchange, secured_settings):
        client = app_client(exchange, secured_settings)

        response = client.post("/stream", json=TICKER_CALL, headers={"X-MCP-Auth-Key": "nope"})

        assert response.status_code == 401
        assert response.json()["error"]["message"] == "Invalid authentication key"

    def test_get_requires_key(self, app_client, exchange, secured_settings):
        client = app_client(exchange, secured_settings)

        assert client.get("/mcp").status_code == 401

    def test_valid_bearer_accepted(self, app_client, exchange, secured_settings):
        client = app_client(exchange, secured_settings)

        response = client.post(
            "/mcp",
            json=TICKER_CALL,
            headers={"Authorization": "Bearer gate-key"},
        )

        assert response.status_code == 200
        assert exchange.last_path == "/api/v1/ticker?symbol=XBTUSDTM"

    def test_health_is_public(self, app_client, exchange, secured_settings):
        client = app_client(exchange, secured_settings)

        response = client.get("/health")

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "healthy"
        assert body["auth_enabled"] is True
        assert body["tool_count"] == 18
        assert exchange.requests == []


class TestMcpEndpoint:
    """Tests for POST /mcp."""

    def test_default_mcp_format(self, app_client, make_exchange, settings, sample_ticker_response):
        client = app_client(make_exchange(body=sample_ticker_response), settings)

        response = client.post("/mcp", json=TICKER_CALL)

        assert response.status_code == 200
        assert response.json()["result"]["content"][0]["type"] == "text"

    def test_raw_format(self, app_client, make_exchange, settings, sample_ticker_response):
        client = app_client(make_exchange(body=sample_ticker_response), settings)

        response = client.post("/mcp?format=raw", json=TICKER_CALL)

        assert response.json() == sample_ticker_response

    def test_hybrid_format(self, app_client, make_exchange, settings, sample_ticker_response):
        client = app_client(make_exchange(body=sample_ticker_response), settings)

        response = client.post("/?format=hybrid", json=TICKER_CALL)

        assert response.json() == {"jsonrpc": "2.0", "id": 1, "result": sample_ticker_response}

    def test_malformed_body(self, app_client, exchange, settings):
        client = app_client(exchange, settings)

        response = client.post(
            "/mcp",
            content=b"{not json",
            headers={"Content-Type": "application/json"},
        )

        assert response.status_code == 400
        assert response.json()["error"] == {"code": -32700, "message": "Parse error"}

    def test_notification(self, app_client, exchange, settings):
        client = app_client(exchange, settings)

        response = client.post("/mcp", json={"jsonrpc": "2.0", "method": "notifications/initialized"})

        assert response.status_code == 204
        assert response.content == b""

    def test_identity_document(self, app_client, exchange, settings):
        client = app_client(exchange, settings)

        response = client.get("/mcp")

        assert response.status_code == 200
        assert response.json()["name"] == "KuCoin Futures API MCP Server"

    def test_no_session_header(self, app_client, exchange, settings):
        client = app_client(exchange, settings)

        response = client.post("/mcp", json={"jsonrpc": "2.0", "id": 1, "method": "ping"})

        assert "mcp-session-id" not in response.headers


class TestStreamEndpoint:
    """Tests for POST /stream."""

    def test_fresh_session_header(self, app_client, exchange, settings):
        client = app_client(exchange, settings)
        ping = {"jsonrpc": "2.0", "id": 1, "method": "ping"}

        first = client.post("/stream", json=ping)
        second = client.post("/stream", json=ping)

        assert first.headers["mcp-session-id"]
        assert first.headers["mcp-session-id"] != second.headers["mcp-session-id"]

    def test_unknown_method_is_404(self, app_client, exchange, settings):
        client = app_client(exchange, settings)

        response = client.post("/stream", json={"jsonrpc": "2.0", "id": 2, "method": "prompts/list"})

        assert response.status_code == 404
        assert response.json()["error"]["code"] == -32601

    def test_tool_error_is_500(self, app_client, make_exchange, settings):
        client = app_client(make_exchange(status_code=400, text="bad symbol"), settings)

        response = client.post("/stream", json=TICKER_CALL)

        assert response.status_code == 500
        assert "bad symbol" in response.json()["error"]["message"]

    def test_discovery_document(self, app_client, exchange, settings):
        client = app_client(exchange, settings)

        response = client.get("/stream")

        assert response.json()["endpoints"] == {"mcp": "/stream", "tools": "/stream"}


class TestToolsList:
    """tools/list returns the fixed catalog whatever the auth state or format flag."""

    @pytest.mark.parametrize("path", ["/mcp", "/stream"])
    @pytest.mark.parametrize("query", ["", "?format=raw", "?format=hybrid", "?format=mcp"])
    @pytest.mark.parametrize("secured", [False, True], ids=["open", "authenticated"])
    def test_catalog_unchanged(
        self, app_client, exchange, settings, secured_settings, path, query, secured
    ):
        client = app_client(exchange, secured_settings if secured else settings)
        headers = {"X-MCP-Auth-Key": "gate-key"} if secured else {}

        response = client.post(
            f"{path}{query}",
            json={"jsonrpc": "2.0", "id": 4, "method": "tools/list"},
            headers=headers,
        )

        assert response.status_code == 200
        assert response.json() == {
            "jsonrpc": "2.0",
            "id": 4,
            "result": {"tools": catalog_as_dicts()},
        }
        assert len(response.json()["result"]["tools"]) == 18
        assert exchange.requests == []
