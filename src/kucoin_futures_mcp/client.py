"""
KuCoin Futures REST client.

Features:
- KC-API v2 signing on every request (fresh timestamp per call)
- Unified error handling (status code + raw exchange text)
- One method per exposed tool; responses returned verbatim

No retries, caching or rate limiting: a failed call surfaces directly to the
caller. Order placement is not idempotent without a stable clientOid.
"""

import json
import logging
import uuid
from collections.abc import Mapping
from typing import Any
from urllib.parse import urlencode

import httpx

from .config import Settings, get_settings, sanitize_log_message
from .errors import KuCoinAPIError, KuCoinError, KuCoinTimeoutError
from .signer import KuCoinSigner

logger = logging.getLogger(__name__)

ORDER_BOOK_SHALLOW_DEPTH = 20
ORDER_BOOK_DEEP_DEPTH = 100


def build_endpoint(path: str, params: Mapping[str, Any] | None = None) -> str:
    """
    Append a query string to ``path``.

    Parameters that are None or empty strings are left out entirely.
    """
    if not params:
        return path
    query = {k: v for k, v in params.items() if v is not None and v != ""}
    if not query:
        return path
    return f"{path}?{urlencode(query)}"


def order_book_depth(depth: int | None) -> int:
    """Pick the depth endpoint: 20 levels for depth <= 20, else 100."""
    if not depth:
        depth = ORDER_BOOK_SHALLOW_DEPTH
    return ORDER_BOOK_SHALLOW_DEPTH if depth <= ORDER_BOOK_SHALLOW_DEPTH else ORDER_BOOK_DEEP_DEPTH


def new_client_oid() -> str:
    """Random idempotency token for order submission."""
    return str(uuid.uuid4())


def _with_client_oid(order: Mapping[str, Any]) -> dict[str, Any]:
    payload = dict(order)
    if not payload.get("clientOid"):
        payload["clientOid"] = new_client_oid()
    return payload


def _number_to_str(value: Any) -> str:
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def _compact_json(data: Any) -> str:
    return json.dumps(data, separators=(",", ":"), ensure_ascii=False)


class KuCoinFuturesClient:
    """
    Async REST client for the KuCoin Futures API.

    Intended to live for a single tool invocation:

        async with KuCoinFuturesClient(settings) as client:
            ticker = await client.get_ticker("XBTUSDTM")
    """

    def __init__(
        self,
        settings: Settings | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.settings = settings or get_settings()
        self._transport = transport
        self._http_client: httpx.AsyncClient | None = None
        self._signer = KuCoinSigner(
            api_key=self.settings.api_key,
            api_secret=self.settings.api_secret.get_secret_value(),
            api_passphrase=self.settings.api_passphrase.get_secret_value(),
        )

    @property
    def http_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._http_client is None or self._http_client.is_closed:
            self._http_client = httpx.AsyncClient(
                base_url=self.settings.base_url,
                timeout=httpx.Timeout(self.settings.timeout_s),
                headers={"User-Agent": "KuCoinFuturesMCP/1.0"},
                transport=self._transport,
            )
        return self._http_client

    async def close(self):
        """Close the HTTP client."""
        if self._http_client and not self._http_client.is_closed:
            await self._http_client.aclose()
            self._http_client = None

    async def __aenter__(self) -> "KuCoinFuturesClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

    async def request(
        self,
        method: str,
        endpoint: str,
        body: Mapping[str, Any] | None = None,
    ) -> Any:
        """
        Execute one signed request.

        Returns the parsed JSON body unchanged.
        Raises KuCoinError on signing, transport or HTTP status errors.
        """
        method = method.upper()
        request_body = _compact_json(body) if body else ""

        # Signing errors propagate before anything is sent
        headers = self._signer.sign(method, endpoint, request_body).as_headers()

        logger.info(f"KuCoin request: {method} {endpoint}")
        if request_body and logger.isEnabledFor(logging.DEBUG):
            logger.debug(f"Request body: {sanitize_log_message(request_body, self.settings)}")

        try:
            response = await self.http_client.request(
                method,
                endpoint,
                content=request_body or None,
                headers=headers,
            )
            logger.debug(f"Response status: {response.status_code}")
            response.raise_for_status()

        except httpx.TimeoutException as e:
            logger.error(f"Request timeout: {method} {endpoint} after {self.settings.timeout_s}s")
            raise KuCoinTimeoutError(
                code=-1,
                message=f"Request timeout after {self.settings.timeout_s}s",
                data=str(e),
            ) from e
        except httpx.HTTPStatusError as e:
            error_text = e.response.text
            logger.error(
                f"KuCoin API error {e.response.status_code} for {method} {endpoint}: "
                f"{sanitize_log_message(error_text[:500], self.settings)}"
            )
            raise KuCoinAPIError(e.response.status_code, error_text) from e
        except httpx.HTTPError as e:
            logger.error(f"Request failed for {method} {endpoint}: {type(e).__name__}: {e}")
            raise KuCoinError(
                code=-1,
                message=f"Request failed: {type(e).__name__}: {e}",
                data=str(e),
            ) from e

        try:
            return response.json()
        except ValueError as e:
            raise KuCoinError(
                code=response.status_code,
                message=f"Invalid JSON in KuCoin response: {response.text[:200]}",
            ) from e

    # =========================================================================
    # Market Data
    # =========================================================================

    async def get_symbols(self) -> Any:
        return await self.request("GET", "/api/v1/contracts/active")

    async def get_ticker(self, symbol: str | None = None) -> Any:
        return await self.request("GET", build_endpoint("/api/v1/ticker", {"symbol": symbol}))

    async def get_order_book(self, symbol: str, depth: int | None = 20) -> Any:
        """Part order book, aggregated by price (depth20 or depth100)."""
        size = order_book_depth(depth)
        return await self.request(
            "GET", build_endpoint(f"/api/v1/level2/depth{size}", {"symbol": symbol})
        )

    async def get_klines(
        self,
        symbol: str,
        granularity: int,
        from_: int | None = None,
        to: int | None = None,
    ) -> Any:
        return await self.request(
            "GET",
            build_endpoint(
                "/api/v1/kline/query",
                {"symbol": symbol, "granularity": granularity, "from": from_, "to": to},
            ),
        )

    async def get_symbol_detail(self, symbol: str) -> Any:
        return await self.request("GET", f"/api/v1/contracts/{symbol}")

    # =========================================================================
    # Order Management
    # =========================================================================

    async def add_order(self, order: Mapping[str, Any]) -> Any:
        """Place an order; a clientOid is generated when none was supplied."""
        return await self.request("POST", "/api/v1/orders", _with_client_oid(order))

    async def cancel_order(self, order_id: str) -> Any:
        return await self.request("DELETE", f"/api/v1/orders/{order_id}")

    async def cancel_all_orders(self, symbol: str | None = None) -> Any:
        return await self.request("DELETE", build_endpoint("/api/v1/orders", {"symbol": symbol}))

    async def get_orders(
        self,
        symbol: str | None = None,
        status: str | None = None,
        side: str | None = None,
        page_size: int = 20,
    ) -> Any:
        return await self.request(
            "GET",
            build_endpoint(
                "/api/v1/orders",
                {"symbol": symbol, "status": status, "side": side, "pageSize": page_size},
            ),
        )

    async def get_order_by_id(self, order_id: str) -> Any:
        return await self.request("GET", f"/api/v1/orders/{order_id}")

    async def add_stop_order(self, order: Mapping[str, Any]) -> Any:
        """
        Place a take-profit / stop-loss order.

        Conditional requirements (trigger prices, size fields, limit price,
        iceberg visible size) are validated by the exchange, not here.
        """
        payload = _with_client_oid(order)
        if logger.isEnabledFor(logging.DEBUG):
            logger.debug(f"addStopOrder payload: {sanitize_log_message(_compact_json(payload), self.settings)}")
        return await self.request("POST", "/api/v1/st-orders", payload)

    async def get_open_order_stats(self, symbol: str) -> Any:
        return await self.request(
            "GET", build_endpoint("/api/v1/openOrderStatistics", {"symbol": symbol})
        )

    # =========================================================================
    # Positions
    # =========================================================================

    async def get_positions(self) -> Any:
        return await self.request("GET", "/api/v1/positions")

    async def get_position(self, symbol: str) -> Any:
        return await self.request("GET", build_endpoint("/api/v1/position", {"symbol": symbol}))

    async def modify_margin(self, symbol: str, margin: float | str) -> Any:
        """Deposit margin into an isolated position."""
        return await self.request(
            "POST",
            "/api/v1/position/margin/deposit-margin",
            {"symbol": symbol, "margin": _number_to_str(margin)},
        )

    # =========================================================================
    # Funding
    # =========================================================================

    async def get_funding_rate(self, symbol: str) -> Any:
        return await self.request("GET", f"/api/v1/funding-rate/{symbol}/current")

    async def get_funding_history(
        self,
        symbol: str,
        from_: int | None = None,
        to: int | None = None,
    ) -> Any:
        return await self.request(
            "GET",
            build_endpoint(
                "/api/v1/contract/funding-fees",
                {"symbol": symbol, "from": from_, "to": to},
            ),
        )

    # =========================================================================
    # Account
    # =========================================================================

    async def get_account_overview(self, currency: str = "USDT") -> Any:
        return await self.request(
            "GET", build_endpoint("/api/v1/account-overview", {"currency": currency})
        )
