"""
MCP tool handlers for the KuCoin Futures API.

Each tool maps 1:1 onto a KuCoinFuturesClient method and returns the
exchange's JSON unchanged. Arguments are first normalized because different
MCP callers wrap them differently.
"""

import logging
from collections.abc import Awaitable, Callable
from typing import Any

from .client import KuCoinFuturesClient
from .errors import ToolArgumentError, UnknownToolError

logger = logging.getLogger(__name__)

ToolHandler = Callable[[KuCoinFuturesClient, dict[str, Any]], Awaitable[Any]]


def normalize_arguments(args: Any) -> Any:
    """
    Reduce caller-specific argument wrappers to the plain argument object.

    Supported shapes:
    - ``[{...}]`` (n8n built-in node): first element, then the rules below
    - ``{"query": {"value": {...}}}`` (n8n built-in node)
    - ``{"value": {...}}``
    - ``{"Tool_Parameters": {...}}`` (n8n community node)
    - ``{...}`` (Claude Desktop, direct API calls)

    The input is never mutated.
    """
    if isinstance(args, list) and args:
        logger.debug("Detected array wrapper, extracting first element")
        args = args[0]

    if not isinstance(args, dict):
        return args

    query = args.get("query")
    if isinstance(query, dict) and isinstance(query.get("value"), dict):
        logger.debug("Detected query.value wrapper")
        return query["value"]

    if isinstance(args.get("value"), dict):
        logger.debug("Detected value wrapper")
        return args["value"]

    if args.get("Tool_Parameters") is not None:
        logger.debug("Detected Tool_Parameters wrapper")
        return args["Tool_Parameters"]

    logger.debug("Using standard parameter format")
    return args


def _require(args: dict[str, Any], key: str) -> Any:
    value = args.get(key)
    if value is None or value == "":
        raise ToolArgumentError(f"Missing required argument: {key}")
    return value


# =============================================================================
# Market Data
# =============================================================================


async def get_symbols(client: KuCoinFuturesClient, args: dict[str, Any]) -> Any:
    return await client.get_symbols()


async def get_ticker(client: KuCoinFuturesClient, args: dict[str, Any]) -> Any:
    return await client.get_ticker(args.get("symbol"))


async def get_order_book(client: KuCoinFuturesClient, args: dict[str, Any]) -> Any:
    depth = args.get("depth") or 20
    try:
        depth = int(depth)
    except (TypeError, ValueError):
        raise ToolArgumentError(f"depth must be an integer, got {depth!r}") from None
    return await client.get_order_book(_require(args, "symbol"), depth)


async def get_klines(client: KuCoinFuturesClient, args: dict[str, Any]) -> Any:
    return await client.get_klines(
        _require(args, "symbol"),
        _require(args, "granularity"),
        from_=args.get("from"),
        to=args.get("to"),
    )


async def get_symbol_detail(client: KuCoinFuturesClient, args: dict[str, Any]) -> Any:
    return await client.get_symbol_detail(_require(args, "symbol"))


# =============================================================================
# Order Management
# =============================================================================


async def add_order(client: KuCoinFuturesClient, args: dict[str, Any]) -> Any:
    return await client.add_order(args)


async def cancel_order(client: KuCoinFuturesClient, args: dict[str, Any]) -> Any:
    return await client.cancel_order(_require(args, "orderId"))


async def cancel_all_orders(client: KuCoinFuturesClient, args: dict[str, Any]) -> Any:
    return await client.cancel_all_orders(args.get("symbol"))


async def get_orders(client: KuCoinFuturesClient, args: dict[str, Any]) -> Any:
    return await client.get_orders(
        symbol=args.get("symbol"),
        status=args.get("status"),
        side=args.get("side"),
        page_size=args.get("pageSize") or 20,
    )


async def get_order_by_id(client: KuCoinFuturesClient, args: dict[str, Any]) -> Any:
    return await client.get_order_by_id(_require(args, "orderId"))


# =============================================================================
# Positions
# =============================================================================


async def get_positions(client: KuCoinFuturesClient, args: dict[str, Any]) -> Any:
    return await client.get_positions()


async def get_position(client: KuCoinFuturesClient, args: dict[str, Any]) -> Any:
    return await client.get_position(_require(args, "symbol"))


async def modify_margin(client: KuCoinFuturesClient, args: dict[str, Any]) -> Any:
    return await client.modify_margin(_require(args, "symbol"), _require(args, "margin"))


# =============================================================================
# Funding & Account
# =============================================================================


async def get_funding_rate(client: KuCoinFuturesClient, args: dict[str, Any]) -> Any:
    return await client.get_funding_rate(_require(args, "symbol"))


async def get_funding_history(client: KuCoinFuturesClient, args: dict[str, Any]) -> Any:
    return await client.get_funding_history(
        _require(args, "symbol"),
        from_=args.get("from"),
        to=args.get("to"),
    )


async def get_account_futures(client: KuCoinFuturesClient, args: dict[str, Any]) -> Any:
    return await client.get_account_overview(args.get("currency") or "USDT")


# =============================================================================
# Advanced Orders
# =============================================================================


async def add_stop_order(client: KuCoinFuturesClient, args: dict[str, Any]) -> Any:
    return await client.add_stop_order(args)


async def get_open_orders(client: KuCoinFuturesClient, args: dict[str, Any]) -> Any:
    return await client.get_open_order_stats(_require(args, "symbol"))


TOOL_HANDLERS: dict[str, ToolHandler] = {
    "getSymbols": get_symbols,
    "getTicker": get_ticker,
    "getOrderBook": get_order_book,
    "getKlines": get_klines,
    "getSymbolDetail": get_symbol_detail,
    "addOrder": add_order,
    "cancelOrder": cancel_order,
    "cancelAllOrders": cancel_all_orders,
    "getOrders": get_orders,
    "getOrderById": get_order_by_id,
    "getPositions": get_positions,
    "getPosition": get_position,
    "modifyMargin": modify_margin,
    "getFundingRate": get_funding_rate,
    "getFundingHistory": get_funding_history,
    "getAccountFutures": get_account_futures,
    "addStopOrder": add_stop_order,
    "getOpenOrders": get_open_orders,
}


async def execute_tool(client: KuCoinFuturesClient, name: str, arguments: Any) -> Any:
    """
    Dispatch a tool call to its handler.

    Raises:
        UnknownToolError: name is not in the catalog
        ToolArgumentError: arguments are not an object after normalization
        KuCoinError: the exchange call failed
    """
    if not isinstance(name, str) or name not in TOOL_HANDLERS:
        raise UnknownToolError(str(name))
    handler = TOOL_HANDLERS[name]

    args = normalize_arguments(arguments)
    if args is None:
        args = {}
    if not isinstance(args, dict):
        raise ToolArgumentError(
            f"Tool arguments must be an object, got {type(args).__name__}"
        )

    return await handler(client, args)
