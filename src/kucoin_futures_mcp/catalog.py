"""
Static tool catalog.

Built once at import and never modified. The input schemas describe what the
exchange expects; they are not enforced locally.
"""

from mcp.types import Tool

SYMBOL_PROPERTY = {
    "type": "string",
    "description": "Trading symbol (e.g., XBTUSDTM)",
}

TIMESTAMP_RANGE_PROPERTIES = {
    "from": {
        "type": "number",
        "description": "Start timestamp (Unix timestamp)",
    },
    "to": {
        "type": "number",
        "description": "End timestamp (Unix timestamp)",
    },
}


# =============================================================================
# Market Data
# =============================================================================


MARKET_DATA_TOOLS = (
    Tool(
        name="getSymbols",
        description="Get all available futures trading symbols/contracts",
        inputSchema={"type": "object", "properties": {}},
    ),
    Tool(
        name="getTicker",
        description="Get ticker information for a specific symbol or all symbols",
        inputSchema={
            "type": "object",
            "properties": {"symbol": SYMBOL_PROPERTY},
        },
    ),
    Tool(
        name="getOrderBook",
        description=(
            "Get part orderbook depth data (aggregated by price) for a specific symbol. "
            "Uses the optimized part-orderbook endpoint for faster response and less "
            "traffic consumption."
        ),
        inputSchema={
            "type": "object",
            "properties": {
                "symbol": SYMBOL_PROPERTY,
                "depth": {
                    "type": "number",
                    "description": (
                        "Order book depth layer. Values 1-20 will use depth20, "
                        "values 21-100 will use depth100"
                    ),
                    "enum": [20, 100],
                    "default": 20,
                },
            },
            "required": ["symbol"],
        },
    ),
    Tool(
        name="getKlines",
        description="Get klines/candlestick data for a specific symbol",
        inputSchema={
            "type": "object",
            "properties": {
                "symbol": SYMBOL_PROPERTY,
                "granularity": {
                    "type": "number",
                    "description": (
                        "Time granularity in minutes "
                        "(1, 5, 15, 30, 60, 120, 240, 480, 720, 1440, 10080)"
                    ),
                },
                **TIMESTAMP_RANGE_PROPERTIES,
            },
            "required": ["symbol", "granularity"],
        },
    ),
    Tool(
        name="getSymbolDetail",
        description=(
            "Get detailed contract specifications and trading parameters for a specific "
            "futures symbol. This provides comprehensive information about a trading "
            "contract including lot size, tick size, max order quantity, fee rates, "
            "pricing information, and trading status. Essential for understanding trading "
            "rules and constraints before placing orders."
        ),
        inputSchema={
            "type": "object",
            "properties": {"symbol": SYMBOL_PROPERTY},
            "required": ["symbol"],
        },
    ),
)


# =============================================================================
# Order Management
# =============================================================================


ORDER_TOOLS = (
    Tool(
        name="addOrder",
        description="Place a new futures order",
        inputSchema={
            "type": "object",
            "properties": {
                "symbol": SYMBOL_PROPERTY,
                "side": {
                    "type": "string",
                    "enum": ["buy", "sell"],
                    "description": "Order side",
                },
                "type": {
                    "type": "string",
                    "enum": ["limit", "market"],
                    "description": "Order type",
                },
                "size": {"type": "number", "description": "Order size"},
                "price": {
                    "type": "number",
                    "description": "Order price (required for limit orders)",
                },
                "clientOid": {
                    "type": "string",
                    "description": "Unique client order identifier",
                },
                "leverage": {"type": "number", "description": "Leverage for the order"},
            },
            "required": ["symbol", "side", "type", "size"],
        },
    ),
    Tool(
        name="cancelOrder",
        description="Cancel a specific order by ID",
        inputSchema={
            "type": "object",
            "properties": {
                "orderId": {"type": "string", "description": "Order ID to cancel"},
            },
            "required": ["orderId"],
        },
    ),
    Tool(
        name="cancelAllOrders",
        description="Cancel all orders or all orders for a specific symbol",
        inputSchema={
            "type": "object",
            "properties": {
                "symbol": {
                    "type": "string",
                    "description": "Trading symbol (optional - cancel all orders for this symbol)",
                },
            },
        },
    ),
    Tool(
        name="getOrders",
        description="Get list of orders with optional filtering",
        inputSchema={
            "type": "object",
            "properties": {
                "symbol": {"type": "string", "description": "Trading symbol"},
                "status": {
                    "type": "string",
                    "enum": ["active", "done"],
                    "description": "Order status filter",
                },
                "side": {
                    "type": "string",
                    "enum": ["buy", "sell"],
                    "description": "Order side filter",
                },
                "pageSize": {
                    "type": "number",
                    "description": "Number of orders to return",
                    "default": 20,
                    "minimum": 1,
                    "maximum": 100,
                },
            },
        },
    ),
    Tool(
        name="getOrderById",
        description="Get detailed information about a specific order",
        inputSchema={
            "type": "object",
            "properties": {
                "orderId": {"type": "string", "description": "Order ID to fetch"},
            },
            "required": ["orderId"],
        },
    ),
)


# =============================================================================
# Positions, Funding, Account
# =============================================================================


POSITION_TOOLS = (
    Tool(
        name="getPositions",
        description="Get all open positions",
        inputSchema={"type": "object", "properties": {}},
    ),
    Tool(
        name="getPosition",
        description="Get position details for a specific symbol",
        inputSchema={
            "type": "object",
            "properties": {"symbol": SYMBOL_PROPERTY},
            "required": ["symbol"],
        },
    ),
    Tool(
        name="modifyMargin",
        description="Add or remove margin for a position",
        inputSchema={
            "type": "object",
            "properties": {
                "symbol": SYMBOL_PROPERTY,
                "margin": {"type": "number", "description": "Margin amount to add/remove"},
            },
            "required": ["symbol", "margin"],
        },
    ),
)

FUNDING_TOOLS = (
    Tool(
        name="getFundingRate",
        description="Get current funding rate for a symbol",
        inputSchema={
            "type": "object",
            "properties": {"symbol": SYMBOL_PROPERTY},
            "required": ["symbol"],
        },
    ),
    Tool(
        name="getFundingHistory",
        description="Get funding rate history for a symbol",
        inputSchema={
            "type": "object",
            "properties": {"symbol": SYMBOL_PROPERTY, **TIMESTAMP_RANGE_PROPERTIES},
            "required": ["symbol"],
        },
    ),
)

ACCOUNT_TOOLS = (
    Tool(
        name="getAccountFutures",
        description=(
            "Get futures account overview including balance, equity, PNL, and risk "
            "information for a specific currency (defaults to USDT)"
        ),
        inputSchema={
            "type": "object",
            "properties": {
                "currency": {
                    "type": "string",
                    "description": "Account currency (defaults to USDT if not specified)",
                    "enum": ["USDT", "USDC", "XBT", "ETH"],
                    "default": "USDT",
                },
            },
            "required": ["currency"],
        },
    ),
)


# =============================================================================
# Advanced Orders
# =============================================================================


STOP_ORDER_SCHEMA = {
    "type": "object",
    "additionalProperties": False,
    "properties": {
        "clientOid": {
            "type": "string",
            "description": (
                "Unique client order ID (max 40 chars: numbers, letters, underscore, "
                "separator). Generated by the server when omitted."
            ),
            "maxLength": 40,
            "pattern": "^[a-zA-Z0-9_-]+$",
        },
        "symbol": {
            "type": "string",
            "description": (
                "Futures contract symbol (e.g., XBTUSDTM, ETHUSDTM). "
                "Must be a valid futures trading pair."
            ),
        },
        "side": {
            "type": "string",
            "enum": ["buy", "sell"],
            "description": "Order side: 'buy' for long positions, 'sell' for short positions",
        },
        "leverage": {
            "type": "integer",
            "minimum": 1,
            "description": (
                "Leverage multiplier. Optional for ISOLATED margin mode orders. "
                "Required if closing position or CROSS margin."
            ),
        },
        "type": {
            "type": "string",
            "enum": ["limit", "market"],
            "description": (
                "Order execution type: 'limit' for specific price execution, "
                "'market' for immediate execution at best price"
            ),
            "default": "limit",
        },
        "remark": {
            "type": "string",
            "maxLength": 100,
            "description": "Optional order note/comment for tracking purposes (max 100 characters)",
        },
        "triggerStopUpPrice": {
            "type": "string",
            "description": (
                "TAKE PROFIT trigger price. Order executes when price rises to this level."
            ),
        },
        "stopPriceType": {
            "type": "string",
            "enum": ["TP", "MP", "IP"],
            "description": (
                "Price reference for triggers: TP=Trade Price (last), "
                "MP=Mark Price (recommended), IP=Index Price"
            ),
        },
        "triggerStopDownPrice": {
            "type": "string",
            "description": (
                "STOP LOSS trigger price. Order executes when price falls to this level."
            ),
        },
        "reduceOnly": {
            "type": "boolean",
            "description": (
                "If true, only reduces existing position size. "
                "Extra size will be canceled if it exceeds position size."
            ),
            "default": False,
        },
        "closeOrder": {
            "type": "boolean",
            "description": (
                "If true, closes entire position when triggered. "
                "Side, Size and Leverage can be left empty."
            ),
            "default": False,
        },
        "forceHold": {
            "type": "boolean",
            "description": (
                "Force hold funds for the order even if it reduces position size. "
                "Prevents cancellation when position changes."
            ),
            "default": False,
        },
        "stp": {
            "type": "string",
            "enum": ["CN", "CO", "CB"],
            "description": "Self-Trade Prevention: CN=Cancel Newest, CO=Cancel Oldest, CB=Cancel Both",
        },
        "marginMode": {
            "type": "string",
            "enum": ["ISOLATED", "CROSS"],
            "description": (
                "Margin mode: ISOLATED allows custom leverage, CROSS uses account-wide margin"
            ),
            "default": "ISOLATED",
        },
        "price": {
            "type": "string",
            "description": (
                "Limit price for execution (required when type=limit). "
                "Use string to preserve precision."
            ),
        },
        "size": {
            "type": "integer",
            "minimum": 1,
            "description": (
                "Order size in LOTS (whole number). Choose exactly ONE of: size, qty, or valueQty."
            ),
        },
        "qty": {
            "type": "string",
            "description": (
                "Order size in base currency (e.g. BTC). Must be integer multiple of "
                "multiplier. Choose exactly ONE of: size, qty, or valueQty."
            ),
        },
        "valueQty": {
            "type": "string",
            "description": (
                "Order size in quote currency value (USDT/USDC). For USDS-Swap contracts "
                "only. Choose exactly ONE of: size, qty, or valueQty."
            ),
        },
        "timeInForce": {
            "type": "string",
            "enum": ["GTC", "IOC"],
            "description": (
                "Time in force: GTC=Good Till Canceled, IOC=Immediate or Cancel "
                "(for limit orders)"
            ),
            "default": "GTC",
        },
        "postOnly": {
            "type": "boolean",
            "description": (
                "Maker-only flag ensures order pays maker fee. "
                "Cannot be used with hidden/iceberg or when timeInForce=IOC."
            ),
            "default": False,
        },
        "hidden": {
            "type": "boolean",
            "description": "Hide order from order book. Cannot be used with postOnly.",
            "default": False,
        },
        "iceberg": {
            "type": "boolean",
            "description": (
                "Show only partial order size in order book. Requires visibleSize. "
                "Cannot be used with postOnly."
            ),
            "default": False,
        },
        "visibleSize": {
            "type": "string",
            "description": "Maximum visible size for iceberg orders (in lots). Required when iceberg=true.",
        },
        "positionSide": {
            "type": "string",
            "enum": ["BOTH", "LONG", "SHORT"],
            "description": (
                "Position direction. Optional in one-way mode (defaults to BOTH). "
                "Required in hedge mode."
            ),
        },
    },
    "required": ["clientOid", "symbol", "side", "leverage", "stopPriceType"],
    "allOf": [
        {
            "anyOf": [
                {"required": ["triggerStopUpPrice"]},
                {"required": ["triggerStopDownPrice"]},
            ]
        },
        {
            "anyOf": [
                {"required": ["size"]},
                {"required": ["qty"]},
                {"required": ["valueQty"]},
            ]
        },
        {
            "if": {"properties": {"type": {"const": "limit"}}},
            "then": {"required": ["price"]},
        },
        {
            "if": {"properties": {"iceberg": {"const": True}}},
            "then": {"required": ["visibleSize"]},
        },
    ],
}

ADVANCED_ORDER_TOOLS = (
    Tool(
        name="addStopOrder",
        description=(
            "Place a take profit and/or stop loss order. REQUIRED: symbol, side, leverage "
            "(integer), stopPriceType ('MP' recommended), at least one trigger price, and "
            "exactly one quantity (size/qty/valueQty). For limit orders, also provide "
            "'price'. This advanced order type automatically executes when price reaches "
            "specified trigger levels, providing risk management and profit-taking "
            "capabilities."
        ),
        inputSchema=STOP_ORDER_SCHEMA,
    ),
    Tool(
        name="getOpenOrders",
        description="Get open order statistics for a symbol",
        inputSchema={
            "type": "object",
            "properties": {"symbol": SYMBOL_PROPERTY},
            "required": ["symbol"],
        },
    ),
)


TOOLS: tuple[Tool, ...] = (
    *MARKET_DATA_TOOLS,
    *ORDER_TOOLS,
    *POSITION_TOOLS,
    *FUNDING_TOOLS,
    *ACCOUNT_TOOLS,
    *ADVANCED_ORDER_TOOLS,
)

TOOL_NAMES = frozenset(tool.name for tool in TOOLS)


def get_tools() -> list[Tool]:
    """Catalog as a fresh list (callers may extend it)."""
    return list(TOOLS)


def catalog_as_dicts() -> list[dict]:
    """Wire form used in tools/list responses."""
    return [tool.model_dump(by_alias=True, exclude_none=True) for tool in TOOLS]
