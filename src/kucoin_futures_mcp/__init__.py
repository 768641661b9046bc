"""
KuCoin Futures MCP Server - exchange futures API exposed as MCP tools.

Provides JSON-RPC 2.0 tool calls for:
- Market data (symbols, ticker, order book, klines, funding)
- Order management (limit/market, stop orders, cancellation)
- Positions and margin
- Account overview
"""

__version__ = "1.0.0"
