"""
MCP Server (stdio transport) for the KuCoin Futures API.

Exposes the same tool catalog as the HTTP transport to local MCP clients.

Usage:
    # stdio mode
    python -m kucoin_futures_mcp.server

    # Or use the entry point
    kucoin-futures-mcp
"""

import asyncio
import json
import logging
import sys
from typing import Any

from mcp.server import Server
from mcp.server.stdio import stdio_server
from mcp.types import TextContent, Tool

from .catalog import get_tools
from .client import KuCoinFuturesClient
from .config import get_settings, sanitize_log_message
from .responses import TOOL_EXECUTION_ERROR
from .tools import execute_tool

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    handlers=[logging.StreamHandler(sys.stderr)],
)
logger = logging.getLogger("kucoin_futures_mcp")


# Create MCP server instance
server = Server("kucoin-futures-mcp-server")


# =============================================================================
# MCP Handlers
# =============================================================================


@server.list_tools()
async def list_tools() -> list[Tool]:
    """List all available tools."""
    return get_tools()


@server.call_tool(validate_input=False)
async def call_tool(name: str, arguments: dict[str, Any]) -> list[TextContent]:
    """
    Execute a tool and return its result as JSON text.

    Input schemas are descriptive; the exchange validates order parameters.
    """
    settings = get_settings()
    logger.info(f"Tool called: {name}")
    if logger.isEnabledFor(logging.DEBUG):
        logger.debug(f"Arguments: {sanitize_log_message(json.dumps(arguments), settings)}")

    try:
        async with KuCoinFuturesClient(settings) as client:
            result = await execute_tool(client, name, arguments)
        return [TextContent(type="text", text=json.dumps(result))]

    except Exception as e:
        logger.error(f"Tool {name} error: {e}")
        error_result = {
            "error": True,
            "code": TOOL_EXECUTION_ERROR,
            "message": f"Failed to execute tool '{name}': {e}",
        }
        return [TextContent(type="text", text=json.dumps(error_result))]


# =============================================================================
# Server Entry Point
# =============================================================================


async def run_stdio():
    """Run the MCP server using stdio transport."""
    settings = get_settings()
    logger.info("Starting KuCoin Futures MCP Server (stdio mode)")
    logger.info(f"Configuration: {settings.get_safe_config_summary()}")

    async with stdio_server() as (read_stream, write_stream):
        await server.run(
            read_stream,
            write_stream,
            server.create_initialization_options(),
        )
    logger.info("Server shutdown complete")


def main():
    """Main entry point for stdio mode."""
    try:
        asyncio.run(run_stdio())
    except KeyboardInterrupt:
        logger.info("Received interrupt signal")
    except Exception as e:
        logger.error(f"Server error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
