"""
JSON-RPC method dispatch for the MCP HTTP transports.

Dispatch is stateless: every tools/call gets its own KuCoinFuturesClient
(and therefore its own connection pool and signatures), which is closed as
soon as the call finishes.
"""

import copy
import json
import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

from pydantic import ValidationError

from . import __version__
from .catalog import catalog_as_dicts
from .client import KuCoinFuturesClient
from .config import Settings, get_settings, sanitize_log_message
from .models import (
    DEFAULT_PROTOCOL_VERSION,
    InitializeResult,
    JsonRpcRequest,
    ServerInfo,
    ToolCallParams,
)
from .responses import (
    METHOD_NOT_FOUND,
    PARSE_ERROR,
    TOOL_EXECUTION_ERROR,
    ResponseFormat,
    format_tool_result,
    jsonrpc_error,
    jsonrpc_result,
)
from .tools import execute_tool

logger = logging.getLogger(__name__)

ClientFactory = Callable[[Settings], KuCoinFuturesClient]


@dataclass(frozen=True)
class TransportProfile:
    """Per-endpoint differences in how the same methods are answered."""

    name: str
    server_name: str
    capabilities: dict[str, Any]
    tool_error_status: int = 200
    method_not_found_status: int = 200
    session_header: bool = False
    endpoints: dict[str, str] = field(default_factory=dict)


# Claude Desktop and generic MCP clients
MAIN_PROFILE = TransportProfile(
    name="main",
    server_name="KuCoin Futures API MCP Server",
    capabilities={"tools": {}},
)

# n8n MCP nodes (streamable HTTP)
STREAM_PROFILE = TransportProfile(
    name="stream",
    server_name="KuCoin Futures API MCP Server (Streamable)",
    capabilities={"tools": {}, "resources": {}, "prompts": {}, "logging": {}},
    tool_error_status=500,
    method_not_found_status=404,
    session_header=True,
    endpoints={"mcp": "/stream", "tools": "/stream"},
)


@dataclass
class DispatchResult:
    """HTTP status plus JSON payload; ``has_body`` is False for notifications."""

    status_code: int
    payload: Any = None
    has_body: bool = True


class McpDispatcher:
    """Routes one JSON-RPC message to its handler."""

    def __init__(
        self,
        settings: Settings | None = None,
        profile: TransportProfile = MAIN_PROFILE,
        client_factory: ClientFactory | None = None,
    ):
        self.settings = settings or get_settings()
        self.profile = profile
        self._client_factory = client_factory or KuCoinFuturesClient

    async def dispatch(
        self,
        raw_body: bytes | str,
        response_format: ResponseFormat = ResponseFormat.MCP,
    ) -> DispatchResult:
        try:
            request = JsonRpcRequest.model_validate(json.loads(raw_body))
        except (ValueError, ValidationError) as e:
            logger.warning(f"Malformed JSON-RPC body: {type(e).__name__}")
            return DispatchResult(400, jsonrpc_error(None, PARSE_ERROR, "Parse error"))

        logger.info(f"MCP message received: {request.method} (id={request.id}, transport={self.profile.name})")

        if request.method == "initialize":
            return DispatchResult(200, jsonrpc_result(request.id, self.initialize_result(request.params)))

        if request.method == "tools/list":
            return DispatchResult(200, jsonrpc_result(request.id, {"tools": catalog_as_dicts()}))

        if request.method == "tools/call":
            return await self._call_tool(request, response_format)

        if request.method == "ping":
            return DispatchResult(200, jsonrpc_result(request.id, "pong"))

        if request.is_notification:
            logger.debug(f"Notification acknowledged: {request.method}")
            return DispatchResult(204, has_body=False)

        return DispatchResult(
            self.profile.method_not_found_status,
            jsonrpc_error(request.id, METHOD_NOT_FOUND, f"Method not found: {request.method}"),
        )

    def initialize_result(self, params: dict[str, Any] | None) -> dict:
        """Echo the client's protocol version when it sent one."""
        requested = (params or {}).get("protocolVersion")
        return InitializeResult(
            protocolVersion=requested if isinstance(requested, str) and requested else DEFAULT_PROTOCOL_VERSION,
            capabilities=copy.deepcopy(self.profile.capabilities),
            serverInfo=ServerInfo(name=self.profile.server_name, version=__version__),
        ).model_dump()

    def discovery_document(self) -> dict:
        """Body for GET requests on the transport endpoint."""
        if self.profile.endpoints:
            return {
                "transport": "streamable-http",
                "protocolVersion": DEFAULT_PROTOCOL_VERSION,
                "serverInfo": {"name": self.profile.server_name, "version": __version__},
                "capabilities": copy.deepcopy(self.profile.capabilities),
                "endpoints": dict(self.profile.endpoints),
            }
        info = {
            "name": self.profile.server_name,
            "version": __version__,
            "description": "MCP server for the KuCoin Futures API",
        }
        if self.settings.deployment_region:
            info["region"] = self.settings.deployment_region
        return info

    async def _call_tool(
        self,
        request: JsonRpcRequest,
        response_format: ResponseFormat,
    ) -> DispatchResult:
        params = ToolCallParams.model_validate(request.params or {})
        tool_name = params.name
        logger.info(f"Tool called: {tool_name}")
        if logger.isEnabledFor(logging.DEBUG):
            logger.debug(f"Arguments: {sanitize_log_message(json.dumps(params.arguments), self.settings)}")

        try:
            async with self._client_factory(self.settings) as client:
                result = await execute_tool(client, tool_name, params.arguments)
        except Exception as e:
            logger.error(f"Tool {tool_name} error: {e}")
            return DispatchResult(
                self.profile.tool_error_status,
                jsonrpc_error(
                    request.id,
                    TOOL_EXECUTION_ERROR,
                    f"Failed to execute tool '{tool_name}': {e}",
                ),
            )

        return DispatchResult(200, format_tool_result(result, request.id, response_format))
