"""
JSON-RPC envelopes and tool-result shaping.

Three output shapes for successful tools/call results, chosen by the
``format`` query parameter:
- raw:    the bare exchange result (plain HTTP workflows)
- hybrid: JSON-RPC envelope with the result inline (n8n community node)
- mcp:    JSON-RPC envelope with MCP text content (Claude Desktop, default)
"""

import json
from enum import Enum
from typing import Any

JSONRPC_VERSION = "2.0"

# JSON-RPC error codes
PARSE_ERROR = -32700
METHOD_NOT_FOUND = -32601
TOOL_EXECUTION_ERROR = -1
UNAUTHORIZED = 401


class ResponseFormat(str, Enum):
    """Response shape for tools/call results."""

    RAW = "raw"
    HYBRID = "hybrid"
    MCP = "mcp"

    @classmethod
    def from_query(cls, value: str | None) -> "ResponseFormat":
        """Unknown or missing values select the MCP content shape."""
        if value == cls.RAW.value:
            return cls.RAW
        if value == cls.HYBRID.value:
            return cls.HYBRID
        return cls.MCP


def jsonrpc_result(request_id: Any, result: Any) -> dict:
    return {"jsonrpc": JSONRPC_VERSION, "id": request_id, "result": result}


def jsonrpc_error(request_id: Any, code: int, message: str, data: Any = None) -> dict:
    error: dict[str, Any] = {"code": code, "message": message}
    if data is not None:
        error["data"] = data
    return {"jsonrpc": JSONRPC_VERSION, "id": request_id, "error": error}


def format_tool_result(result: Any, request_id: Any, response_format: ResponseFormat) -> Any:
    """Shape a successful tool result."""
    if response_format == ResponseFormat.RAW:
        return result
    if response_format == ResponseFormat.HYBRID:
        return jsonrpc_result(request_id, result)
    return jsonrpc_result(
        request_id,
        {"content": [{"type": "text", "text": json.dumps(result)}]},
    )
