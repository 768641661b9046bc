"""
Pydantic models for inbound JSON-RPC messages.

Exchange payloads are deliberately left untyped: the server forwards them
without validation.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

DEFAULT_PROTOCOL_VERSION = "2024-11-05"


class JsonRpcRequest(BaseModel):
    """Inbound JSON-RPC 2.0 request or notification."""

    model_config = ConfigDict(extra="ignore")

    jsonrpc: str = Field(default="2.0")
    id: Any = Field(default=None, description="Echoed verbatim, including null")
    method: str = Field(description="MCP method name")
    params: dict[str, Any] | None = Field(default=None)

    @property
    def is_notification(self) -> bool:
        return self.method.startswith("notifications/")


class ToolCallParams(BaseModel):
    """params of a tools/call request."""

    model_config = ConfigDict(extra="ignore")

    name: Any = Field(default=None, description="Tool name")
    arguments: Any = Field(default=None, description="Raw, possibly wrapped, arguments")


class ServerInfo(BaseModel):
    name: str
    version: str


class InitializeResult(BaseModel):
    """Result of the initialize handshake."""

    protocolVersion: str = Field(default=DEFAULT_PROTOCOL_VERSION)
    capabilities: dict[str, Any]
    serverInfo: ServerInfo
