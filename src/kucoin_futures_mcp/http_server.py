"""
HTTP transport for the KuCoin Futures MCP server.

Endpoints:
- POST /mcp (and /)  JSON-RPC for Claude Desktop and generic MCP clients
- POST /stream       JSON-RPC for n8n MCP nodes (streamable HTTP)
- GET  /mcp, /stream server identity / capability discovery
- GET  /health       liveness probe (no auth)

tools/call results can be reshaped with ``?format=raw`` or ``?format=hybrid``.

Usage:
    # Start HTTP server
    python -m kucoin_futures_mcp.http_server

    # Or use the entry point
    kucoin-futures-mcp-http

    # With custom host/port via env vars
    KUCOIN_HOST=0.0.0.0 KUCOIN_PORT=8080 kucoin-futures-mcp-http
"""

import logging
import sys
import uuid
from contextlib import asynccontextmanager

import uvicorn
from starlette.applications import Starlette
from starlette.middleware import Middleware
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.middleware.cors import CORSMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse, Response
from starlette.routing import Route

from . import __version__
from .auth import authenticate_request
from .catalog import TOOLS
from .config import Settings, get_settings
from .dispatcher import (
    MAIN_PROFILE,
    STREAM_PROFILE,
    ClientFactory,
    DispatchResult,
    McpDispatcher,
    TransportProfile,
)
from .responses import TOOL_EXECUTION_ERROR, UNAUTHORIZED, ResponseFormat, jsonrpc_error

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    handlers=[logging.StreamHandler(sys.stderr)],
)
logger = logging.getLogger("kucoin_futures_mcp.http")

ALLOWED_HEADERS = "Content-Type, Accept, Mcp-Session-Id, X-MCP-Auth-Key, Authorization"

CORS_HEADERS = {"Access-Control-Allow-Origin": "*"}

PREFLIGHT_HEADERS = {
    **CORS_HEADERS,
    "Access-Control-Allow-Methods": "GET, POST, OPTIONS",
    "Access-Control-Allow-Headers": ALLOWED_HEADERS,
}

# Paths reachable without an auth key
PUBLIC_PATHS = frozenset({"/health"})


def _settings(request: Request) -> Settings:
    return request.app.state.settings or get_settings()


# =============================================================================
# Auth / CORS gate
# =============================================================================


class McpGateMiddleware(BaseHTTPMiddleware):
    """
    Answers OPTIONS directly, authenticates everything else, and stamps
    Access-Control-Allow-Origin on every response.
    """

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        if request.method == "OPTIONS":
            return Response(status_code=200, headers=PREFLIGHT_HEADERS)

        if request.url.path not in PUBLIC_PATHS:
            auth = authenticate_request(request.headers, _settings(request))
            if not auth.is_authenticated:
                return JSONResponse(
                    {"jsonrpc": "2.0", "error": {"code": UNAUTHORIZED, "message": auth.error}},
                    status_code=401,
                    headers=CORS_HEADERS,
                )

        response = await call_next(request)
        response.headers.setdefault("Access-Control-Allow-Origin", "*")
        return response


# =============================================================================
# HTTP Endpoints
# =============================================================================


def _to_response(result: DispatchResult, profile: TransportProfile) -> Response:
    headers = dict(CORS_HEADERS)
    if profile.session_header:
        # Stateless: a fresh id per response, nothing is stored
        headers["Mcp-Session-Id"] = str(uuid.uuid4())

    if not result.has_body:
        return Response(status_code=result.status_code, headers=headers)
    return JSONResponse(result.payload, status_code=result.status_code, headers=headers)


async def _handle(request: Request, profile: TransportProfile) -> Response:
    dispatcher = McpDispatcher(
        settings=_settings(request),
        profile=profile,
        client_factory=request.app.state.client_factory,
    )

    if request.method == "GET":
        return _to_response(DispatchResult(200, dispatcher.discovery_document()), profile)

    response_format = ResponseFormat.from_query(request.query_params.get("format"))
    try:
        body = await request.body()
        result = await dispatcher.dispatch(body, response_format)
    except Exception as e:
        logger.error(f"Unhandled error on {request.url.path}: {e}", exc_info=True)
        result = DispatchResult(
            500,
            jsonrpc_error(None, TOOL_EXECUTION_ERROR, "Internal server error", data=str(e)[:200]),
        )
    return _to_response(result, profile)


async def mcp_endpoint(request: Request) -> Response:
    """JSON-RPC endpoint for Claude Desktop and generic MCP clients."""
    return await _handle(request, MAIN_PROFILE)


async def stream_endpoint(request: Request) -> Response:
    """JSON-RPC endpoint for n8n MCP nodes."""
    return await _handle(request, STREAM_PROFILE)


async def health_check(request: Request) -> JSONResponse:
    """Liveness probe; does not contact the exchange."""
    settings = _settings(request)
    return JSONResponse(
        {
            "status": "healthy" if settings.has_credentials else "degraded",
            "version": __version__,
            "has_credentials": settings.has_credentials,
            "auth_enabled": settings.auth_enabled,
            "tool_count": len(TOOLS),
            "region": settings.deployment_region or None,
        }
    )


# =============================================================================
# Application Setup
# =============================================================================


@asynccontextmanager
async def lifespan(app: Starlette):
    """Application lifespan handler."""
    settings = app.state.settings or get_settings()
    logger.info("Starting KuCoin Futures MCP HTTP Server")
    logger.info(f"Configuration: {settings.get_safe_config_summary()}")

    if not settings.auth_enabled:
        logger.warning(
            "SECURITY: MCP_AUTH_KEY / MCP_AUTH_KEYS not set - "
            "all requests are accepted without authentication"
        )
    if not settings.has_credentials:
        logger.warning("KuCoin credentials incomplete - exchange calls will fail to sign")

    yield
    logger.info("Server shutdown complete")


routes = [
    Route("/", mcp_endpoint, methods=["GET", "POST"]),
    Route("/mcp", mcp_endpoint, methods=["GET", "POST"]),
    Route("/stream", stream_endpoint, methods=["GET", "POST"]),
    Route("/health", health_check, methods=["GET"]),
]


def create_app(
    settings: Settings | None = None,
    client_factory: ClientFactory | None = None,
) -> Starlette:
    """
    Build the Starlette application.

    ``settings`` defaults to the environment; ``client_factory`` lets tests
    swap the exchange transport.
    """
    middleware = [
        Middleware(
            CORSMiddleware,
            allow_origins=["*"],
            allow_methods=["*"],
            allow_headers=["*"],
            expose_headers=["Mcp-Session-Id"],
        ),
        Middleware(McpGateMiddleware),
    ]

    app = Starlette(
        debug=False,
        routes=routes,
        middleware=middleware,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.client_factory = client_factory
    return app


app = create_app()


def main():
    """Main entry point for HTTP server."""
    settings = get_settings()
    logging.getLogger().setLevel(settings.log_level.upper())

    logger.info(f"Starting HTTP server on {settings.host}:{settings.port}")

    uvicorn.run(
        "kucoin_futures_mcp.http_server:app",
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
        reload=False,
    )


if __name__ == "__main__":
    main()
