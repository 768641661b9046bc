"""
Shared-secret authentication for inbound MCP requests.

SECURITY: when neither MCP_AUTH_KEY nor MCP_AUTH_KEYS is configured, every
request is accepted. This keeps older deployments working but exposes the
trading tools to anyone who can reach the server.
"""

import hmac
import logging
from collections.abc import Mapping
from dataclasses import dataclass

from .config import Settings

logger = logging.getLogger(__name__)

AUTH_HEADER = "X-MCP-Auth-Key"
BEARER_PREFIX = "Bearer "

MISSING_KEY_MESSAGE = (
    "Authentication required. Provide X-MCP-Auth-Key header or Authorization: Bearer <key>"
)
INVALID_KEY_MESSAGE = "Invalid authentication key"


@dataclass(frozen=True)
class AuthResult:
    is_authenticated: bool
    error: str | None = None


def extract_auth_key(headers: Mapping[str, str]) -> str | None:
    """Key from X-MCP-Auth-Key, else from an Authorization bearer token."""
    key = headers.get(AUTH_HEADER) or headers.get(AUTH_HEADER.lower())
    if key:
        return key

    authorization = headers.get("Authorization") or headers.get("authorization")
    if authorization and authorization.startswith(BEARER_PREFIX):
        return authorization[len(BEARER_PREFIX):] or None
    return None


def authenticate_request(headers: Mapping[str, str], settings: Settings) -> AuthResult:
    """Check the caller's key against the configured keys (exact match)."""
    if not settings.auth_enabled:
        logger.debug("No authentication configured, allowing access")
        return AuthResult(is_authenticated=True)

    provided = extract_auth_key(headers)
    if not provided:
        logger.info("Authentication failed: no auth header provided")
        return AuthResult(is_authenticated=False, error=MISSING_KEY_MESSAGE)

    # Constant-time compare against every configured key
    matches = [
        hmac.compare_digest(provided.encode("utf-8"), key.encode("utf-8"))
        for key in settings.valid_auth_keys
    ]
    if any(matches):
        logger.debug("Authentication successful")
        return AuthResult(is_authenticated=True)

    logger.info("Authentication failed: invalid auth key")
    return AuthResult(is_authenticated=False, error=INVALID_KEY_MESSAGE)
