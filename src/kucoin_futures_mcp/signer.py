"""
KuCoin API v2 request signing.

Every outbound call gets its own timestamp, signature and encrypted
passphrase. Nothing here is cached: the exchange rejects stale timestamps.
"""

import base64
import hashlib
import hmac
import time
from dataclasses import dataclass

from .errors import KuCoinSigningError

API_KEY_VERSION = "2"


@dataclass(frozen=True)
class SignedHeaders:
    """Authentication headers for one outbound request."""

    api_key: str
    signature: str
    timestamp: str
    passphrase: str
    key_version: str = API_KEY_VERSION

    def as_headers(self) -> dict[str, str]:
        return {
            "KC-API-KEY": self.api_key,
            "KC-API-SIGN": self.signature,
            "KC-API-TIMESTAMP": self.timestamp,
            "KC-API-PASSPHRASE": self.passphrase,
            "KC-API-KEY-VERSION": self.key_version,
            "Content-Type": "application/json",
        }


def _hmac_b64(secret: str, payload: str) -> str:
    if not isinstance(secret, str) or not secret:
        raise KuCoinSigningError(code=-1, message="API secret is not configured")
    try:
        digest = hmac.new(
            secret.encode("utf-8"),
            payload.encode("utf-8"),
            hashlib.sha256,
        ).digest()
    except (TypeError, ValueError, UnicodeError) as e:
        raise KuCoinSigningError(
            code=-1,
            message=f"Failed to sign request: {type(e).__name__}",
        ) from e
    return base64.b64encode(digest).decode("ascii")


def compute_signature(
    secret: str,
    timestamp: str,
    method: str,
    path: str,
    body: str = "",
) -> str:
    """
    Sign a request.

    signature = base64(HMAC-SHA256(secret, timestamp + METHOD + path + body))

    ``path`` includes the query string exactly as sent.
    """
    return _hmac_b64(secret, f"{timestamp}{method.upper()}{path}{body}")


def encrypt_passphrase(secret: str, passphrase: str) -> str:
    """Key version 2 passphrase: base64(HMAC-SHA256(secret, passphrase))."""
    return _hmac_b64(secret, passphrase)


def current_timestamp_ms() -> str:
    """Epoch milliseconds as a string."""
    return str(int(time.time() * 1000))


class KuCoinSigner:
    """Produces SignedHeaders from a fixed credential triple."""

    def __init__(self, api_key: str, api_secret: str, api_passphrase: str):
        self._api_key = api_key
        self._api_secret = api_secret
        self._api_passphrase = api_passphrase

    def sign(
        self,
        method: str,
        path: str,
        body: str = "",
        timestamp: str | None = None,
    ) -> SignedHeaders:
        """
        Compute headers for one request.

        Args:
            method: HTTP method (any case)
            path: Endpoint path including query string
            body: Serialized JSON body, empty string if none
            timestamp: Override for tests; defaults to now

        Raises:
            KuCoinSigningError: If the secret is missing or unusable
        """
        ts = timestamp if timestamp is not None else current_timestamp_ms()
        return SignedHeaders(
            api_key=self._api_key,
            signature=compute_signature(self._api_secret, ts, method, path, body),
            timestamp=ts,
            passphrase=encrypt_passphrase(self._api_secret, self._api_passphrase),
        )
