"""Exception hierarchy for KuCoin Futures calls and tool dispatch."""

from typing import Any


class KuCoinError(Exception):
    """Base exception for KuCoin Futures API errors."""

    def __init__(self, code: int, message: str, data: Any = None):
        self.code = code
        self.message = message
        self.data = data
        super().__init__(message)


class KuCoinAPIError(KuCoinError):
    """Non-success HTTP status from the exchange.

    ``code`` is the HTTP status, ``data`` the raw response text.
    """

    def __init__(self, status_code: int, body_text: str):
        super().__init__(
            code=status_code,
            message=f"KuCoin API Error: {status_code} - {body_text}",
            data=body_text,
        )

    @property
    def status_code(self) -> int:
        return self.code


class KuCoinTimeoutError(KuCoinError):
    """Request timeout."""

    pass


class KuCoinSigningError(KuCoinError):
    """Request could not be signed; it is never sent."""

    pass


class ToolError(Exception):
    """Base exception for tool dispatch failures."""

    pass


class UnknownToolError(ToolError):
    """Tool name is not in the catalog."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Unknown tool: {name}")


class ToolArgumentError(ToolError):
    """Normalized tool arguments are not usable."""

    pass
