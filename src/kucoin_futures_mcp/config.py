"""
Configuration management with pydantic-settings.

All sensitive values are read from environment variables.
NEVER log or expose api_secret / api_passphrase in plaintext.
"""

import re
from functools import lru_cache

from pydantic import AliasChoices, Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_BASE_URL = "https://api-futures.kucoin.com"


class Settings(BaseSettings):
    """
    KuCoin Futures MCP Server configuration.

    Exchange values are read from environment variables with KUCOIN_ prefix.
    Inbound auth keys use the unprefixed MCP_AUTH_KEY / MCP_AUTH_KEYS names.
    """

    model_config = SettingsConfigDict(
        env_prefix="KUCOIN_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Exchange credentials
    api_key: str = Field(default="", description="KuCoin API key")
    api_secret: SecretStr = Field(
        default=SecretStr(""), description="KuCoin API secret (never logged)"
    )
    api_passphrase: SecretStr = Field(
        default=SecretStr(""), description="KuCoin API passphrase (never logged)"
    )

    # Network settings
    base_url: str = Field(default=DEFAULT_BASE_URL, description="KuCoin Futures REST base URL")
    timeout_s: float = Field(
        default=10.0, ge=1.0, le=60.0, description="HTTP request timeout in seconds"
    )

    # Inbound authentication (empty = open access)
    mcp_auth_key: str = Field(
        default="",
        validation_alias=AliasChoices("MCP_AUTH_KEY", "mcp_auth_key"),
        description="Single shared secret for MCP clients",
    )
    mcp_auth_keys: str = Field(
        default="",
        validation_alias=AliasChoices("MCP_AUTH_KEYS", "mcp_auth_keys"),
        description="Comma-separated shared secrets, one per team",
    )

    # Deployment
    deployment_region: str = Field(
        default="", description="Deployment region hint (e.g. fra1, dub1, cdg1)"
    )
    host: str = Field(default="0.0.0.0", description="HTTP server host")
    port: int = Field(default=8000, ge=1, le=65535, description="HTTP server port")
    log_level: str = Field(default="INFO", description="Root log level")

    @field_validator("api_key", "api_secret", "api_passphrase", mode="before")
    @classmethod
    def strip_whitespace(cls, v: str | SecretStr) -> str | SecretStr:
        """Strip whitespace from credentials."""
        if isinstance(v, str):
            return v.strip()
        return v

    @property
    def has_credentials(self) -> bool:
        """Check if a full key/secret/passphrase triple is configured."""
        return bool(
            self.api_key
            and self.api_secret.get_secret_value()
            and self.api_passphrase.get_secret_value()
        )

    @property
    def valid_auth_keys(self) -> list[str]:
        """All accepted inbound auth keys, in configuration order."""
        keys = []
        if self.mcp_auth_key:
            keys.append(self.mcp_auth_key)
        if self.mcp_auth_keys:
            keys.extend(k.strip() for k in self.mcp_auth_keys.split(",") if k.strip())
        return keys

    @property
    def auth_enabled(self) -> bool:
        """Inbound auth is enforced only when at least one key is configured."""
        return bool(self.mcp_auth_key or self.mcp_auth_keys)

    def get_safe_config_summary(self) -> dict:
        """
        Return a safe summary of configuration for logging.

        NEVER includes actual secrets - only masked values.
        """
        secret_set = bool(self.api_secret.get_secret_value())
        passphrase_set = bool(self.api_passphrase.get_secret_value())

        return {
            "base_url": self.base_url,
            "api_key": self._mask_string(self.api_key) if self.api_key else "(not set)",
            "api_secret": "***REDACTED***" if secret_set else "(not set)",
            "api_passphrase": "***REDACTED***" if passphrase_set else "(not set)",
            "timeout_s": self.timeout_s,
            "auth_enabled": self.auth_enabled,
            "auth_key_count": len(self.valid_auth_keys),
            "deployment_region": self.deployment_region or "(not set)",
        }

    @staticmethod
    def _mask_string(s: str, show_chars: int = 4) -> str:
        """Mask a string, showing only first few characters."""
        if len(s) <= show_chars:
            return "****"
        return s[:show_chars] + "****"


@lru_cache
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Configuration is loaded once per process and treated as read-only.
    """
    return Settings()


def sanitize_log_message(message: str, settings: Settings | None = None) -> str:
    """
    Sanitize a log message by removing any potential secrets.

    Request bodies are only logged at DEBUG level and always pass through here.
    """
    if settings is None:
        settings = get_settings()

    sanitized = message

    for secret in (
        settings.api_secret.get_secret_value(),
        settings.api_passphrase.get_secret_value(),
        *settings.valid_auth_keys,
    ):
        if secret and secret in sanitized:
            sanitized = sanitized.replace(secret, "***REDACTED***")

    if settings.api_key and settings.api_key in sanitized:
        sanitized = sanitized.replace(settings.api_key, Settings._mask_string(settings.api_key))

    # Generic patterns for API keys/tokens
    sanitized = re.sub(
        r'(api_secret|api_key|passphrase|secret|token|password)(["\s:=]+)[^\s,"}\]]+',
        r"\1\2***REDACTED***",
        sanitized,
        flags=re.IGNORECASE,
    )

    return sanitized
