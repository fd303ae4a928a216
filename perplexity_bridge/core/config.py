"""Configuration management for the Perplexity bridge."""

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import AnyHttpUrl, Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

_REPO_ROOT = Path(__file__).resolve().parents[2]
_PACKAGE_DIR = Path(__file__).resolve().parents[1]
# Repo-root .env first, then the package directory and the current working directory.
_ENV_FILE_CANDIDATES: tuple[str, ...] = (
    str(_REPO_ROOT / ".env"),
    str(_PACKAGE_DIR / ".env"),
    ".env",
)

SERVER_NAME = "perplexity-mcp-server"
SERVER_TITLE = "Perplexity MCP Server"
SERVER_VERSION = "1.0.0"


class BridgeSettings(BaseSettings):
    """Process-wide configuration, loaded once at startup and never mutated."""

    app_env: Literal["development", "staging", "production"] = "development"
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    log_file: str | None = Field(
        None,
        description="Optional log file path; stderr-only when unset or empty",
    )

    perplexity_api_key: SecretStr = Field(..., description="Perplexity API key")
    perplexity_api_base: AnyHttpUrl = Field(
        "https://api.perplexity.ai", description="Perplexity API endpoint"
    )
    request_timeout: float = Field(
        60.0, gt=0, description="Upper bound in seconds for one Perplexity call"
    )

    http_host: str = Field("0.0.0.0", description="HTTP transport bind host")
    http_port: int = Field(3001, ge=1, le=65535, description="HTTP transport bind port")
    enable_rest: bool = Field(True, description="Start the HTTP transport")
    enable_stdio: bool = Field(True, description="Start the MCP stdio transport")
    cors_origins: list[str] = Field(default_factory=lambda: ["*"])

    @field_validator("perplexity_api_key", mode="before")
    @classmethod
    def _reject_blank_key(cls, value):
        if isinstance(value, SecretStr):
            value = value.get_secret_value()
        if not isinstance(value, str) or not value.strip():
            raise ValueError("PERPLEXITY_API_KEY must be a non-empty string")
        return value.strip()

    model_config = SettingsConfigDict(
        env_file=_ENV_FILE_CANDIDATES,
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        frozen=True,
    )

    def masked_api_key(self) -> str:
        secret = self.perplexity_api_key.get_secret_value()
        if len(secret) <= 8:
            return "***"
        return f"{secret[:4]}***{secret[-4:]}"


@lru_cache
def get_settings() -> BridgeSettings:
    """Return a cached BridgeSettings instance."""

    return BridgeSettings()  # type: ignore[call-arg]


def resolved_env_file() -> str | None:
    """Return the first readable .env file from the candidate list."""

    for candidate in _ENV_FILE_CANDIDATES:
        path = Path(candidate).expanduser()
        if path.is_file():
            return str(path)
    return None


def env_file_candidates() -> tuple[str, ...]:
    """Expose configured env file search order for diagnostics."""

    return _ENV_FILE_CANDIDATES
