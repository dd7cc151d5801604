# =============================================================================
# GitHub MCP SSE Gateway - Settings
# =============================================================================
"""
Server settings loaded from environment variables.

The GitHub bearer token is the only required value. `load_settings` refuses
to return settings without it so the server never opens a socket it cannot
serve from.
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

SERVICE_NAME = "GitHub MCP SSE Server"
SERVICE_VERSION = "1.0.0"


class MissingCredentialError(RuntimeError):
    """Raised at startup when GITHUB_TOKEN is not configured."""


class Settings(BaseSettings):
    """
    Server settings loaded from environment variables.

    Attributes:
        github_token: GitHub bearer token (required, GITHUB_TOKEN).
        github_api_base_url: GitHub API base URL.
        github_request_timeout: Request timeout in seconds.
        github_max_retries: Max retries for rate limit errors.
        host: Server host address.
        port: Server port number (PORT).
        keepalive_interval: Seconds between SSE heartbeat frames.
        log_level: Logging level.
    """

    github_token: str = Field(
        default="",
        description="GitHub personal access token",
    )
    github_api_base_url: str = Field(
        default="https://api.github.com",
        description="GitHub API base URL",
    )
    github_request_timeout: float = Field(
        default=30.0,
        description="Request timeout in seconds",
    )
    github_max_retries: int = Field(
        default=3,
        description="Max retries for rate limit errors",
    )
    host: str = Field(
        default="0.0.0.0",
        description="Server host address",
    )
    port: int = Field(
        default=3000,
        description="Server port number",
    )
    keepalive_interval: float = Field(
        default=10.0,
        gt=0,
        description="Seconds between SSE keep-alive frames",
    )
    log_level: str = Field(
        default="INFO",
        description="Logging level",
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )


def load_settings(**overrides) -> Settings:
    """
    Load settings and check the credential is present.

    Args:
        **overrides: Values taking precedence over the environment.

    Returns:
        Validated Settings.

    Raises:
        MissingCredentialError: If no GitHub token is configured.
    """
    settings = Settings(**overrides)
    if not settings.github_token.strip():
        raise MissingCredentialError("GITHUB_TOKEN environment variable is required")
    return settings
