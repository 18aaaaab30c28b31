"""
Configuration management using Pydantic Settings.

This module provides type-safe, validated configuration loading from environment
variables.

Architecture:
- Flat Settings structure (no nesting)
- All config loaded from environment variables
- Type validation via Pydantic
- Fixed internal values live in `livefeed.core.constants`

Usage:
    from livefeed.core.config import settings

    # Access config
    redis_url = settings.redis_url
    block_ms = settings.sse_block_ms

    # Environment detection
    if settings.is_development:
        # Dev-specific behavior
"""

from functools import lru_cache

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from livefeed.core.enums import Environment


class Settings(BaseSettings):
    """
    Main application settings (flat structure).

    Configuration precedence:
        1. Environment variables
        2. Default values

    Returns:
        Settings: Application configuration loaded from environment.
    """

    # Environment detection
    environment: Environment = Field(
        default=Environment.DEVELOPMENT,
        description="Application environment (development, testing, ci, production)",
    )

    # Core application settings
    debug: bool = Field(
        default=False,
        description="Enable debug mode (verbose logging, detailed errors)",
    )
    host: str = Field(
        default="0.0.0.0",
        description="Server bind host",
    )
    port: int = Field(
        default=8000,
        description="Server bind port",
    )
    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)",
    )

    # Application metadata
    app_name: str = Field(
        default="Livefeed",
        description="Application name",
    )
    app_version: str = Field(
        default="0.1.0",
        description="Application version",
    )
    api_base_url: str = Field(
        default="http://localhost:8000",
        description="Public API base URL (used for problem type URIs)",
    )
    api_v1_prefix: str = Field(
        default="/api/v1",
        description="API v1 route prefix",
    )

    # Event log (Redis Streams)
    redis_url: str = Field(
        default="redis://localhost:6379/0",
        description="Redis connection URL (e.g., redis://host:port/db)",
    )
    redis_max_connections: int = Field(
        default=200,
        description="Redis pool size (each open SSE connection holds one during a read)",
    )
    sse_stream_key: str = Field(
        default="sse:stream:broadcast",
        description="Redis Stream key shared by all untenanted SSE connections",
    )
    sse_stream_max_len: int = Field(
        default=1000,
        description="Approximate MAXLEN applied on every append (retention cap)",
    )

    # SSE session tuning
    sse_block_ms: int = Field(
        default=1000,
        description="XREADGROUP block duration per loop iteration (milliseconds)",
    )
    sse_read_count: int = Field(
        default=10,
        description="Maximum entries fetched per XREADGROUP call",
    )
    sse_heartbeat_interval_seconds: float = Field(
        default=15.0,
        description="Idle time after which a ping event is written",
    )
    sse_write_timeout_seconds: float = Field(
        default=10.0,
        description="Longest a single frame write may block before the session is closed",
    )
    sse_connection_lifetime_seconds: float = Field(
        default=600.0,
        description="Maximum lifetime of one SSE connection before it is recycled",
    )
    sse_max_read_failures: int = Field(
        default=3,
        description="Consecutive read failures tolerated before a session fails",
    )
    sse_retry_interval_ms: int = Field(
        default=3000,
        description="Reconnect hint written in the `retry:` preamble (milliseconds)",
    )
    sse_tenant_header: str = Field(
        default="client-id",
        description="Request header that scopes a connection to a tenant stream",
    )

    model_config = SettingsConfigDict(
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @field_validator(
        "sse_stream_max_len",
        "sse_block_ms",
        "sse_read_count",
        "sse_max_read_failures",
        "sse_retry_interval_ms",
    )
    @classmethod
    def validate_positive_int(cls, v: int) -> int:
        """
        Validate integer tunables are strictly positive.

        Args:
            v: Configured value.

        Returns:
            int: Validated value.

        Raises:
            ValueError: If value is zero or negative.
        """
        if v <= 0:
            raise ValueError("value must be greater than zero")
        return v

    @field_validator(
        "sse_heartbeat_interval_seconds",
        "sse_write_timeout_seconds",
        "sse_connection_lifetime_seconds",
    )
    @classmethod
    def validate_positive_seconds(cls, v: float) -> float:
        """
        Validate durations are strictly positive.

        Args:
            v: Duration in seconds.

        Returns:
            float: Validated duration.

        Raises:
            ValueError: If duration is zero or negative.
        """
        if v <= 0:
            raise ValueError("duration must be greater than zero")
        return v

    @field_validator("api_base_url")
    @classmethod
    def validate_url(cls, v: str) -> str:
        """
        Remove trailing slashes from URLs.

        Args:
            v: URL string.

        Returns:
            str: URL without trailing slash.
        """
        return v.rstrip("/")

    @field_validator("sse_tenant_header")
    @classmethod
    def normalize_header(cls, v: str) -> str:
        """
        Lower-case the tenant header name (ASGI headers are lower-case).

        Args:
            v: Header name.

        Returns:
            str: Lower-cased header name.
        """
        return v.strip().lower()

    @model_validator(mode="after")
    def validate_heartbeat_fits_block(self) -> "Settings":
        """Heartbeats are only checked between reads, so a read must be shorter."""
        if self.sse_block_ms / 1000 >= self.sse_heartbeat_interval_seconds:
            raise ValueError(
                "sse_block_ms must be shorter than sse_heartbeat_interval_seconds"
            )
        return self

    # Convenience properties for environment checks
    @property
    def is_development(self) -> bool:
        """
        Check if running in development environment.

        Returns:
            bool: True if environment is DEVELOPMENT, False otherwise.
        """
        return self.environment == Environment.DEVELOPMENT

    @property
    def is_testing(self) -> bool:
        """
        Check if running in testing environment.

        Returns:
            bool: True if environment is TESTING, False otherwise.
        """
        return self.environment == Environment.TESTING

    @property
    def is_ci(self) -> bool:
        """
        Check if running in CI environment.

        Returns:
            bool: True if environment is CI, False otherwise.
        """
        return self.environment == Environment.CI

    @property
    def is_production(self) -> bool:
        """
        Check if running in production environment.

        Returns:
            bool: True if environment is PRODUCTION, False otherwise.
        """
        return self.environment == Environment.PRODUCTION


@lru_cache
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Uses lru_cache to ensure settings are loaded only once per process.

    Returns:
        Settings: Cached settings instance.
    """
    return Settings()


# Global settings instance (singleton pattern)
settings = get_settings()
