"""
Configuration management using Pydantic Settings.

Type-safe, validated configuration loaded from environment variables. Limits
and windows are NOT configuration: callers supply them on every request.
This module only selects and tunes the storage backend and the process.

Usage:
    from ratelimit_service.core.config import settings

    backend = settings.rate_limit_backend
    prefix = settings.redis_key_prefix

    if settings.is_development:
        # Dev-specific behavior
"""

from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from ratelimit_service.core.enums import Environment
from ratelimit_service.domain.enums import ConsistencyMode, StorageBackend


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
        description="HTTP server bind host",
    )
    port: int = Field(
        default=8080,
        description="HTTP server bind port",
    )
    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)",
    )

    # Application metadata
    app_name: str = Field(
        default="Distributed Rate Limiter",
        description="Application name",
    )
    app_version: str = Field(
        default="0.1.0",
        description="Application version",
    )

    # Rate limit backend selection
    rate_limit_backend: StorageBackend = Field(
        default=StorageBackend.REDIS,
        description="Storage backend (redis, memory, token_bucket)",
    )
    rate_limit_consistency: ConsistencyMode = Field(
        default=ConsistencyMode.NON_ATOMIC,
        description="Redis increment/expire sequencing (non_atomic, atomic)",
    )

    # Redis configuration
    redis_url: str = Field(
        default="redis://localhost:6379/0",
        description="Redis connection URL (e.g., redis://host:port/db)",
    )
    redis_key_prefix: str = Field(
        default="ratelimit:",
        description="Prefix prepended to every caller-supplied key",
    )
    redis_max_connections: int = Field(
        default=50,
        description="Maximum connections in the Redis connection pool",
    )
    redis_socket_timeout: float = Field(
        default=5.0,
        description="Redis socket connect/read timeout in seconds",
    )

    model_config = SettingsConfigDict(
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @field_validator("redis_key_prefix")
    @classmethod
    def validate_key_prefix(cls, v: str) -> str:
        """
        Reject an empty key prefix.

        Args:
            v: Prefix string.

        Returns:
            str: Validated prefix.

        Raises:
            ValueError: If the prefix is empty or whitespace.
        """
        if not v.strip():
            raise ValueError("redis_key_prefix must not be empty")
        return v

    @field_validator("redis_max_connections", "redis_socket_timeout")
    @classmethod
    def validate_positive(cls, v: float) -> float:
        """
        Require strictly positive pool and timeout values.

        Args:
            v: Numeric setting.

        Returns:
            The validated value.

        Raises:
            ValueError: If the value is zero or negative.
        """
        if v <= 0:
            raise ValueError("value must be greater than zero")
        return v

    @field_validator("log_level")
    @classmethod
    def normalize_log_level(cls, v: str) -> str:
        """Upper-case the log level name."""
        return v.upper()

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

    Returns:
        Settings: Cached settings instance.
    """
    return Settings()


# Global settings instance (singleton pattern)
settings = get_settings()
