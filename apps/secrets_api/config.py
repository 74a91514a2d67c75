"""
Configuration for the Secrets API service.

Settings are read from environment variables (or a .env file) with
pydantic-settings. Names are case-insensitive: AWS_REGION overrides
``aws_region``.

Example:
    >>> from apps.secrets_api.config import get_settings
    >>> settings = get_settings()
    >>> settings.port
    3000
"""

from datetime import timedelta
from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Secrets API configuration settings.

    Example:
        # Via environment variables
        export AWS_REGION="eu-west-1"
        export CORS_ORIGIN="https://console.example.com"

        # Local development without AWS
        export ENVIRONMENT=development
        export SECRET_BACKEND=env
        export SECRET_DOTENV_PATH=.env.secrets
    """

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # ========================================================================
    # Service Configuration
    # ========================================================================

    host: str = "0.0.0.0"
    port: int = 3000
    environment: str = "production"
    """Deployment environment. "development" adds stack traces to error bodies."""

    log_level: str = "INFO"
    cors_origin: str = "*"
    """Comma-separated allowed origins, or "*" for any origin (credentials then disabled)."""

    # ========================================================================
    # Secret Store
    # ========================================================================

    secret_backend: Literal["aws", "env"] = "aws"
    aws_region: str = "us-east-1"
    aws_connect_timeout: float = Field(default=5, gt=0)
    aws_read_timeout: float = Field(default=30, gt=0)
    secret_dotenv_path: str | None = None
    """.env file served by the env backend (local development only)."""

    # ========================================================================
    # Cache
    # ========================================================================

    cache_ttl_seconds: int = Field(default=300, gt=0)
    coalesce_fetches: bool = True
    """Share one upstream call among concurrent fetches of the same secret."""

    @property
    def cache_ttl(self) -> timedelta:
        return timedelta(seconds=self.cache_ttl_seconds)

    @property
    def is_development(self) -> bool:
        return self.environment.lower() == "development"

    @property
    def cors_origins(self) -> list[str]:
        return [origin.strip() for origin in self.cors_origin.split(",") if origin.strip()]


@lru_cache
def get_settings() -> Settings:
    return Settings()
