"""Application configuration using Pydantic Settings.

Configuration is loaded from environment variables. Optionally point
``ENV_FILE`` at a local env file for development; it is never loaded
implicitly.
"""

import os
from enum import Enum

from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class AppEnvironment(str, Enum):
    """Application environment values."""

    LOCAL = "local"
    TEST = "test"
    PROD = "prod"


class Settings(BaseSettings):
    """
    Application settings with type validation.

    Every field maps to the upper-cased environment variable of the same name
    (``MONGODB_URL``, ``APP_LOG_LEVEL`` and so on).
    """

    model_config = SettingsConfigDict(
        env_file=os.getenv("ENV_FILE") or None, env_prefix="", extra="ignore"
    )

    # Application
    app_env: AppEnvironment = AppEnvironment.LOCAL
    app_name: str = "user-directory-api"
    app_log_level: str = "INFO"

    # Observability
    observability_enabled: bool = True
    observability_structured_logs: bool = True
    observability_request_id_header: str = "X-Request-ID"

    # Document store
    mongodb_url: str = "mongodb://localhost:27017"
    mongodb_database: str = "users"
    mongodb_users_collection: str = "users"
    mongodb_server_selection_timeout_ms: int = 5000

    # Token for the /metrics endpoint; metrics are refused until it is set
    metrics_token: str | None = None

    # Optional token for /health and /readyz (X-Health-Token header)
    health_token: str | None = None

    cors_origins: str = "http://localhost:3000,http://localhost:5173"

    @property
    def cors_origins_list(self) -> list[str]:
        """Parse CORS origins string into a list."""
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]

    @field_validator("app_env", mode="before")
    @classmethod
    def validate_app_env(cls, v: str | AppEnvironment) -> AppEnvironment:
        """Validate and parse app_env to AppEnvironment enum."""
        if isinstance(v, AppEnvironment):
            return v
        try:
            return AppEnvironment(v.lower())
        except ValueError:
            raise ValueError(
                f"app_env must be one of {[e.value for e in AppEnvironment]}, got '{v}'"
            )

    @field_validator("mongodb_url")
    @classmethod
    def validate_mongodb_url(cls, v: str) -> str:
        """Only the two Mongo connection string schemes are accepted."""
        v = v.strip()
        if not v.startswith(("mongodb://", "mongodb+srv://")):
            raise ValueError("MONGODB_URL must use the mongodb:// or mongodb+srv:// scheme")
        return v

    @field_validator("mongodb_server_selection_timeout_ms")
    @classmethod
    def validate_server_selection_timeout(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("MONGODB_SERVER_SELECTION_TIMEOUT_MS must be positive")
        return v

    @model_validator(mode="after")
    def validate_production_settings(self) -> "Settings":
        """
        Validate production-specific settings.

        These checks prevent local-only configuration from being deployed.
        """
        if self.app_env == AppEnvironment.PROD:
            if "localhost" in self.mongodb_url or "127.0.0.1" in self.mongodb_url:
                raise ValueError("MONGODB_URL must not point at localhost in production")

            for origin in self.cors_origins_list:
                if "localhost" in origin or "127.0.0.1" in origin:
                    raise ValueError(
                        f"CORS origins must not contain localhost in production: {origin}"
                    )

        return self


settings = Settings()
