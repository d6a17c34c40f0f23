"""
Configuration management for the order relay.

All values can be overridden through environment variables or a local
``.env`` file (names are case-insensitive).
"""

from functools import lru_cache
from typing import Annotated, List

from pydantic import field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


ORDER_STORE_BACKENDS = ("memory", "sql")


class Settings(BaseSettings):
    """
    Application settings with environment variable support.
    """

    # Environment Settings
    environment: str = "development"
    debug: bool = True
    log_level: str = "INFO"

    # Server
    host: str = "0.0.0.0"
    port: int = 3000
    cors_origins: Annotated[List[str], NoDecode] = ["*"]

    # Order storage
    order_store_backend: str = "memory"
    database_url: str = "sqlite:///./orders.db"
    log_sql_queries: bool = False

    # Event stream
    sse_keepalive_seconds: float = 25.0
    sse_queue_size: int = 100  # pending frames per subscriber

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @field_validator("cors_origins", mode="before")
    @classmethod
    def parse_cors_origins(cls, v):
        """Parse CORS origins from string or list."""
        if isinstance(v, str):
            return [origin.strip() for origin in v.split(",") if origin.strip()]
        return v

    @field_validator("order_store_backend")
    @classmethod
    def validate_order_store_backend(cls, v):
        v = v.strip().lower()
        if v not in ORDER_STORE_BACKENDS:
            raise ValueError(
                f"ORDER_STORE_BACKEND must be one of {', '.join(ORDER_STORE_BACKENDS)}"
            )
        return v

    @field_validator("sse_keepalive_seconds", "sse_queue_size")
    @classmethod
    def validate_positive(cls, v):
        if v <= 0:
            raise ValueError("must be greater than zero")
        return v

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.environment.lower() == "production"

    @property
    def is_development(self) -> bool:
        """Check if running in development environment."""
        return self.environment.lower() == "development"

    @property
    def uses_sql_store(self) -> bool:
        return self.order_store_backend == "sql"


@lru_cache()
def get_settings() -> Settings:
    """
    Get application settings (cached).

    Returns:
        Settings instance with environment variables loaded
    """
    return Settings()


# Export settings instance for easy import
settings = get_settings()


def validate_production_config(config: Settings = None):
    """Validate configuration for production deployment."""
    config = config or settings
    if config.is_production:
        issues = []

        if config.debug:
            issues.append("DEBUG is enabled in production")

        if config.uses_sql_store and config.database_url.startswith("sqlite"):
            issues.append("SQLite database configured in production")

        if issues:
            raise ValueError(
                f"Production configuration issues detected: {', '.join(issues)}"
            )
