"""Application configuration using Pydantic Settings.

Environment variables are loaded with the CITESYNC_ prefix, optionally from
a local .env file.
"""

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from citesync.core.constants import DEFAULT_LOCALE, DEFAULT_STYLE, Timeouts


class Settings(BaseSettings):
    """Settings for the citation synchronization engine.

    Pattern: Pydantic Settings with Environment Variables
    """

    # Service configuration
    service_name: str = "citesync"
    environment: str = Field(default="development", description="Runtime environment")
    log_level: str = Field(default="INFO", description="Logging level")

    # Formatting defaults, used when nothing has been persisted yet
    default_style: str = Field(
        default=DEFAULT_STYLE,
        description="Style used to initialize the formatting engine",
    )
    default_locale: str = Field(
        default=DEFAULT_LOCALE,
        description="Locale used to initialize the formatting engine",
    )

    # Formatting engine
    engine_url: str = Field(
        default="http://localhost:8090",
        description="Base URL of the citation formatting engine",
    )
    engine_timeout_seconds: float = Field(
        default=Timeouts.ENGINE_REQUEST,
        gt=0,
        description="Formatting engine request timeout",
    )

    # Persistence
    storage_path: str | None = Field(
        default=None,
        description="JSON file backing the citation store (in-memory when unset)",
    )
    storage_namespace: str = Field(
        default="",
        description="Optional key namespace, e.g. one per document",
    )

    model_config = SettingsConfigDict(
        env_prefix="CITESYNC_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance.

    Returns:
        Settings: Application settings singleton
    """
    return Settings()
