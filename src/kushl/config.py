"""
Application configuration with environment-driven settings.
"""

from functools import lru_cache
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = "kushl"
    app_env: Literal["dev", "qa", "uat", "prod"] = "dev"
    debug: bool = False
    log_level: str = "INFO"

    # Storage
    storage_url: str = Field(
        default="sqlite+pysqlite:///./kushl.db",
        description="SQLAlchemy URL of the local key-value store",
    )

    # Recurring task sweep
    recurring_sweep_enabled: bool = Field(
        default=True,
        description="Run the recurring task sweep loop at startup.",
    )
    recurring_sweep_interval_seconds: int = Field(
        default=60,
        ge=5,
        le=3600,
        description="Seconds between two recurring task sweeps.",
    )

    # Reviews
    reviews_page_size: int = Field(
        default=6,
        ge=1,
        le=100,
        description="Reviews per page on testimonial listings.",
    )

    @field_validator("log_level", mode="before")
    @classmethod
    def normalize_log_level(cls, v: str) -> str:
        """Accept log levels in any case."""
        return str(v).strip().upper()

    @property
    def is_sqlite(self) -> bool:
        return self.storage_url.startswith("sqlite")


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
