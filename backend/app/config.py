"""Typed settings configuration - single source of truth."""

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # Identifier bounds (inclusive upper bound)
    max_id: int = 10**9 + 7

    # Chunking
    batch_size: int = 3

    # Rate limit: minimum seconds between the starts of two dispatches
    dispatch_interval_seconds: float = 5.0

    # Simulated downstream call latency (seconds per identifier)
    unit_latency_seconds: float = 1.0

    # Hard timeout for a single unit call (seconds)
    unit_timeout_seconds: float = 10.0

    # UI
    ui_origin: str = "http://localhost:8501"
    backend_url: str = "http://localhost:8000"

    # Logging
    log_level: str = "INFO"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
