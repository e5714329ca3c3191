"""
Configuration settings for the fidelity engine.

Uses Pydantic Settings for environment variable management with .env file support.
All variables are prefixed with FIDELITY_ (e.g. FIDELITY_LOG_LEVEL=DEBUG).
"""
from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="FIDELITY_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ========================================
    # Capability Probe
    # ========================================
    enumeration_timeout_seconds: float = Field(
        default=2.0,
        gt=0,
        description="Overall bound on microphone/camera enumeration before both resolve to False",
    )
    processing_benchmark_enabled: bool = Field(
        default=False,
        description="Run a timed CPU benchmark during probing instead of inferring processing power",
    )
    processing_benchmark_iterations: int = Field(
        default=250_000,
        gt=0,
        description="Square-root iterations in the processing benchmark",
    )
    processing_high_max_ms: float = Field(
        default=50.0,
        description="Benchmark duration below which processing power is 'high'",
    )
    processing_medium_max_ms: float = Field(
        default=200.0,
        description="Benchmark duration below which processing power is 'medium'",
    )

    # ========================================
    # Document Store (lessons + user profiles)
    # ========================================
    store_base_url: str = Field(
        default="http://127.0.0.1:8200",
        description="Base URL of the document store REST API",
    )
    store_api_key: str | None = Field(
        default=None,
        description="API key sent as X-API-Key to the document store",
    )
    store_timeout_seconds: float = Field(
        default=10.0,
        description="Per-request timeout for document store calls",
    )
    store_retry_attempts: int = Field(
        default=3,
        ge=1,
        description="Attempts per request when the document store times out",
    )

    # ========================================
    # Avatar Assets
    # ========================================
    avatar_asset_base: str = Field(
        default="/assets/avatars",
        description="Path prefix for avatar model/texture/animation bundles",
    )
    default_avatar_id: str = Field(
        default="default",
    )

    # ========================================
    # Logging
    # ========================================
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="INFO",
    )
    log_file: str | None = Field(
        default=None,
        description="Optional log file path (rotated at 10 MB)",
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
