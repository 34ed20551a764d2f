"""
Core configuration and settings for catalog layer discovery.
"""

from functools import lru_cache
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class DiscoverySettings(BaseSettings):
    """Discovery settings loaded from environment variables (DISCOVERY_*)."""

    model_config = SettingsConfigDict(
        env_prefix="DISCOVERY_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Catalog
    catalog_path: str = "data/catalog.json"

    # HTTP
    request_timeout: float = 12.0  # seconds, per attempt
    retry_count: int = 2           # additional attempts after the first
    retry_backoff: float = 1.5     # seconds, multiplied by attempt number
    user_agent: str = "GIS-Catalog-Layer-Discovery/1.0"

    # Scheduling
    concurrency: int = 4           # expansions per batch
    batch_delay: float = 0.8       # seconds between batches

    # Logging
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    json_logs: bool = Field(default=False)

    @field_validator("concurrency")
    @classmethod
    def validate_concurrency(cls, v: int) -> int:
        """At least one expansion has to run per batch."""
        return max(1, v)

    @field_validator("retry_count")
    @classmethod
    def validate_retry_count(cls, v: int) -> int:
        if v < 0:
            raise ValueError("retry_count cannot be negative")
        return v

    @field_validator("request_timeout", "retry_backoff", "batch_delay")
    @classmethod
    def validate_durations(cls, v: float) -> float:
        if v < 0:
            raise ValueError("durations cannot be negative")
        return v

    @field_validator("log_level", mode="before")
    @classmethod
    def upper_log_level(cls, v: str) -> str:
        return v.upper() if isinstance(v, str) else v

    @property
    def max_attempts(self) -> int:
        return self.retry_count + 1


@lru_cache
def get_settings() -> DiscoverySettings:
    """Get cached settings instance."""
    return DiscoverySettings()
