# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Yakov Shkolnikov and contributors
"""Configuration management using Pydantic Settings."""

from typing import Literal

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from heap_tester.domain.entities import MIB

LimitSource = Literal["rlimit", "system", "fixed", "none"]


class PoolSettings(BaseSettings):
    """Synthetic allocation configuration.

    ``default_count`` and ``max_count`` mirror the block-count control of
    the interactive session (1..10 blocks per step by default).
    """

    model_config = SettingsConfigDict(
        env_prefix="HEAP_TESTER_POOL_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    block_size_mb: int = Field(
        default=10,
        ge=1,
        le=1024,
        description="Size of each allocated block in MiB",
    )

    default_count: int = Field(
        default=1,
        ge=1,
        description="Blocks allocated or released per step unless overridden",
    )

    max_count: int = Field(
        default=10,
        ge=1,
        le=1000,
        description="Largest number of blocks a single step may allocate or release",
    )

    @model_validator(mode="after")
    def validate_count_range(self) -> "PoolSettings":
        """Validate default_count does not exceed max_count."""
        if self.default_count > self.max_count:
            raise ValueError(
                f"default_count ({self.default_count}) must be <= max_count ({self.max_count})"
            )
        return self

    @property
    def block_size_bytes(self) -> int:
        """Block size converted to bytes."""
        return self.block_size_mb * MIB


class SamplerSettings(BaseSettings):
    """Usage sampling configuration."""

    model_config = SettingsConfigDict(
        env_prefix="HEAP_TESTER_SAMPLER_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    limit_source: LimitSource = Field(
        default="system",
        description=(
            "Where the memory limit comes from: rlimit (RLIMIT_AS), "
            "system (physical memory), fixed (fixed_limit_mb) or none (unbounded)"
        ),
    )

    fixed_limit_mb: int | None = Field(
        default=None,
        ge=1,
        description="Memory limit in MiB when limit_source is 'fixed'",
    )

    refresh_interval_seconds: float = Field(
        default=1.0,
        ge=0.05,
        le=60.0,
        description="Seconds between samples in monitor/ramp loops",
    )

    @model_validator(mode="after")
    def validate_fixed_limit(self) -> "SamplerSettings":
        """Validate fixed_limit_mb is set when limit_source is 'fixed'."""
        if self.limit_source == "fixed" and self.fixed_limit_mb is None:
            raise ValueError("fixed_limit_mb is required when limit_source is 'fixed'")
        return self


class LoggingSettings(BaseSettings):
    """Logging configuration."""

    model_config = SettingsConfigDict(
        env_prefix="HEAP_TESTER_LOG_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="WARNING",
        description="Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)",
    )

    json_output: bool = Field(
        default=False,
        description="Render log records as JSON instead of colored console output",
    )


class Settings(BaseSettings):
    """Root settings container.

    Aggregates all subsettings into a single object.

    Example:
        >>> settings = Settings()
        >>> settings.pool.block_size_mb
        10
        >>> settings.sampler.limit_source
        'system'
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    pool: PoolSettings = Field(default_factory=PoolSettings)
    sampler: SamplerSettings = Field(default_factory=SamplerSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)


# Singleton instance
_settings: Settings | None = None


def get_settings() -> Settings:
    """Get or create settings singleton.

    Loads configuration from environment variables and .env file.
    """
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def reload_settings() -> Settings:
    """Reload settings (for testing).

    Forces reload of configuration from environment.
    """
    global _settings
    _settings = Settings()
    return _settings
