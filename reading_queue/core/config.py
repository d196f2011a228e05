"""
Application configuration using Pydantic Settings.

Field defaults come from config/defaults.yaml (merged with
config/settings.yaml); READING_QUEUE_* environment variables and .env win
over both.
"""

from functools import lru_cache
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .defaults_loader import get_config_value


def _yaml_default(key_path: str, fallback, expand_paths: bool = False):
    return lambda: get_config_value(key_path, fallback, expand_paths=expand_paths)


class Settings(BaseSettings):
    """Reading queue settings with environment variable support."""

    model_config = SettingsConfigDict(
        env_prefix="READING_QUEUE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Storage
    vault_path: str = Field(
        default_factory=_yaml_default("paths.vault_path", "~/Research/vault", True)
    )
    queue_file: str = Field(default_factory=_yaml_default("paths.queue_file", "queue.md"))

    # Cache window for display reads (milliseconds)
    cache_ttl_ms: int = Field(default_factory=_yaml_default("cache.ttl_ms", 1000))

    # Memory model
    desired_retention: float = Field(
        default_factory=_yaml_default("scheduler.desired_retention", 0.85)
    )
    maximum_interval: int = Field(
        default_factory=_yaml_default("scheduler.maximum_interval", 365)
    )
    enable_fuzz: bool = Field(default_factory=_yaml_default("scheduler.enable_fuzz", True))
    enable_short_term: bool = Field(
        default_factory=_yaml_default("scheduler.enable_short_term", True)
    )

    # Logging
    log_level: str = Field(default_factory=_yaml_default("logging.level", "INFO"))
    log_to_file: bool = Field(default_factory=_yaml_default("logging.to_file", False))
    log_dir: str = Field(default_factory=_yaml_default("paths.log_dir", "logs"))

    @field_validator("desired_retention")
    @classmethod
    def retention_is_probability(cls, v: float) -> float:
        if not 0 < v < 1:
            raise ValueError(f"desired_retention must be between 0 and 1, got {v}")
        return v

    @field_validator("cache_ttl_ms", "maximum_interval")
    @classmethod
    def positive(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("must be > 0")
        return v

    @field_validator("log_level")
    @classmethod
    def known_log_level(cls, v: str) -> str:
        level = v.upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"unknown log level '{v}'")
        return level

    @property
    def queue_path(self) -> Path:
        return Path(self.vault_path).expanduser() / self.queue_file


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
