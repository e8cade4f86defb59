"""Configuration management for wtree."""

from __future__ import annotations

from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class WtreeSettings(BaseSettings):
    """Runtime configuration sourced from environment variables and optional .env file."""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    log_level: str = Field(default="WARNING", validation_alias="WTREE_LOG_LEVEL")
    config_file: str = Field(default=".worktree-config.json", validation_alias="WTREE_CONFIG_FILE")
    run_timeout: float | None = Field(default=None, validation_alias="WTREE_RUN_TIMEOUT")
    git_executable: str = Field(default="git", validation_alias="WTREE_GIT")

    @field_validator("log_level")
    @classmethod
    def _normalize_log_level(cls, value: str) -> str:
        normalized = value.strip().upper()
        if normalized not in {"CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"}:
            raise ValueError(
                "WTREE_LOG_LEVEL must be one of CRITICAL, ERROR, WARNING, INFO, DEBUG"
            )
        return normalized

    @field_validator("run_timeout", mode="before")
    @classmethod
    def _parse_run_timeout(cls, value):
        if value is None or (isinstance(value, str) and not value.strip()):
            return None
        return value

    @field_validator("run_timeout")
    @classmethod
    def _validate_run_timeout(cls, value: float | None) -> float | None:
        if value is not None and value <= 0:
            raise ValueError("WTREE_RUN_TIMEOUT must be > 0")
        return value

    @field_validator("config_file")
    @classmethod
    def _validate_config_file(cls, value: str) -> str:
        normalized = value.strip()
        if not normalized:
            raise ValueError("WTREE_CONFIG_FILE must not be empty")
        return normalized


@lru_cache(maxsize=1)
def get_settings() -> WtreeSettings:
    """Return cached settings instance."""

    return WtreeSettings()


__all__ = ["WtreeSettings", "get_settings"]
