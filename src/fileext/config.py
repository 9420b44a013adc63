"""Configuration management for fileext."""

from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_BLOCK_SIZE = 102400


class Settings(BaseSettings):
    """Centralised runtime configuration for the filesystem helpers."""

    model_config = SettingsConfigDict(
        env_prefix="FILEEXT_",
        env_file=".env",
        env_file_encoding="utf-8",
        validate_assignment=True,
    )

    # Transfer
    default_block_size: int = Field(
        default=DEFAULT_BLOCK_SIZE,
        description="Block size in bytes used when a copy does not specify one.",
    )

    # Directories
    delete_strategy: Literal["native", "subprocess"] = Field(
        default="native",
        description="How recursive deletes are performed (shutil.rmtree or the host tool).",
    )
    posix_delete_command: list[str] = Field(default_factory=lambda: ["rm", "-Rf"])
    windows_delete_command: list[str] = Field(default_factory=lambda: ["cmd", "/c", "rd", "/s", "/q"])

    # Input checks
    sanitize_paths: bool = Field(
        default=True,
        description="Reject paths holding shell metacharacters before they reach the filesystem.",
    )

    # Service
    log_level: str = Field(default="info")
    host: str = Field(default="127.0.0.1")
    port: int = Field(default=8000)

    @field_validator("default_block_size")
    @classmethod
    def _positive_block_size(cls, value: int) -> int:
        if value < 1:
            raise ValueError("default_block_size must be at least 1 byte")
        return value

    @field_validator("log_level", mode="before")
    @classmethod
    def _normalise_log_level(cls, value: str) -> str:
        return str(value).strip().lower()


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return a cached Settings instance."""
    return Settings()
