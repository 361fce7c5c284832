from __future__ import annotations

import logging
import os
from functools import lru_cache
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from backend.db import normalize_database_url


class Settings(BaseSettings):
    """Application configuration loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        populate_by_name=True,
    )

    database_url: str = Field(
        default="sqlite+aiosqlite:///./data/orbit.db",
        alias="DATABASE_URL",
    )
    log_file: Path = Field(default=Path("logs/orbit.log"), alias="LOG_FILE")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    # Accounts
    bcrypt_rounds: int = Field(default=12, alias="BCRYPT_ROUNDS")
    default_timezone: str = Field(default="UTC", alias="DEFAULT_TIMEZONE")

    cors_origins: list[str] = Field(default_factory=lambda: ["*"], alias="CORS_ORIGINS")

    version: str = Field(default_factory=lambda: Settings._load_version())

    @staticmethod
    def _load_version() -> str:
        version_env = os.getenv("VERSION")
        if version_env:
            return version_env
        version_file = Path("VERSION")
        if version_file.exists():
            return version_file.read_text(encoding="utf-8").strip()
        return "0.0.0"

    @field_validator("log_file", mode="before")
    @classmethod
    def _validate_log_file(cls, value: Path | str) -> Path:
        path = Path(value)
        if not path.parent.exists():
            path.parent.mkdir(parents=True, exist_ok=True)
        return path

    @field_validator("log_level", mode="before")
    @classmethod
    def _validate_log_level(cls, value: str | None) -> str:
        if not value:
            return "INFO"
        normalized = str(value).upper()
        if normalized not in logging.getLevelNamesMapping():
            return "INFO"
        return normalized

    @field_validator("bcrypt_rounds", mode="before")
    @classmethod
    def _validate_bcrypt_rounds(cls, value: int | str | None) -> int:
        if value is None:
            return 12
        rounds = int(value)
        return min(max(rounds, 4), 31)

    @field_validator("database_url", mode="before")
    @classmethod
    def _validate_database_url(cls, value: str | None) -> str:
        return normalize_database_url(value)


@lru_cache
def get_settings() -> Settings:
    """Cached settings accessor."""

    return Settings()
