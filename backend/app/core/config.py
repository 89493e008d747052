from __future__ import annotations

import os
from functools import lru_cache
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        populate_by_name=True,
    )

    database_url: str = Field(
        default="sqlite+aiosqlite:///./data/moodbuddy.db",
        alias="DATABASE_URL",
    )
    log_file: Path = Field(default=Path("logs/moodbuddy.log"))
    request_timeout_seconds: float = Field(default=10.0)

    # Text generation
    openai_api_key: str | None = Field(default=None, alias="OPENAI_API_KEY")
    openai_model: str = Field(default="gpt-4o-mini", alias="OPENAI_MODEL")
    ai_max_tokens: int = Field(default=300, alias="AI_MAX_TOKENS")
    ai_temperature: float = Field(default=0.8, alias="AI_TEMPERATURE")

    # Chat companion and suggestions
    chat_history_limit: int = Field(default=16, alias="CHAT_HISTORY_LIMIT")
    suggestions_window: int = Field(default=7, alias="SUGGESTIONS_WINDOW")

    # Statistics engine
    strict_mood_categories: bool = Field(default=False, alias="STRICT_MOOD_CATEGORIES")
    mood_trend_policy: str = Field(default="last", alias="MOOD_TREND_POLICY")

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

    @property
    def ai_enabled(self) -> bool:
        return bool(self.openai_api_key)

    @field_validator("log_file", mode="before")
    @classmethod
    def _validate_log_file(cls, value: Path | str) -> Path:
        path = Path(value)
        if not path.parent.exists():
            path.parent.mkdir(parents=True, exist_ok=True)
        return path

    @field_validator("mood_trend_policy", mode="before")
    @classmethod
    def _validate_trend_policy(cls, value: str | None) -> str:
        if not value:
            return "last"
        normalized = str(value).lower()
        if normalized not in {"last", "first"}:
            return "last"
        return normalized

    @field_validator("chat_history_limit", mode="before")
    @classmethod
    def _validate_history_limit(cls, value: int | str | None) -> int:
        if value is None:
            return 16
        # system turn plus at least one user/assistant pair
        return max(int(value), 3)

    @field_validator("suggestions_window", mode="before")
    @classmethod
    def _validate_window(cls, value: int | str | None) -> int:
        if value is None:
            return 7
        return max(int(value), 1)

    @field_validator("database_url", mode="before")
    @classmethod
    def _validate_database_url(cls, value: str | None) -> str:
        if not value:
            value = "sqlite:///./data/moodbuddy.db"

        normalized = str(value)
        if normalized.startswith("postgres://"):
            normalized = normalized.replace("postgres://", "postgresql://", 1)
        if normalized.startswith("postgresql://") and "+asyncpg" not in normalized:
            normalized = normalized.replace("postgresql://", "postgresql+asyncpg://", 1)
        if normalized.startswith("sqlite://") and "+aiosqlite" not in normalized:
            normalized = normalized.replace("sqlite://", "sqlite+aiosqlite://", 1)

        if normalized.startswith("sqlite+aiosqlite:///"):
            db_path = normalized.split("///", maxsplit=1)[-1]
            if db_path and db_path != ":memory:":
                db_file = Path(db_path)
                db_file.parent.mkdir(parents=True, exist_ok=True)

        return normalized


@lru_cache
def get_settings() -> Settings:
    """Cached settings accessor."""

    return Settings()
