"""Application settings loaded from environment variables."""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


def _default_data_dir() -> Path:
    return Path.home() / ".local" / "share" / "notes"


class Settings(BaseSettings):
    """Runtime settings for the application."""

    data_dir: Path = Field(default_factory=_default_data_dir)
    # Single fixed key under which the note array is stored in the blob file.
    storage_key: str = Field(default="notes_app_v1")
    # Quiet period before an edit is written to disk; 0 writes immediately.
    save_debounce_ms: int = Field(default=250, ge=0)
    recognition_lang: str = Field(default="en-US")
    # Language for user-visible status messages (config/i18n/messages.<lang>.yaml)
    language: str = Field(default="en")
    log_level: str = Field(default="INFO")
    service_name: str = Field(default="notes")
    environment: str = Field(default="development")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="NOTES_",
        case_sensitive=False,
        extra="ignore",
    )

    @property
    def store_path(self) -> Path:
        return Path(self.data_dir) / "notes.json"


@lru_cache
def get_settings() -> Settings:
    """Return application settings instance."""
    return Settings()


__all__ = ["Settings", "get_settings"]
