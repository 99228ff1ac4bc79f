"""Application settings and environment loading."""

from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Centralized application settings."""

    app_name: str = "Blog Dashboard"
    app_env: Literal["development", "test", "production"] = "development"
    app_debug: bool = False
    secret_key: str = "change-me"
    log_level: str = "INFO"

    blog_api_url: str = "http://localhost:3000"
    blog_api_timeout: float = 10.0

    tinymce_api_key: str = "no-api-key"
    editor_height: int = 500
    slug_debounce_seconds: float = 0.3

    admin_username: str = "admin"
    admin_password: str = "change-me-now"
    admin_password_hash: str | None = None

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    @property
    def is_production(self) -> bool:
        return self.app_env == "production"


@lru_cache
def get_settings() -> Settings:
    """Return cached settings instance."""

    return Settings()
