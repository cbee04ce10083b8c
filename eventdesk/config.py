"""Runtime settings, read from ``EVENTDESK_*`` environment variables or ``.env``."""

from __future__ import annotations

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    environment: str = "development"
    log_level: str = "INFO"

    # user-metadata role that unlocks the admin pages
    admin_role: str = "admin"

    seed_demo_data: bool = False
    demo_admin_email: str = "admin@example.com"
    demo_admin_password: str = "change-me-admin"

    upcoming_limit: int = 5

    model_config = SettingsConfigDict(
        env_prefix="EVENTDESK_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )


@lru_cache
def get_settings() -> Settings:
    return Settings()
