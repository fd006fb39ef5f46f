"""
Configuration and settings for the AlphaSpark backend.
"""

from __future__ import annotations

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Environment-backed settings for the FastAPI service."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    api_prefix: str = Field(default="/api")

    environment: str = Field(default="development", alias="ENVIRONMENT")
    port: int = Field(default=3000, alias="PORT")

    # Session cookie
    session_secret: str = Field(default="fallback-secret-key", alias="SESSION_SECRET")
    session_cookie: str = Field(default="session", alias="SESSION_COOKIE")
    session_max_age: int = Field(default=24 * 60 * 60, alias="SESSION_MAX_AGE")

    # Firestore
    firebase_service_account_path: str = Field(
        default="./firebase-service-account.json",
        alias="FIREBASE_SERVICE_ACCOUNT_PATH",
    )

    # Development toggles
    use_in_memory_backends: bool = Field(
        default=False, alias="ALPHASPARK_USE_IN_MEMORY_BACKENDS"
    )

    # Static pages (login.html, dashboard.html)
    public_dir: str = Field(default="public", alias="PUBLIC_DIR")

    @property
    def is_production(self) -> bool:
        return self.environment.lower() == "production"


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return cached settings instance."""
    return Settings()
