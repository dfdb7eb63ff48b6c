"""
flaskbase - Configuration and settings.

ClientSettings holds everything the client needs to reach the Flask API.
Values come from the environment or a local .env file.
"""

from functools import lru_cache
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class ClientSettings(BaseSettings):
    """
    Settings shared by every surface of the client.

    FLASK_API_URL is the base every request path is appended to
    (e.g. http://localhost:5000 -> http://localhost:5000/db/chats).
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Flask API
    flask_api_url: str = "http://localhost:5000"
    request_timeout_seconds: float = 30.0

    # Auth polling
    auth_poll_interval_seconds: float = 1.5

    # Application
    flaskbase_env: Literal["development", "staging", "production"] = "development"
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"

    # Dev user - only used by ensure_session()
    dev_user_email: str = "dev@example.com"
    dev_user_password: str = "devdev123"

    @property
    def is_development(self) -> bool:
        return self.flaskbase_env == "development"

    @property
    def is_production(self) -> bool:
        return self.flaskbase_env == "production"


@lru_cache
def get_settings() -> ClientSettings:
    """Get cached settings instance."""
    return ClientSettings()


class _SettingsProxy:
    """Lazy proxy for settings to avoid loading .env at import time."""

    _instance: ClientSettings | None = None

    def __getattr__(self, name: str):
        if self._instance is None:
            self._instance = get_settings()
        return getattr(self._instance, name)


settings = _SettingsProxy()
