from pathlib import Path
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="TIMESHEET_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    app_name: str = "Timesheet"
    app_version: str = "0.1.0"
    debug: bool = False
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    holiday_api_url: str = "https://date.nager.at/api/v3"
    # Fallback routes for calendar feeds, tried in order after the direct URL.
    feed_proxies: list[str] = [
        "https://corsproxy.io/?{url}",
        "https://api.allorigins.win/raw?url={url}",
    ]
    http_timeout: float | None = None
    storage_path: Path = Path.home() / ".timesheet" / "storage.json"
    storage_key: str = "timesheet-settings"
    fallback_country: str = "US"


_settings: Settings | None = None


def get_settings() -> Settings:
    """Return cached settings instance."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings
