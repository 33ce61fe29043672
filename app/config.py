"""Application configuration and settings."""
from functools import lru_cache
from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict

OPTION_ID_PREFIX = "opt_"


class Settings(BaseSettings):
    """Central configuration for the intake service."""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")

    database_url: str = "sqlite+aiosqlite:///./data/app.db"
    data_directory: Path = Path("data")
    upload_directory: Path = Path("data/uploads")

    max_resume_size_bytes: int = 5 * 1024 * 1024
    allowed_resume_extensions: list[str] = [".pdf"]
    option_id_prefix: str = OPTION_ID_PREFIX

    default_locale: str = "pt_BR"
    fallback_locale: str = "en_US"

    log_level: str = "INFO"
    log_json: bool = False

    admin_token: str | None = None


@lru_cache
def get_settings() -> Settings:
    """Return a cached settings instance."""

    settings = Settings()
    settings.data_directory.mkdir(parents=True, exist_ok=True)
    settings.upload_directory.mkdir(parents=True, exist_ok=True)
    return settings


settings = get_settings()
