"""FastAPI dependency helpers."""
import secrets
from collections.abc import AsyncIterator
from functools import lru_cache

from fastapi import Depends, Header
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import Settings, get_settings
from app.database import get_session
from app.errors import UnauthorizedError
from app.i18n import Translator
from services.submission import ApplicationSubmissionEngine


async def db_session() -> AsyncIterator[AsyncSession]:
    async for session in get_session():
        yield session


def settings_provider() -> Settings:
    return get_settings()


@lru_cache
def load_translator(locale: str, fallback_locale: str) -> Translator:
    return Translator.from_directory(locale, fallback_locale)


def translator_provider(settings: Settings = Depends(settings_provider)) -> Translator:
    return load_translator(settings.default_locale, settings.fallback_locale)


def submission_engine_provider(
    settings: Settings = Depends(settings_provider),
    translator: Translator = Depends(translator_provider),
) -> ApplicationSubmissionEngine:
    return ApplicationSubmissionEngine.from_settings(settings, translator)


def require_admin(
    x_admin_token: str | None = Header(default=None),
    settings: Settings = Depends(settings_provider),
) -> None:
    """Gate admin routes on the configured shared token."""

    if not settings.admin_token or not x_admin_token:
        raise UnauthorizedError()
    if not secrets.compare_digest(x_admin_token, settings.admin_token):
        raise UnauthorizedError()
