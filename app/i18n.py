"""Message catalogue lookup with locale fallback."""
from __future__ import annotations

import json
import logging
import re
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)

LOCALES_DIRECTORY = Path(__file__).parent / "locales"
_PLACEHOLDER = re.compile(r"\{\{(\w+)\}\}")


class Translator:
    """Resolve dotted message keys against per-locale catalogues."""

    def __init__(
        self,
        locale: str,
        fallback_locale: str,
        messages: dict[str, dict[str, Any]],
    ) -> None:
        self.locale = locale
        self.fallback_locale = fallback_locale
        self.messages = messages

    @classmethod
    def from_directory(
        cls,
        locale: str,
        fallback_locale: str,
        directory: Path = LOCALES_DIRECTORY,
    ) -> Translator:
        messages: dict[str, dict[str, Any]] = {}
        for name in {locale, fallback_locale}:
            path = directory / f"{name}.json"
            try:
                with path.open("r", encoding="utf-8") as handle:
                    messages[name] = json.load(handle)
            except (OSError, json.JSONDecodeError) as exc:
                logger.warning("Failed to load messages for locale %s: %s", name, exc)
        return cls(locale, fallback_locale, messages)

    def translate(self, key: str, params: dict[str, Any] | None = None) -> str:
        message = self._lookup(key, self.locale) or self._lookup(key, self.fallback_locale) or key
        if not params:
            return message
        return _PLACEHOLDER.sub(lambda match: str(params.get(match.group(1), match.group(0))), message)

    def _lookup(self, key: str, locale: str) -> str | None:
        current: Any = self.messages.get(locale)
        for part in key.split("."):
            if not isinstance(current, dict) or part not in current:
                return None
            current = current[part]
        return current if isinstance(current, str) else None
