"""User preferences: language, theme and first-run flag."""

import logging

from mathbot.config import settings
from mathbot.services.storage import (
    ALL_KEYS,
    LANGUAGE_KEY,
    THEME_KEY,
    VISITED_KEY,
    KeyValueStorage,
)
from mathbot.utils.prompts import LANGUAGES

logger = logging.getLogger(__name__)

THEMES = ("light", "dark")
DEFAULT_THEME = "light"


class PreferenceService:
    """Reads and writes per-user preferences through the key/value storage."""

    def __init__(self, storage: KeyValueStorage):
        self.storage = storage

    async def get_language(self) -> str:
        language = await self.storage.get(LANGUAGE_KEY)
        if language in LANGUAGES:
            return language
        return settings.default_language

    async def set_language(self, language: str) -> None:
        """Raises ValueError for unsupported language codes."""
        if language not in LANGUAGES:
            raise ValueError(f"Unsupported language: {language}")
        await self.storage.set(LANGUAGE_KEY, language)

    async def get_theme(self) -> str:
        theme = await self.storage.get(THEME_KEY)
        return theme if theme in THEMES else DEFAULT_THEME

    async def set_theme(self, theme: str) -> None:
        """Raises ValueError for unknown themes."""
        if theme not in THEMES:
            raise ValueError(f"Unsupported theme: {theme}")
        await self.storage.set(THEME_KEY, theme)

    async def toggle_theme(self) -> str:
        theme = "dark" if await self.get_theme() == "light" else "light"
        await self.storage.set(THEME_KEY, theme)
        return theme

    async def is_first_run(self) -> bool:
        return await self.storage.get(VISITED_KEY) is None

    async def mark_visited(self) -> None:
        await self.storage.set(VISITED_KEY, "true")

    async def reset(self) -> None:
        """Forget everything stored for this user, history included."""
        for key in ALL_KEYS:
            await self.storage.remove(key)
        logger.info("Reset all preferences and history")
