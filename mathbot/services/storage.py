"""Key/value persistence contract used by history and preferences."""

from typing import Optional, Protocol

# Key space
HISTORY_KEY = "history"
LANGUAGE_KEY = "language"
THEME_KEY = "theme"
VISITED_KEY = "has_visited_before"

ALL_KEYS = (HISTORY_KEY, LANGUAGE_KEY, THEME_KEY, VISITED_KEY)


class KeyValueStorage(Protocol):
    """Best-effort string store scoped to one owner."""

    async def get(self, key: str) -> Optional[str]: ...

    async def set(self, key: str, value: str) -> None: ...

    async def remove(self, key: str) -> None: ...
