"""Repository pattern implementations for database operations."""

from typing import Optional

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from mathbot.database.models import KeyValueEntry


class KeyValueRepository:
    """Repository for KeyValueEntry model operations."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get(self, owner_id: int, key: str) -> Optional[KeyValueEntry]:
        """Get entry by owner and key."""
        result = await self.session.execute(
            select(KeyValueEntry).where(
                KeyValueEntry.owner_id == owner_id,
                KeyValueEntry.key == key,
            )
        )
        return result.scalar_one_or_none()

    async def upsert(self, owner_id: int, key: str, value: str) -> KeyValueEntry:
        """Create or overwrite an entry."""
        entry = await self.get(owner_id, key)
        if entry:
            entry.value = value
            return entry

        entry = KeyValueEntry(owner_id=owner_id, key=key, value=value)
        self.session.add(entry)
        await self.session.flush()
        return entry

    async def delete(self, owner_id: int, key: str) -> None:
        """Delete an entry. Missing entries are ignored."""
        await self.session.execute(
            delete(KeyValueEntry).where(
                KeyValueEntry.owner_id == owner_id,
                KeyValueEntry.key == key,
            )
        )
