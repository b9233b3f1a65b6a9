"""SQLAlchemy-backed key/value storage for one Telegram user."""

import logging
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from mathbot.database.repositories import KeyValueRepository
from mathbot.services.exceptions import StorageError

logger = logging.getLogger(__name__)


class SqlKeyValueStorage:
    """
    Key/value storage scoped to ``owner_id``.

    Database errors are logged and re-raised as StorageError, so callers
    never mistake a failed read for a missing key.
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession], owner_id: int):
        self.session_factory = session_factory
        self.owner_id = owner_id

    async def get(self, key: str) -> Optional[str]:
        try:
            async with self.session_factory() as session:
                entry = await KeyValueRepository(session).get(self.owner_id, key)
                return entry.value if entry else None
        except SQLAlchemyError as e:
            logger.error(f"Failed to read {key} for {self.owner_id}: {e}")
            raise StorageError(f"Could not read {key}") from e

    async def set(self, key: str, value: str) -> None:
        try:
            async with self.session_factory() as session:
                await KeyValueRepository(session).upsert(self.owner_id, key, value)
                await session.commit()
        except SQLAlchemyError as e:
            logger.error(f"Failed to write {key} for {self.owner_id}: {e}")
            raise StorageError(f"Could not write {key}") from e

    async def remove(self, key: str) -> None:
        try:
            async with self.session_factory() as session:
                await KeyValueRepository(session).delete(self.owner_id, key)
                await session.commit()
        except SQLAlchemyError as e:
            logger.error(f"Failed to remove {key} for {self.owner_id}: {e}")
            raise StorageError(f"Could not remove {key}") from e
