"""Tests for the SQLAlchemy key/value storage."""

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from mathbot.database import Base, SqlKeyValueStorage
from mathbot.schemas.history import HistoryInput, HistoryRecord
from mathbot.schemas.solve import McqResult, Mode
from mathbot.services.exceptions import StorageError
from mathbot.services.history import HistoryStore


@pytest_asyncio.fixture
async def session_factory(tmp_path):
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    await engine.dispose()


@pytest.mark.asyncio
async def test_get_missing_key(session_factory):
    assert await SqlKeyValueStorage(session_factory, 1).get("language") is None


@pytest.mark.asyncio
async def test_set_overwrites(session_factory):
    storage = SqlKeyValueStorage(session_factory, 1)

    await storage.set("language", "en")
    await storage.set("language", "fr")

    assert await storage.get("language") == "fr"


@pytest.mark.asyncio
async def test_remove(session_factory):
    storage = SqlKeyValueStorage(session_factory, 1)
    await storage.set("theme", "dark")

    await storage.remove("theme")
    await storage.remove("theme")

    assert await storage.get("theme") is None


@pytest.mark.asyncio
async def test_owners_are_isolated(session_factory):
    alice = SqlKeyValueStorage(session_factory, 100)
    bob = SqlKeyValueStorage(session_factory, 200)

    await alice.set("language", "ar")

    assert await bob.get("language") is None
    assert await alice.get("language") == "ar"


@pytest.mark.asyncio
async def test_history_round_trip_through_database(session_factory):
    storage = SqlKeyValueStorage(session_factory, 42)
    history = HistoryStore(storage, limit=10)
    record = HistoryRecord(
        mode=Mode.MCQ,
        input=HistoryInput(question_text="√16 = ?", options=["2", "4", "", ""]),
        result=McqResult(answer_index=1, answer_text="4", explanation="√16 = 4"),
    )
    await history.append(record)

    reloaded = await HistoryStore.load(SqlKeyValueStorage(session_factory, 42))

    assert reloaded.list() == [record]


@pytest.mark.asyncio
async def test_database_errors_raise_storage_error(tmp_path):
    # No tables created
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'empty.db'}")
    storage = SqlKeyValueStorage(async_sessionmaker(engine, expire_on_commit=False), 1)

    with pytest.raises(StorageError):
        await storage.get("language")
    with pytest.raises(StorageError):
        await storage.set("language", "en")
    with pytest.raises(StorageError):
        await storage.remove("language")
    with pytest.raises(StorageError):
        await HistoryStore.load(storage)

    await engine.dispose()
