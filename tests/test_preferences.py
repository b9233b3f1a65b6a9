"""Tests for user preferences."""

import pytest

from mathbot.schemas.history import HistoryInput, HistoryRecord
from mathbot.schemas.solve import McqResult, Mode
from mathbot.services.exceptions import StorageError
from mathbot.services.history import HistoryStore
from mathbot.services.preferences import PreferenceService
from mathbot.services.registry import SessionRegistry
from mathbot.services.storage import HISTORY_KEY, LANGUAGE_KEY, THEME_KEY, VISITED_KEY
from tests.conftest import FakeClient, MemoryKeyValueStorage, UnreadableKeyValueStorage


@pytest.mark.asyncio
async def test_defaults(storage):
    preferences = PreferenceService(storage)

    assert await preferences.get_language() == "en"
    assert await preferences.get_theme() == "light"
    assert await preferences.is_first_run()


@pytest.mark.asyncio
async def test_set_language_and_theme(storage):
    preferences = PreferenceService(storage)

    await preferences.set_language("ar")
    await preferences.set_theme("dark")

    assert await preferences.get_language() == "ar"
    assert await preferences.get_theme() == "dark"
    assert storage.data[LANGUAGE_KEY] == "ar"


@pytest.mark.asyncio
async def test_invalid_values_are_rejected(storage):
    preferences = PreferenceService(storage)

    with pytest.raises(ValueError):
        await preferences.set_language("xx")
    with pytest.raises(ValueError):
        await preferences.set_theme("neon")

    assert storage.data == {}


@pytest.mark.asyncio
async def test_unknown_stored_values_fall_back():
    preferences = PreferenceService(MemoryKeyValueStorage({LANGUAGE_KEY: "klingon", THEME_KEY: "x"}))

    assert await preferences.get_language() == "en"
    assert await preferences.get_theme() == "light"


@pytest.mark.asyncio
async def test_toggle_theme(storage):
    preferences = PreferenceService(storage)

    assert await preferences.toggle_theme() == "dark"
    assert await preferences.toggle_theme() == "light"


@pytest.mark.asyncio
async def test_first_run_flag(storage):
    preferences = PreferenceService(storage)
    await preferences.mark_visited()

    assert not await preferences.is_first_run()


@pytest.mark.asyncio
async def test_reset_removes_every_key():
    storage = MemoryKeyValueStorage(
        {HISTORY_KEY: "[]", LANGUAGE_KEY: "ru", THEME_KEY: "dark", VISITED_KEY: "true"}
    )

    await PreferenceService(storage).reset()

    assert storage.data == {}


@pytest.mark.asyncio
async def test_registry_keeps_one_controller_per_chat():
    stores = {}

    def factory(chat_id):
        return stores.setdefault(chat_id, MemoryKeyValueStorage())

    registry = SessionRegistry(FakeClient(), factory)

    first = await registry.get(1)
    assert await registry.get(1) is first
    assert await registry.get(2) is not first

    await registry.preferences(1).mark_visited()
    await registry.reset(1)

    assert stores[1].data == {}
    assert await registry.get(1) is not first


@pytest.mark.asyncio
async def test_registry_sees_history_removed_elsewhere():
    storage = MemoryKeyValueStorage()
    registry = SessionRegistry(FakeClient(), lambda chat_id: storage)
    record = HistoryRecord(
        mode=Mode.MCQ,
        input=HistoryInput(question_text="2+2", options=["3", "4"]),
        result=McqResult(answer_index=1, answer_text="4", explanation="sum"),
    )
    controller = await registry.get(1)
    await controller.history.append(record)

    await (await HistoryStore.load(storage)).remove(record.id)

    controller = await registry.get(1)
    assert controller.history.list() == []
    assert controller.load_record(record.id, "en") is None


@pytest.mark.asyncio
async def test_registry_does_not_cache_a_failed_load():
    healthy = MemoryKeyValueStorage()
    stores = {"current": UnreadableKeyValueStorage()}
    registry = SessionRegistry(FakeClient(), lambda chat_id: stores["current"])

    with pytest.raises(StorageError):
        await registry.get(1)

    stores["current"] = healthy
    controller = await registry.get(1)
    assert controller.history.storage is healthy
