"""Tests for bot-level error handling."""

from unittest.mock import AsyncMock, MagicMock

import pytest

from mathbot.handlers.errors import STORAGE_UNAVAILABLE, handle_storage_error
from mathbot.services.exceptions import StorageError


def error_event(message=None, callback_query=None):
    event = MagicMock()
    event.update.update_id = 1
    event.update.message = message
    event.update.callback_query = callback_query
    event.exception = StorageError("Could not read history")
    return event


@pytest.mark.asyncio
async def test_storage_error_is_reported_to_message_sender():
    message = MagicMock()
    message.answer = AsyncMock()

    assert await handle_storage_error(error_event(message=message)) is True
    message.answer.assert_awaited_once_with(STORAGE_UNAVAILABLE)


@pytest.mark.asyncio
async def test_storage_error_on_button_press_shows_alert():
    callback = MagicMock()
    callback.answer = AsyncMock()

    await handle_storage_error(error_event(callback_query=callback))

    callback.answer.assert_awaited_once_with(STORAGE_UNAVAILABLE, show_alert=True)
