"""Error handlers for failures no individual handler recovers from."""

import logging

from aiogram import Router
from aiogram.filters import ExceptionTypeFilter
from aiogram.types import ErrorEvent

from mathbot.services.exceptions import StorageError

router = Router(name="errors")
logger = logging.getLogger(__name__)

STORAGE_UNAVAILABLE = "💾 Your saved data is temporarily unavailable. Nothing was changed, please try again later."


@router.errors(ExceptionTypeFilter(StorageError))
async def handle_storage_error(event: ErrorEvent) -> bool:
    """Tell the user their data could not be reached instead of failing silently."""
    update = event.update
    logger.error(f"Storage failure in update {update.update_id}: {event.exception}")

    if update.callback_query is not None:
        await update.callback_query.answer(STORAGE_UNAVAILABLE, show_alert=True)
    elif update.message is not None:
        await update.message.answer(STORAGE_UNAVAILABLE)
    return True
