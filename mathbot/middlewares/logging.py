"""Per-update logging: who sent what, and how long the handler took."""

import logging
import time
from collections.abc import Awaitable, Callable
from typing import Any, Optional

from aiogram import BaseMiddleware
from aiogram.types import CallbackQuery, Message, TelegramObject

from mathbot.utils.text_utils import truncate

logger = logging.getLogger(__name__)

PREVIEW_LENGTH = 50


def describe_event(event: TelegramObject) -> tuple[Optional[int], str]:
    """Chat id and a short one-line description of an incoming event."""
    if isinstance(event, Message):
        if event.photo:
            return event.chat.id, f"photo {truncate(event.caption or '', PREVIEW_LENGTH)!r}"
        return event.chat.id, f"text {truncate(event.text or '', PREVIEW_LENGTH)!r}"
    if isinstance(event, CallbackQuery):
        chat_id = event.message.chat.id if event.message else None
        return chat_id, f"callback {event.data!r}"
    return None, type(event).__name__


class LoggingMiddleware(BaseMiddleware):
    """Logs each message and callback, plus handler timing and failures."""

    async def __call__(
        self,
        handler: Callable[[TelegramObject, dict[str, Any]], Awaitable[Any]],
        event: TelegramObject,
        data: dict[str, Any],
    ) -> Any:
        chat_id, description = describe_event(event)
        logger.info(f"chat {chat_id}: {description}")

        started = time.perf_counter()
        try:
            return await handler(event, data)
        except Exception as e:
            logger.exception(
                f"chat {chat_id}: {type(e).__name__} after "
                f"{(time.perf_counter() - started) * 1000:.0f}ms"
            )
            raise
        finally:
            logger.debug(f"chat {chat_id}: handled in {(time.perf_counter() - started) * 1000:.0f}ms")
