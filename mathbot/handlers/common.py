"""Shared helpers for handlers: the session registry and safe message sending."""

import base64
import logging
from typing import Optional

from aiogram import Bot
from aiogram.exceptions import TelegramBadRequest
from aiogram.fsm.context import FSMContext
from aiogram.types import Message

from mathbot.database import SqlKeyValueStorage, async_session
from mathbot.handlers.states import SolveFlow
from mathbot.keyboards import get_main_keyboard
from mathbot.schemas.solve import ImageAttachment, SolveRequest, SolveResult
from mathbot.services.openrouter import openrouter_client
from mathbot.services.registry import SessionRegistry
from mathbot.utils.formatting import format_result
from mathbot.utils.text_utils import sanitize_markdown, split_message

logger = logging.getLogger(__name__)

SERVICE_UNAVAILABLE = "🔧 The solver is temporarily unavailable. Try again in a minute."
NOT_CONFIGURED = "⚙️ The solver is not configured yet. Please contact the bot owner."
FOLLOW_UP_HINT = "💬 Ask a follow-up question about the explanation, or send /new to start over."

session_registry = SessionRegistry(
    openrouter_client,
    lambda chat_id: SqlKeyValueStorage(async_session, chat_id),
)


async def safe_send_message(
    message: Message,
    text: str,
    reply_markup=None,
) -> Message:
    """Send message with Markdown, fallback to plain text on error."""
    try:
        return await message.answer(
            sanitize_markdown(text),
            parse_mode="Markdown",
            reply_markup=reply_markup,
        )
    except TelegramBadRequest as e:
        if "can't parse entities" not in str(e):
            raise
        logger.warning(f"Markdown parse failed, sending as plain text: {e}")
        return await message.answer(text, parse_mode=None, reply_markup=reply_markup)


async def send_long_message(message: Message, text: str, reply_markup=None) -> None:
    """Send text in Telegram-sized chunks; the keyboard goes on the last one."""
    chunks = split_message(text)
    for i, chunk in enumerate(chunks):
        markup = reply_markup if i == len(chunks) - 1 else None
        await safe_send_message(message, chunk, reply_markup=markup)


async def safe_edit_text(message: Message, text: str) -> None:
    """Edit a message, ignoring 'message is not modified' and similar races."""
    try:
        await message.edit_text(text, parse_mode=None)
    except TelegramBadRequest as e:
        logger.debug(f"Edit skipped: {e}")


async def get_image_attachment(message: Message, bot: Bot) -> Optional[ImageAttachment]:
    """Download and encode the largest photo of a message."""
    if not message.photo:
        return None

    photo = message.photo[-1]
    file = await bot.get_file(photo.file_id)
    file_bytes = await bot.download_file(file.file_path)

    return ImageAttachment(
        data=base64.b64encode(file_bytes.read()).decode("utf-8"),
        mime_type="image/jpeg",
    )


async def show_result(
    message: Message,
    state: FSMContext,
    request: SolveRequest,
    result: SolveResult,
    has_conversation: bool,
) -> None:
    """Render a result and switch the chat into follow-up mode if eligible."""
    text = format_result(result, request.normalized().options)
    if has_conversation:
        await state.set_state(SolveFlow.chatting)
        text = f"{text}\n\n{FOLLOW_UP_HINT}"
    else:
        await state.clear()

    await send_long_message(message, text, reply_markup=get_main_keyboard())
