"""Follow-up conversation handlers: streamed answers about the explanation."""

import logging
import time

from aiogram import F, Router
from aiogram.filters import Command
from aiogram.fsm.context import FSMContext
from aiogram.types import Message

from mathbot.config import settings
from mathbot.handlers.common import (
    NOT_CONFIGURED,
    safe_edit_text,
    send_long_message,
    session_registry,
)
from mathbot.handlers.states import SolveFlow
from mathbot.keyboards import get_main_keyboard
from mathbot.keyboards.reply import MENU_BUTTONS
from mathbot.schemas.conversation import ChatTurn
from mathbot.services.exceptions import ConfigurationError, ConversationBusyError
from mathbot.utils.formatting import format_turn
from mathbot.utils.text_utils import TELEGRAM_MESSAGE_LIMIT, split_message, tail

router = Router(name="followup")
logger = logging.getLogger(__name__)

BUSY_MESSAGE = "⏳ Still answering your previous question, one moment..."


@router.message(Command("new"))
async def cmd_new(message: Message, state: FSMContext) -> None:
    """Leave the current conversation."""
    controller = await session_registry.get(message.chat.id)
    controller.reset()
    await state.clear()
    await message.answer(
        "🆕 Ready for a new question. Send text or a photo.",
        reply_markup=get_main_keyboard(),
    )


@router.message(SolveFlow.chatting, F.text & ~F.text.startswith("/") & ~F.text.in_(MENU_BUTTONS))
async def handle_follow_up(message: Message, state: FSMContext) -> None:
    """Stream the answer to a follow-up question into a live-edited message."""
    controller = await session_registry.get(message.chat.id)
    conversation = controller.conversation

    if conversation is None:
        await state.clear()
        await message.answer(
            "There is no active conversation. Send a new question to start one.",
            reply_markup=get_main_keyboard(),
        )
        return

    if conversation.in_flight:
        await message.answer(BUSY_MESSAGE)
        return

    reply = await message.answer("…")
    last_edit = 0.0

    async def on_update(turn: ChatTurn) -> None:
        nonlocal last_edit
        now = time.monotonic()
        if now - last_edit < settings.stream_edit_interval:
            return
        last_edit = now
        await safe_edit_text(reply, tail(format_turn(turn)))

    try:
        turn = await controller.ask(message.text, on_update=on_update)
    except ConversationBusyError:
        await safe_edit_text(reply, BUSY_MESSAGE)
        return
    except ConfigurationError as e:
        logger.error(f"Solver not configured: {e}")
        await safe_edit_text(reply, NOT_CONFIGURED)
        return

    if turn is None:
        await safe_edit_text(reply, "Please type a question.")
        return

    text = format_turn(turn)
    if len(text) <= TELEGRAM_MESSAGE_LIMIT:
        await safe_edit_text(reply, text)
        return

    first, *rest = split_message(text)
    await safe_edit_text(reply, first)
    await send_long_message(message, "\n\n".join(rest))
