"""History handlers: list, replay, delete and clear past solves."""

import logging

from aiogram import F, Router
from aiogram.filters import Command
from aiogram.fsm.context import FSMContext
from aiogram.types import CallbackQuery, Message

from mathbot.handlers.common import safe_send_message, session_registry, show_result
from mathbot.keyboards import get_confirm_keyboard, get_history_keyboard
from mathbot.keyboards.reply import HISTORY_BUTTON
from mathbot.utils.text_utils import truncate

router = Router(name="history")
logger = logging.getLogger(__name__)

EMPTY_HISTORY = "🗂 No history yet. Solved questions will appear here."


def _history_title(count: int) -> str:
    return f"🗂 History ({count})"


@router.message(Command("history"))
@router.message(F.text == HISTORY_BUTTON)
async def cmd_history(message: Message) -> None:
    """Show the history list, newest first."""
    controller = await session_registry.get(message.chat.id)
    records = controller.history.list()

    if not records:
        await message.answer(EMPTY_HISTORY)
        return

    await message.answer(
        _history_title(len(records)),
        reply_markup=get_history_keyboard(records),
    )


@router.callback_query(F.data.startswith("hist_open_"))
async def handle_history_open(callback: CallbackQuery, state: FSMContext) -> None:
    """Replay a history record as the current session."""
    record_id = callback.data.removeprefix("hist_open_")
    chat_id = callback.message.chat.id
    controller = await session_registry.get(chat_id)
    language = await session_registry.preferences(chat_id).get_language()

    snapshot = controller.load_record(record_id, language)
    if snapshot is None:
        await callback.answer("This entry no longer exists", show_alert=True)
        return

    await callback.answer()

    request = snapshot.request
    header = "🖼 Question from an image" if request.image else "❓ Question"
    question = request.question_text.strip() or "—"
    await safe_send_message(callback.message, f"{header}\n{truncate(question, 500)}")

    await show_result(
        callback.message,
        state,
        request,
        snapshot.result,
        has_conversation=snapshot.conversation is not None,
    )


@router.callback_query(F.data.startswith("hist_del_"))
async def handle_history_delete(callback: CallbackQuery) -> None:
    """Delete one record and refresh the list."""
    record_id = callback.data.removeprefix("hist_del_")
    controller = await session_registry.get(callback.message.chat.id)

    await controller.history.remove(record_id)
    await callback.answer("Deleted")

    records = controller.history.list()
    if not records:
        await callback.message.edit_text(EMPTY_HISTORY)
        return
    await callback.message.edit_text(
        _history_title(len(records)),
        reply_markup=get_history_keyboard(records),
    )


@router.callback_query(F.data == "hist_clear")
async def handle_history_clear(callback: CallbackQuery) -> None:
    """Ask for confirmation before clearing."""
    await callback.answer()
    await callback.message.edit_text(
        "🧹 Clear the whole history?",
        reply_markup=get_confirm_keyboard("hist_clear"),
    )


@router.callback_query(F.data == "hist_clear_yes")
async def handle_history_clear_confirm(callback: CallbackQuery) -> None:
    controller = await session_registry.get(callback.message.chat.id)
    await controller.history.clear()
    logger.info(f"History cleared for chat {callback.message.chat.id}")
    await callback.answer("History cleared")
    await callback.message.edit_text(EMPTY_HISTORY)


@router.callback_query(F.data == "hist_clear_no")
async def handle_history_clear_cancel(callback: CallbackQuery) -> None:
    controller = await session_registry.get(callback.message.chat.id)
    records = controller.history.list()
    await callback.answer()
    if not records:
        await callback.message.edit_text(EMPTY_HISTORY)
        return
    await callback.message.edit_text(
        _history_title(len(records)),
        reply_markup=get_history_keyboard(records),
    )
