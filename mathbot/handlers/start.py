"""Start, onboarding and settings handlers."""

import logging

from aiogram import F, Router
from aiogram.filters import Command, CommandStart
from aiogram.fsm.context import FSMContext
from aiogram.types import CallbackQuery, Message

from mathbot.handlers.common import session_registry
from mathbot.keyboards import (
    get_confirm_keyboard,
    get_language_keyboard,
    get_main_keyboard,
    get_theme_keyboard,
)
from mathbot.keyboards.reply import HELP_BUTTON
from mathbot.utils.prompts import LANGUAGES

router = Router(name="start")
logger = logging.getLogger(__name__)

CHOOSE_LANGUAGE = "🌐 Choose your language"
CHOOSE_THEME = "🎨 Choose your theme"

WELCOME_MESSAGE = (
    "👋 Hi! I'm MathBot, your math problem solver.\n\n"
    "• 🧮 Multiple choice: send the question and its options, I pick the right one\n"
    "• ✍️ Free-form: send any math question as text\n"
    "• 📸 Photo: snap the problem from your textbook\n\n"
    "After each answer you can ask follow-up questions about the explanation."
)

WELCOME_BACK_MESSAGE = (
    "👋 Welcome back!\n\n"
    "Send a question as text or a photo, or pick a mode below."
)

HELP_MESSAGE = (
    "❓ *How to use MathBot*\n\n"
    "/mcq — multiple-choice question\n"
    "/essay — free-form question\n"
    "/history — your last solved questions\n"
    "/new — leave the current follow-up conversation\n"
    "/language — change the answer language\n"
    "/theme — change the Mini App theme\n"
    "/reset — forget all your data"
)


@router.message(CommandStart())
async def cmd_start(message: Message, state: FSMContext) -> None:
    """Handle /start command - onboarding for new users, welcome back otherwise."""
    await state.clear()
    preferences = session_registry.preferences(message.chat.id)

    if await preferences.is_first_run():
        await message.answer(CHOOSE_LANGUAGE, reply_markup=get_language_keyboard())
        return

    await message.answer(WELCOME_BACK_MESSAGE, reply_markup=get_main_keyboard())


@router.message(Command("help"))
@router.message(F.text == HELP_BUTTON)
async def cmd_help(message: Message) -> None:
    await message.answer(HELP_MESSAGE, parse_mode="Markdown", reply_markup=get_main_keyboard())


@router.message(Command("language"))
async def cmd_language(message: Message) -> None:
    preferences = session_registry.preferences(message.chat.id)
    current = await preferences.get_language()
    await message.answer(CHOOSE_LANGUAGE, reply_markup=get_language_keyboard(current))


@router.message(Command("theme"))
async def cmd_theme(message: Message) -> None:
    await message.answer(CHOOSE_THEME, reply_markup=get_theme_keyboard())


@router.callback_query(F.data.startswith("lang_"))
async def handle_language(callback: CallbackQuery) -> None:
    """Save the language; during onboarding continue with the theme."""
    code = callback.data.removeprefix("lang_")
    if code not in LANGUAGES:
        await callback.answer("Unknown language", show_alert=True)
        return

    preferences = session_registry.preferences(callback.message.chat.id)
    await preferences.set_language(code)
    await callback.answer(LANGUAGES[code])

    if await preferences.is_first_run():
        await callback.message.edit_text(CHOOSE_THEME, reply_markup=get_theme_keyboard())
        return

    await callback.message.edit_text(f"🌐 Answers will be written in {LANGUAGES[code]}.")


@router.callback_query(F.data.startswith("theme_"))
async def handle_theme(callback: CallbackQuery) -> None:
    """Save the theme; during onboarding this completes setup."""
    theme = callback.data.removeprefix("theme_")
    preferences = session_registry.preferences(callback.message.chat.id)

    try:
        await preferences.set_theme(theme)
    except ValueError:
        await callback.answer("Unknown theme", show_alert=True)
        return

    await callback.answer()

    if await preferences.is_first_run():
        await preferences.mark_visited()
        await callback.message.edit_text(WELCOME_MESSAGE)
        await callback.message.answer(
            "Send me your first question! 📚",
            reply_markup=get_main_keyboard(),
        )
        return

    await callback.message.edit_text(f"🎨 Theme set to {theme}.")


@router.message(Command("reset"))
async def cmd_reset(message: Message) -> None:
    await message.answer(
        "⚠️ This deletes your history and settings. Continue?",
        reply_markup=get_confirm_keyboard("reset"),
    )


@router.callback_query(F.data == "reset_yes")
async def handle_reset_confirm(callback: CallbackQuery, state: FSMContext) -> None:
    chat_id = callback.message.chat.id
    await session_registry.reset(chat_id)
    await state.clear()
    logger.info(f"All data reset for chat {chat_id}")

    await callback.answer("Done")
    await callback.message.edit_text("🧹 Everything was reset.")
    await callback.message.answer(CHOOSE_LANGUAGE, reply_markup=get_language_keyboard())


@router.callback_query(F.data == "reset_no")
async def handle_reset_cancel(callback: CallbackQuery) -> None:
    await callback.answer("Cancelled")
    await callback.message.edit_reply_markup(reply_markup=None)
