"""Question handlers - MCQ and free-form solving flow."""

import logging

from aiogram import Bot, F, Router
from aiogram.filters import Command
from aiogram.fsm.context import FSMContext
from aiogram.types import CallbackQuery, Message

from mathbot.config import settings
from mathbot.handlers.common import (
    NOT_CONFIGURED,
    SERVICE_UNAVAILABLE,
    get_image_attachment,
    session_registry,
    show_result,
)
from mathbot.handlers.states import SolveFlow
from mathbot.keyboards import get_cancel_keyboard, get_main_keyboard, get_skip_keyboard
from mathbot.keyboards.reply import ESSAY_BUTTON, MCQ_BUTTON, MENU_BUTTONS
from mathbot.schemas.solve import Mode, SolveRequest
from mathbot.services.exceptions import ConfigurationError
from mathbot.utils.text_utils import parse_options

router = Router(name="question")
logger = logging.getLogger(__name__)

MAX_QUESTION_LENGTH = 4000
MAX_OPTIONS = 4


async def run_solve(message: Message, state: FSMContext, bot: Bot, request: SolveRequest) -> None:
    """Submit a request and render whatever comes back."""
    chat_id = message.chat.id
    controller = await session_registry.get(chat_id)
    language = await session_registry.preferences(chat_id).get_language()

    await state.clear()
    await bot.send_chat_action(chat_id, "typing")

    try:
        outcome = await controller.submit(request, language)
    except ConfigurationError as e:
        logger.error(f"Solver not configured: {e}")
        await message.answer(NOT_CONFIGURED, reply_markup=get_main_keyboard())
        return

    if outcome is None:
        # Either a transport failure or a newer submission replaced this one
        if controller.request is request and controller.error:
            await message.answer(
                f"{SERVICE_UNAVAILABLE}\n\n{controller.error}",
                reply_markup=get_main_keyboard(),
            )
        return

    await show_result(
        message,
        state,
        outcome.request,
        outcome.result,
        has_conversation=outcome.conversation is not None,
    )


@router.message(Command("mcq"))
@router.message(F.text == MCQ_BUTTON)
async def cmd_mcq(message: Message, state: FSMContext) -> None:
    """Start the multiple-choice flow."""
    await state.clear()
    await state.set_state(SolveFlow.mcq_question)
    await message.answer(
        "🧮 Send the question as text or a photo.\n"
        "If the options alone are enough, press «Options only».",
        reply_markup=get_skip_keyboard(),
    )


@router.message(Command("essay"))
@router.message(F.text == ESSAY_BUTTON)
async def cmd_essay(message: Message, state: FSMContext) -> None:
    """Explain the free-form mode."""
    await state.clear()
    await message.answer(
        "✍️ Send your question as text or a photo and I will solve it step by step.",
        reply_markup=get_main_keyboard(),
    )


@router.message(SolveFlow.mcq_question, F.photo | (F.text & ~F.text.startswith("/")))
async def handle_mcq_question(message: Message, state: FSMContext, bot: Bot) -> None:
    """Store the MCQ question and ask for the options."""
    question_text = (message.caption if message.photo else message.text) or ""
    if len(question_text) > MAX_QUESTION_LENGTH:
        await message.answer(
            f"📝 Please shorten the question to {MAX_QUESTION_LENGTH} characters. "
            f"Now: {len(question_text)}"
        )
        return

    image = await get_image_attachment(message, bot)
    await state.update_data(
        question_text=question_text,
        image=image.model_dump() if image else None,
    )
    await state.set_state(SolveFlow.mcq_options)
    await message.answer(
        f"📋 Now send the options, one per line (up to {MAX_OPTIONS}).",
        reply_markup=get_cancel_keyboard(),
    )


@router.callback_query(SolveFlow.mcq_question, F.data == "mcq_skip")
async def handle_mcq_skip(callback: CallbackQuery, state: FSMContext) -> None:
    """Continue to the options without a question text."""
    await state.update_data(question_text="", image=None)
    await state.set_state(SolveFlow.mcq_options)
    await callback.answer()
    await callback.message.edit_reply_markup(reply_markup=None)
    await callback.message.answer(
        f"📋 Send the options, one per line (up to {MAX_OPTIONS}).",
        reply_markup=get_cancel_keyboard(),
    )


@router.message(SolveFlow.mcq_options, F.text & ~F.text.startswith("/"))
async def handle_mcq_options(message: Message, state: FSMContext, bot: Bot) -> None:
    """Collect options and solve."""
    options = parse_options(message.text)
    if not options:
        await message.answer("📋 I need at least one option.")
        return
    if len(options) > MAX_OPTIONS:
        await message.answer(f"📋 At most {MAX_OPTIONS} options, please.")
        return

    data = await state.get_data()
    request = SolveRequest(
        mode=Mode.MCQ,
        question_text=data.get("question_text", ""),
        options=tuple(options),
        numeric_tolerance=settings.numeric_tolerance,
        image=data.get("image"),
    )
    await run_solve(message, state, bot, request)


@router.message(
    F.photo | (F.text & ~F.text.startswith("/") & ~F.text.in_(MENU_BUTTONS))
)
async def handle_essay_question(message: Message, state: FSMContext, bot: Bot) -> None:
    """Any other text or photo is a free-form question."""
    question_text = (message.caption if message.photo else message.text) or ""
    if len(question_text) > MAX_QUESTION_LENGTH:
        await message.answer(
            f"📝 Please shorten the question to {MAX_QUESTION_LENGTH} characters. "
            f"Now: {len(question_text)}"
        )
        return

    image = await get_image_attachment(message, bot)
    request = SolveRequest(
        mode=Mode.ESSAY,
        question_text=question_text,
        numeric_tolerance=settings.numeric_tolerance,
        image=image,
    )
    await run_solve(message, state, bot, request)


@router.callback_query(F.data == "cancel")
async def handle_cancel(callback: CallbackQuery, state: FSMContext) -> None:
    """Handle global cancel callback."""
    await state.clear()
    await callback.answer("Cancelled")
    await callback.message.edit_reply_markup(reply_markup=None)
    await callback.message.answer(
        "❌ Cancelled. Send a new question when you're ready.",
        reply_markup=get_main_keyboard(),
    )
