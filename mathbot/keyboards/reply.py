"""Reply keyboards for MathBot."""

from aiogram.types import KeyboardButton, ReplyKeyboardMarkup

MCQ_BUTTON = "🧮 Multiple choice"
ESSAY_BUTTON = "✍️ Free-form"
HISTORY_BUTTON = "🗂 History"
HELP_BUTTON = "❓ Help"

MENU_BUTTONS = (MCQ_BUTTON, ESSAY_BUTTON, HISTORY_BUTTON, HELP_BUTTON)


def get_main_keyboard() -> ReplyKeyboardMarkup:
    """Get main reply keyboard with mode, history and help buttons."""
    return ReplyKeyboardMarkup(
        keyboard=[
            [
                KeyboardButton(text=MCQ_BUTTON),
                KeyboardButton(text=ESSAY_BUTTON),
            ],
            [
                KeyboardButton(text=HISTORY_BUTTON),
                KeyboardButton(text=HELP_BUTTON),
            ],
        ],
        resize_keyboard=True,
        input_field_placeholder="Send a math question or a photo...",
    )
