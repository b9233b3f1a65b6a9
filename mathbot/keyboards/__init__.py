"""Keyboards module for MathBot."""

from mathbot.keyboards.inline import (
    get_cancel_keyboard,
    get_confirm_keyboard,
    get_history_keyboard,
    get_language_keyboard,
    get_skip_keyboard,
    get_theme_keyboard,
)
from mathbot.keyboards.reply import get_main_keyboard

__all__ = [
    "get_main_keyboard",
    "get_language_keyboard",
    "get_theme_keyboard",
    "get_history_keyboard",
    "get_confirm_keyboard",
    "get_skip_keyboard",
    "get_cancel_keyboard",
]
