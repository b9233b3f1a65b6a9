"""Inline keyboards for MathBot."""

from typing import Optional, Sequence

from aiogram.types import InlineKeyboardButton, InlineKeyboardMarkup, WebAppInfo

from mathbot.config import settings
from mathbot.schemas.history import HistoryRecord
from mathbot.services.preferences import THEMES
from mathbot.utils.formatting import format_history_label
from mathbot.utils.prompts import LANGUAGES

THEME_LABELS = {"light": "☀️ Light", "dark": "🌙 Dark"}


def get_language_keyboard(selected: Optional[str] = None) -> InlineKeyboardMarkup:
    """Get keyboard with all supported languages, two per row."""
    buttons = [
        InlineKeyboardButton(
            text=f"• {name} •" if code == selected else name,
            callback_data=f"lang_{code}",
        )
        for code, name in LANGUAGES.items()
    ]
    rows = [buttons[i:i + 2] for i in range(0, len(buttons), 2)]
    return InlineKeyboardMarkup(inline_keyboard=rows)


def get_theme_keyboard() -> InlineKeyboardMarkup:
    """Get keyboard for theme selection."""
    return InlineKeyboardMarkup(
        inline_keyboard=[
            [
                InlineKeyboardButton(text=THEME_LABELS[theme], callback_data=f"theme_{theme}")
                for theme in THEMES
            ]
        ]
    )


def get_history_keyboard(records: Sequence[HistoryRecord]) -> InlineKeyboardMarkup:
    """Get keyboard listing history records with open and delete buttons."""
    buttons = [
        [
            InlineKeyboardButton(
                text=format_history_label(record),
                callback_data=f"hist_open_{record.id}",
            ),
            InlineKeyboardButton(text="🗑", callback_data=f"hist_del_{record.id}"),
        ]
        for record in records
    ]

    if records:
        buttons.append(
            [InlineKeyboardButton(text="🧹 Clear history", callback_data="hist_clear")]
        )

    if settings.webapp_url:
        buttons.append(
            [
                InlineKeyboardButton(
                    text="📱 Open in Mini App",
                    web_app=WebAppInfo(url=f"{settings.webapp_url.rstrip('/')}/history"),
                )
            ]
        )

    return InlineKeyboardMarkup(inline_keyboard=buttons)


def get_confirm_keyboard(action: str) -> InlineKeyboardMarkup:
    """Get yes/no keyboard for a destructive action."""
    return InlineKeyboardMarkup(
        inline_keyboard=[
            [
                InlineKeyboardButton(text="✅ Yes", callback_data=f"{action}_yes"),
                InlineKeyboardButton(text="❌ No", callback_data=f"{action}_no"),
            ]
        ]
    )


def get_skip_keyboard() -> InlineKeyboardMarkup:
    """Get keyboard to skip the question text in the MCQ flow."""
    return InlineKeyboardMarkup(
        inline_keyboard=[
            [
                InlineKeyboardButton(text="⏭ Options only", callback_data="mcq_skip"),
                InlineKeyboardButton(text="❌ Cancel", callback_data="cancel"),
            ]
        ]
    )


def get_cancel_keyboard() -> InlineKeyboardMarkup:
    """Get simple cancel keyboard."""
    return InlineKeyboardMarkup(
        inline_keyboard=[
            [InlineKeyboardButton(text="❌ Cancel", callback_data="cancel")]
        ]
    )
