"""MathBot - a Telegram math question solver."""

__version__ = "1.0.0"
