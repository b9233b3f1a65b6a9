"""Telegram Mini App for browsing MathBot history."""
