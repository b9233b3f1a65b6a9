"""Middlewares module for MathBot."""

from mathbot.middlewares.logging import LoggingMiddleware

__all__ = [
    "LoggingMiddleware",
]
