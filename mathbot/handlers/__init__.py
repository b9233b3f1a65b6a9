"""Handlers module for MathBot."""

from aiogram import Router

from mathbot.handlers.errors import router as errors_router
from mathbot.handlers.followup import router as followup_router
from mathbot.handlers.history import router as history_router
from mathbot.handlers.question import router as question_router
from mathbot.handlers.start import router as start_router


def setup_routers() -> Router:
    """Setup and return main router with all handlers."""
    main_router = Router()

    # Order matters: follow-up text must win over new free-form questions
    main_router.include_router(start_router)
    main_router.include_router(history_router)
    main_router.include_router(followup_router)
    main_router.include_router(question_router)
    main_router.include_router(errors_router)

    return main_router


__all__ = ["setup_routers"]
