"""Mini App API routes."""

from webapp.backend.routes.history import router as history_router
from webapp.backend.routes.preferences import router as preferences_router

__all__ = [
    "history_router",
    "preferences_router",
]
