"""Mini App API schemas."""

from webapp.backend.schemas.history import HistoryItemResponse, HistoryListResponse
from webapp.backend.schemas.preferences import PreferencesResponse, PreferencesUpdate

__all__ = [
    "HistoryItemResponse",
    "HistoryListResponse",
    "PreferencesResponse",
    "PreferencesUpdate",
]
