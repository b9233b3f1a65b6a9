"""Services module for MathBot."""

from mathbot.services.conversation import FollowUpController, derive_session
from mathbot.services.exceptions import (
    ConfigurationError,
    ConversationBusyError,
    SolverError,
    StorageError,
    TransportError,
)
from mathbot.services.history import HistoryStore, restore_session
from mathbot.services.openrouter import OpenRouterClient
from mathbot.services.preferences import PreferenceService
from mathbot.services.registry import SessionRegistry
from mathbot.services.session import SessionController
from mathbot.services.solver import SolveOrchestrator, SolveOutcome

__all__ = [
    "OpenRouterClient",
    "SolveOrchestrator",
    "SolveOutcome",
    "FollowUpController",
    "derive_session",
    "HistoryStore",
    "restore_session",
    "SessionController",
    "SessionRegistry",
    "PreferenceService",
    "SolverError",
    "ConfigurationError",
    "TransportError",
    "ConversationBusyError",
    "StorageError",
]
