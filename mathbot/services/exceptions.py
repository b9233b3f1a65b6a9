"""Error taxonomy for the solve/follow-up lifecycle."""

from typing import Optional

# Returned as fail_reason when the model output cannot be decoded
MALFORMED_RESPONSE_REASON = "The AI returned a response in an invalid format."

GENERIC_TRANSPORT_MESSAGE = "An unknown error occurred while contacting the AI service."


class SolverError(Exception):
    """Base class for all solver errors."""


class ConfigurationError(SolverError):
    """No remote capability is configured (missing API key)."""


class TransportError(SolverError):
    """The remote capability rejected the call or could not be reached.

    ``kind`` is one of ``unauthenticated``, ``unavailable``, ``quota`` or ``other``.
    """

    UNAUTHENTICATED = "unauthenticated"
    UNAVAILABLE = "unavailable"
    QUOTA = "quota"
    OTHER = "other"

    def __init__(self, kind: str = OTHER, message: Optional[str] = None):
        self.kind = kind
        self.message = message or GENERIC_TRANSPORT_MESSAGE
        super().__init__(self.message)


class ConversationBusyError(SolverError):
    """A follow-up question is already being answered for this conversation."""


class StorageError(SolverError):
    """The persistent key/value store could not be read or written."""
