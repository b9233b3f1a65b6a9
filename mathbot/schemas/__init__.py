"""Pydantic schemas for MathBot."""

from mathbot.schemas.conversation import ChatTurn, ConversationSession
from mathbot.schemas.history import HistoryInput, HistoryList, HistoryRecord
from mathbot.schemas.solve import (
    EssayResult,
    ImageAttachment,
    McqResult,
    Mode,
    SolveRequest,
    SolveResult,
)

__all__ = [
    "Mode",
    "ImageAttachment",
    "SolveRequest",
    "SolveResult",
    "McqResult",
    "EssayResult",
    "HistoryInput",
    "HistoryRecord",
    "HistoryList",
    "ChatTurn",
    "ConversationSession",
]
