"""History schemas for Mini App API."""

from datetime import datetime
from typing import List

from pydantic import BaseModel

from mathbot.schemas.history import HistoryRecord
from mathbot.schemas.solve import Mode, SolveResult


class HistoryItemResponse(BaseModel):
    """History list entry; the image itself is only sent with the full record."""

    id: str
    mode: Mode
    question_text: str
    options: List[str]
    has_image: bool
    result: SolveResult
    created_at: datetime

    @classmethod
    def from_record(cls, record: HistoryRecord) -> "HistoryItemResponse":
        return cls(
            id=record.id,
            mode=record.mode,
            question_text=record.input.question_text,
            options=list(record.input.options),
            has_image=record.image is not None,
            result=record.result,
            created_at=record.created_at,
        )


class HistoryListResponse(BaseModel):
    """History list, newest first."""

    items: List[HistoryItemResponse]
    total: int
