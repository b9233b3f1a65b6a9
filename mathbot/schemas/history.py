"""History record schemas."""

import secrets
import time
from datetime import datetime, timezone
from typing import List, Optional

from pydantic import BaseModel, Field, TypeAdapter

from mathbot.schemas.solve import ImageAttachment, Mode, SolveResult


def new_record_id() -> str:
    """Unique id derived from the current time plus random bits."""
    return f"{int(time.time() * 1000)}-{secrets.token_hex(4)}"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class HistoryInput(BaseModel):
    """Snapshot of the question as the user entered it."""

    question_text: str = ""
    options: List[str] = Field(default_factory=list)


class HistoryRecord(BaseModel):
    """One past solve attempt that produced a result object."""

    id: str = Field(default_factory=new_record_id)
    mode: Mode
    input: HistoryInput
    image: Optional[ImageAttachment] = None
    result: SolveResult
    created_at: datetime = Field(default_factory=_utcnow)


HistoryList = TypeAdapter(List[HistoryRecord])
