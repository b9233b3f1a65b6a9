"""Solve request and result schemas."""

import enum
from typing import Annotated, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator


class Mode(str, enum.Enum):
    """Solving variants."""

    MCQ = "mcq"
    ESSAY = "essay"


class ImageAttachment(BaseModel):
    """Base64-encoded image supplied with a question."""

    model_config = ConfigDict(frozen=True)

    data: str
    mime_type: str = "image/jpeg"

    @property
    def data_url(self) -> str:
        return f"data:{self.mime_type};base64,{self.data}"


class SolveRequest(BaseModel):
    """A submitted question. Immutable once built."""

    model_config = ConfigDict(frozen=True)

    mode: Mode
    question_text: str = ""
    options: tuple[str, ...] = ()
    numeric_tolerance: float = 0.01
    image: Optional[ImageAttachment] = None

    def normalized(self) -> "SolveRequest":
        """Return a copy with blank MCQ options dropped; essay requests carry no options."""
        if self.mode == Mode.ESSAY:
            options: tuple[str, ...] = ()
        else:
            options = tuple(opt.strip() for opt in self.options if opt.strip())
        return self.model_copy(update={"options": options})


class _ResultBase(BaseModel):
    explanation: str = ""
    fail_reason: Optional[str] = None

    @field_validator("fail_reason", mode="before")
    @classmethod
    def blank_fail_reason_is_absent(cls, v):
        if v is None:
            return None
        v = str(v)
        return v if v.strip() else None

    @field_validator("explanation", mode="before")
    @classmethod
    def null_explanation_is_empty(cls, v):
        return "" if v is None else v

    @property
    def failed(self) -> bool:
        return self.fail_reason is not None


class McqResult(_ResultBase):
    """Multiple-choice result; ``answer_index == -1`` means undetermined."""

    mode: Literal["mcq"] = "mcq"
    answer_index: int = -1
    answer_text: str = ""
    normalized_expression: str = ""
    value: str = ""
    confidence: float = 0.0

    @field_validator("value", "answer_text", "normalized_expression", mode="before")
    @classmethod
    def stringify(cls, v):
        return "" if v is None else str(v)

    @field_validator("confidence", mode="before")
    @classmethod
    def clamp_confidence(cls, v):
        if v is None:
            return 0.0
        return min(max(float(v), 0.0), 1.0)

    @property
    def answer_bearing(self) -> bool:
        return not self.failed and self.answer_index >= 0


class EssayResult(_ResultBase):
    """Free-form result."""

    mode: Literal["essay"] = "essay"
    answer: str = ""

    @field_validator("answer", mode="before")
    @classmethod
    def null_answer_is_empty(cls, v):
        return "" if v is None else str(v)

    @property
    def answer_bearing(self) -> bool:
        return not self.failed and bool(self.answer.strip())


SolveResult = Annotated[Union[McqResult, EssayResult], Field(discriminator="mode")]

RESULT_TYPES: dict[Mode, type[_ResultBase]] = {
    Mode.MCQ: McqResult,
    Mode.ESSAY: EssayResult,
}
