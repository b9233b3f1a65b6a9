"""Decode raw model output into structured solve results."""

import json
import logging
import re
from dataclasses import dataclass
from typing import Any, Dict, Optional, Union

from pydantic import ValidationError

from mathbot.schemas.solve import RESULT_TYPES, Mode, SolveResult
from mathbot.services.exceptions import MALFORMED_RESPONSE_REASON

logger = logging.getLogger(__name__)

_FENCE_OPEN = re.compile(r"^\s*```[A-Za-z]*[ \t]*\n?")
_FENCE_CLOSE = re.compile(r"\n?```\s*$")


@dataclass(frozen=True)
class ParseFailure:
    """Decode failure; carries the fixed malformed-response reason."""

    fail_reason: str = MALFORMED_RESPONSE_REASON


def strip_code_fence(text: str) -> str:
    """Remove one optional ```json ... ``` wrapper."""
    text = _FENCE_OPEN.sub("", text, count=1)
    text = _FENCE_CLOSE.sub("", text, count=1)
    return text.strip()


def parse_response(raw_text: Optional[str]) -> Union[Dict[str, Any], ParseFailure]:
    """Decode model output into a JSON object. Never raises."""
    if not raw_text or not raw_text.strip():
        logger.warning("Empty response from model")
        return ParseFailure()

    try:
        payload = json.loads(strip_code_fence(raw_text))
    except (ValueError, TypeError):
        logger.warning(f"Failed to parse JSON response: {raw_text[:200]!r}")
        return ParseFailure()

    if not isinstance(payload, dict):
        logger.warning(f"Response is not a JSON object: {type(payload).__name__}")
        return ParseFailure()

    return payload


def coerce_result(mode: Mode, parsed: Union[Dict[str, Any], ParseFailure]) -> SolveResult:
    """
    Back-fill a decoded payload into the mode's full result type.

    Missing fields get the mode's defaults (answer_index -1, empty strings),
    so failure-shaped objects can be handled like any other result.
    """
    result_type = RESULT_TYPES[mode]

    if isinstance(parsed, ParseFailure):
        return result_type(fail_reason=parsed.fail_reason)

    try:
        return result_type.model_validate({**parsed, "mode": mode.value})
    except ValidationError as e:
        logger.warning(f"Response does not match {mode.value} schema: {e.error_count()} errors")
        return result_type(fail_reason=MALFORMED_RESPONSE_REASON)
