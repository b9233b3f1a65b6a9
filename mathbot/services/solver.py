"""Solve orchestration: prompt, remote call, parse, persist, seed follow-up."""

import logging
from dataclasses import dataclass
from typing import Optional, Protocol

from mathbot.schemas.conversation import ConversationSession
from mathbot.schemas.history import HistoryInput, HistoryRecord
from mathbot.schemas.solve import Mode, SolveRequest, SolveResult
from mathbot.services.conversation import derive_session
from mathbot.services.exceptions import TransportError
from mathbot.services.history import HistoryStore
from mathbot.services.response_parser import coerce_result, parse_response
from mathbot.utils.prompts import PromptPayload, build_prompt

logger = logging.getLogger(__name__)


class SolveCapability(Protocol):
    async def generate(self, payload: PromptPayload) -> str: ...


@dataclass
class SolveOutcome:
    """Everything a single solve attempt produced."""

    request: SolveRequest
    result: SolveResult
    record: HistoryRecord
    conversation: Optional[ConversationSession]


class SolveOrchestrator:
    """Runs one end-to-end solve attempt. No retries."""

    def __init__(self, client: SolveCapability, history: HistoryStore):
        self.client = client
        self.history = history

    async def solve(self, request: SolveRequest, language: str) -> SolveOutcome:
        """
        Solve a request.

        Transport failures are not written to history. Any result object,
        including a malformed-response or domain failure, is.

        Raises:
            ConfigurationError: no remote capability configured
            TransportError: the remote call failed
        """
        normalized = request.normalized()
        payload = build_prompt(normalized, language)

        try:
            raw_text = await self.client.generate(payload)
        except TransportError as e:
            logger.error(f"Solve failed ({e.kind}): {e.message}")
            raise

        result = coerce_result(normalized.mode, parse_response(raw_text))
        if result.failed:
            logger.info(f"Solve returned failure: {result.fail_reason}")

        record = HistoryRecord(
            mode=normalized.mode,
            input=HistoryInput(
                question_text=request.question_text,
                options=list(request.options) if request.mode == Mode.MCQ else [],
            ),
            image=request.image,
            result=result,
        )
        await self.history.append(record)

        conversation = derive_session(
            result,
            normalized.question_text,
            normalized.options,
            language,
            has_image=normalized.image is not None,
        )

        return SolveOutcome(
            request=normalized,
            result=result,
            record=record,
            conversation=conversation,
        )
