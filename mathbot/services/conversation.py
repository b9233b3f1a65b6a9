"""Follow-up conversation: derivation from a result and streamed asking."""

import logging
from typing import Awaitable, Callable, Optional, Protocol, Sequence

from mathbot.schemas.conversation import ChatTurn, ConversationSession
from mathbot.schemas.solve import Mode, SolveResult
from mathbot.services.exceptions import ConversationBusyError, TransportError
from mathbot.utils.prompts import chat_system_instruction

logger = logging.getLogger(__name__)

ERROR_LABELS = {
    "en": "Error",
    "ar": "خطأ",
    "ru": "Ошибка",
}

OnUpdate = Callable[[ChatTurn], Awaitable[None]]


class ChatCapability(Protocol):
    def create_chat(self, turns: Sequence[ChatTurn], system_instruction: str): ...


def error_label(language: str) -> str:
    return ERROR_LABELS.get(language, ERROR_LABELS["en"])


def derive_session(
    result: Optional[SolveResult],
    question_text: str,
    options: Sequence[str],
    language: str,
    has_image: bool = False,
) -> Optional[ConversationSession]:
    """
    Build a fresh follow-up conversation for a result, if it is eligible.

    Eligible means no fail_reason and a non-empty explanation. Used both
    right after a solve and when replaying a history record.
    """
    if result is None or result.failed or not result.explanation.strip():
        return None

    question = question_text.strip() or ("from an image" if has_image else "")
    if result.mode == Mode.MCQ:
        shown_options = ", ".join(opt.strip() for opt in options if opt.strip()) or "N/A"
    else:
        shown_options = "N/A"

    seed = [
        ChatTurn(
            role="user",
            text=f"The question was: {question}. The options were: {shown_options}",
        ),
        ChatTurn(
            role="model",
            text=f"The explanation for the answer is: {result.explanation}",
        ),
    ]
    return ConversationSession(
        seed_history=seed,
        system_instruction=chat_system_instruction(language),
        language=language,
    )


class FollowUpController:
    """Asks follow-up questions within a conversation, streaming the answer."""

    def __init__(self, client: ChatCapability):
        self.client = client

    async def ask(
        self,
        session: Optional[ConversationSession],
        question: str,
        on_update: Optional[OnUpdate] = None,
    ) -> Optional[ChatTurn]:
        """
        Append the question and stream the model's answer into the transcript.

        Returns the model turn, or None when there is no conversation or the
        question is blank.

        Raises:
            ConversationBusyError: another ask is in flight for this session
            ConfigurationError: no remote capability configured
        """
        if session is None:
            return None

        question = question.strip()
        if not question:
            return None

        if session.in_flight:
            raise ConversationBusyError("A follow-up answer is still being generated")

        session.in_flight = True
        try:
            # Opening the channel is local; a failure here must leave the transcript untouched
            channel = self.client.create_chat(session.context_turns(), session.system_instruction)
            session.live_transcript.append(ChatTurn(role="user", text=question))

            turn = ChatTurn(role="model", text="")
            session.live_transcript.append(turn)

            try:
                async for fragment in channel.send_streaming(question):
                    turn.text += fragment
                    if on_update:
                        await on_update(turn)
            except TransportError as e:
                logger.error(f"Follow-up stream failed ({e.kind}): {e.message}")
                annotation = f"{error_label(session.language)}: {e.message}"
                turn.text = f"{turn.text}\n\n{annotation}" if turn.text else annotation
                turn.error = True
                if on_update:
                    await on_update(turn)

            return turn
        finally:
            session.in_flight = False
