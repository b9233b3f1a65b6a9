"""Follow-up conversation schemas."""

from typing import List, Literal

from pydantic import BaseModel, Field

Role = Literal["user", "model"]


class ChatTurn(BaseModel):
    """A single message in a conversation."""

    role: Role
    text: str = ""
    # Set when the turn was finalized with an error annotation
    error: bool = False


class ConversationSession(BaseModel):
    """Scoped chat seeded with the original question and its explanation.

    ``seed_history`` primes the model and is never shown; only turns in
    ``live_transcript`` are displayed.
    """

    seed_history: List[ChatTurn]
    live_transcript: List[ChatTurn] = Field(default_factory=list)
    system_instruction: str
    language: str = "en"

    # Transient single-flight marker, never serialized
    in_flight: bool = Field(default=False, exclude=True)

    def context_turns(self) -> List[ChatTurn]:
        """Seed plus prior live turns, skipping failed exchanges."""
        turns = list(self.seed_history)
        live = self.live_transcript
        for i, turn in enumerate(live):
            if turn.error:
                continue
            nxt = live[i + 1] if i + 1 < len(live) else None
            if turn.role == "user" and nxt is not None and nxt.error:
                continue
            turns.append(turn)
        return turns
