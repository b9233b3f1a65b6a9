"""Current-session state for one chat: latest submission wins."""

import logging
from typing import Optional

from mathbot.schemas.conversation import ChatTurn, ConversationSession
from mathbot.schemas.solve import SolveRequest, SolveResult
from mathbot.services.conversation import FollowUpController, OnUpdate
from mathbot.services.exceptions import TransportError
from mathbot.services.history import HistoryStore, SessionSnapshot, restore_session
from mathbot.services.solver import SolveOrchestrator, SolveOutcome

logger = logging.getLogger(__name__)


class SessionController:
    """
    Owns the request, result, error and conversation shown to one user.

    Each submission or history load bumps a generation counter; a solve
    that completes after a newer generation started is discarded instead
    of overwriting the newer state.
    """

    def __init__(self, client, history: HistoryStore):
        self.history = history
        self.orchestrator = SolveOrchestrator(client, history)
        self.followups = FollowUpController(client)

        self.request: Optional[SolveRequest] = None
        self.result: Optional[SolveResult] = None
        self.error: Optional[str] = None
        self.conversation: Optional[ConversationSession] = None
        self.is_loading = False
        self._generation = 0

    @property
    def generation(self) -> int:
        return self._generation

    def _start_generation(self) -> int:
        self._generation += 1
        self.result = None
        self.error = None
        self.conversation = None
        self.is_loading = False
        return self._generation

    def reset(self) -> None:
        """Drop the current session; in-flight solves become stale."""
        self._start_generation()
        self.request = None

    async def submit(self, request: SolveRequest, language: str) -> Optional[SolveOutcome]:
        """
        Solve ``request`` and make it the current session.

        Prior output is cleared before the remote call starts. Returns the
        outcome, or None if the solve failed in transport or went stale.

        Raises:
            ConfigurationError: no remote capability configured
        """
        generation = self._start_generation()
        self.request = request
        self.is_loading = True

        try:
            outcome = await self.orchestrator.solve(request, language)
        except TransportError as e:
            if generation == self._generation:
                self.error = e.message
            return None
        finally:
            if generation == self._generation:
                self.is_loading = False

        if generation != self._generation:
            logger.debug(f"Discarding stale solve (generation {generation} < {self._generation})")
            return None

        self.result = outcome.result
        self.error = outcome.result.fail_reason
        self.conversation = outcome.conversation
        return outcome

    def load_record(self, record_id: str, language: str) -> Optional[SessionSnapshot]:
        """Replace the current session with a history record. Unknown ids return None."""
        record = self.history.get(record_id)
        if record is None:
            return None

        snapshot = restore_session(record, language)
        self._start_generation()
        self.request = snapshot.request
        self.result = snapshot.result
        self.error = snapshot.error
        self.conversation = snapshot.conversation
        return snapshot

    async def ask(self, question: str, on_update: Optional[OnUpdate] = None) -> Optional[ChatTurn]:
        """Ask a follow-up question in the current conversation, if any."""
        return await self.followups.ask(self.conversation, question, on_update=on_update)
