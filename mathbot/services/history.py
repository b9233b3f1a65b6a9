"""Bounded, persisted log of past solve sessions and their replay."""

import logging
from dataclasses import dataclass
from typing import List, Optional

from pydantic import ValidationError

from mathbot.config import settings
from mathbot.schemas.conversation import ConversationSession
from mathbot.schemas.history import HistoryList, HistoryRecord
from mathbot.schemas.solve import SolveRequest, SolveResult
from mathbot.services.conversation import derive_session
from mathbot.services.storage import HISTORY_KEY, KeyValueStorage

logger = logging.getLogger(__name__)

DEFAULT_HISTORY_LIMIT = 50
OPTION_SLOTS = 4


class HistoryStore:
    """
    Newest-first list of HistoryRecords, capped at ``limit`` entries.

    The persisted list is the source of truth: the bot and the Mini App
    each hold a store over the same storage, so every mutation re-reads it
    before changing and writing the whole list back. The cap is enforced
    in ``append`` so it holds at rest as well as on display.

    Read failures (StorageError) propagate; only a corrupt blob heals to
    an empty list.
    """

    def __init__(self, storage: KeyValueStorage, limit: int = DEFAULT_HISTORY_LIMIT):
        self.storage = storage
        self.limit = limit
        self._records: List[HistoryRecord] = []

    @classmethod
    async def load(
        cls,
        storage: KeyValueStorage,
        limit: Optional[int] = None,
    ) -> "HistoryStore":
        """Load persisted history; a corrupt blob is discarded and yields an empty store."""
        store = cls(storage, limit=limit or settings.history_limit or DEFAULT_HISTORY_LIMIT)
        await store.refresh()
        return store

    async def refresh(self) -> None:
        """Replace the in-memory list with what is currently persisted."""
        blob = await self.storage.get(HISTORY_KEY)
        if not blob:
            self._records = []
            return

        try:
            records = HistoryList.validate_json(blob)
        except (ValidationError, ValueError) as e:
            logger.error(f"Could not load history, discarding stored blob: {e}")
            await self.storage.remove(HISTORY_KEY)
            self._records = []
            return

        self._records = records[: self.limit]

    def list(self) -> List[HistoryRecord]:
        return list(self._records)

    def get(self, record_id: str) -> Optional[HistoryRecord]:
        for record in self._records:
            if record.id == record_id:
                return record
        return None

    def __len__(self) -> int:
        return len(self._records)

    async def append(self, record: HistoryRecord) -> None:
        """Prepend a record, silently dropping the oldest beyond the cap."""
        await self.refresh()
        self._records = [record, *self._records][: self.limit]
        await self._persist()

    async def remove(self, record_id: str) -> None:
        """Remove a record by id. Unknown ids are ignored."""
        await self.refresh()
        remaining = [r for r in self._records if r.id != record_id]
        if len(remaining) == len(self._records):
            return
        self._records = remaining
        await self._persist()

    async def clear(self) -> None:
        self._records = []
        await self._persist()

    async def _persist(self) -> None:
        await self.storage.set(HISTORY_KEY, HistoryList.dump_json(self._records).decode("utf-8"))


@dataclass
class SessionSnapshot:
    """Session state reconstructed from a history record."""

    request: SolveRequest
    result: SolveResult
    error: Optional[str]
    conversation: Optional[ConversationSession]


def pad_options(options: List[str], slots: int = OPTION_SLOTS) -> List[str]:
    """Pad or truncate options to exactly ``slots`` entries."""
    return (list(options) + [""] * slots)[:slots]


def restore_session(record: HistoryRecord, language: str) -> SessionSnapshot:
    """
    Rebuild the session for a stored record.

    The live transcript is never persisted, so the conversation (if the
    result is eligible for one) always starts empty.
    """
    request = SolveRequest(
        mode=record.mode,
        question_text=record.input.question_text,
        options=tuple(pad_options(record.input.options)),
        numeric_tolerance=settings.numeric_tolerance,
        image=record.image,
    )
    conversation = derive_session(
        record.result,
        record.input.question_text,
        record.input.options,
        language,
        has_image=record.image is not None,
    )
    return SessionSnapshot(
        request=request,
        result=record.result,
        error=record.result.fail_reason,
        conversation=conversation,
    )
