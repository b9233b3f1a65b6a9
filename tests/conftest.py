"""Shared fakes for the remote capability and the key/value store."""

import asyncio
from typing import Dict, List, Optional

import pytest

from mathbot.schemas.conversation import ConversationSession, ChatTurn
from mathbot.schemas.solve import McqResult, Mode, SolveRequest
from mathbot.services.exceptions import StorageError, TransportError
from mathbot.services.history import HistoryStore


class MemoryKeyValueStorage:
    """Dict-backed KeyValueStorage."""

    def __init__(self, data: Optional[Dict[str, str]] = None):
        self.data = dict(data or {})
        self.writes = 0

    async def get(self, key):
        return self.data.get(key)

    async def set(self, key, value):
        self.writes += 1
        self.data[key] = value

    async def remove(self, key):
        self.data.pop(key, None)


class UnreadableKeyValueStorage(MemoryKeyValueStorage):
    """Storage whose reads fail the way a database outage does."""

    async def get(self, key):
        raise StorageError(f"Could not read {key}")


class FakeChannel:
    def __init__(self, client, turns, system_instruction):
        self.client = client
        self.turns = list(turns)
        self.system_instruction = system_instruction

    async def send_streaming(self, message):
        self.client.sent.append(message)
        if self.client.stream_gate is not None:
            await self.client.stream_gate.wait()
        for fragment in self.client.fragments:
            yield fragment
        if self.client.stream_error is not None:
            raise self.client.stream_error


class FakeClient:
    """
    Scripted remote capability.

    ``responses`` are returned by successive ``generate`` calls; an
    exception in the list is raised instead.
    """

    def __init__(
        self,
        responses: Optional[List] = None,
        fragments: Optional[List[str]] = None,
        stream_error: Optional[Exception] = None,
    ):
        self.responses = list(responses or [])
        self.fragments = list(fragments or [])
        self.stream_error = stream_error
        self.stream_gate: Optional[asyncio.Event] = None
        self.payloads = []
        self.channels: List[FakeChannel] = []
        self.sent: List[str] = []

    async def generate(self, payload):
        self.payloads.append(payload)
        response = self.responses.pop(0)
        if isinstance(response, BaseException):
            raise response
        return response

    def create_chat(self, turns, system_instruction):
        channel = FakeChannel(self, turns, system_instruction)
        self.channels.append(channel)
        return channel


MCQ_OK = (
    '```json\n{"answer_index": 1, "answer_text": "4", "normalized_expression": "2+2", '
    '"value": 4, "confidence": 0.95, "explanation": "Add two and two."}\n```'
)
ESSAY_OK = '{"answer": "x = 3", "explanation": "Subtract 2 from both sides."}'


@pytest.fixture
def storage():
    return MemoryKeyValueStorage()


@pytest.fixture
def history(storage):
    return HistoryStore(storage, limit=50)


@pytest.fixture
def mcq_request():
    return SolveRequest(mode=Mode.MCQ, question_text="2+2=?", options=("3", "4", "", "5"))


@pytest.fixture
def essay_request():
    return SolveRequest(mode=Mode.ESSAY, question_text="Solve x + 2 = 5")


@pytest.fixture
def session():
    return ConversationSession(
        seed_history=[
            ChatTurn(role="user", text="The question was: 2+2. The options were: 3, 4"),
            ChatTurn(role="model", text="The explanation for the answer is: add them"),
        ],
        system_instruction="Only explain the math.",
    )


@pytest.fixture
def mcq_result():
    return McqResult(answer_index=1, answer_text="4", value="4", confidence=0.9, explanation="2+2 is 4")


def transport_error(kind=TransportError.UNAVAILABLE, message="Service down"):
    return TransportError(kind, message)
