"""Tests for follow-up conversation derivation and streaming."""

import asyncio
from unittest.mock import MagicMock

import pytest

from mathbot.schemas.conversation import ChatTurn
from mathbot.schemas.solve import EssayResult, McqResult
from mathbot.services.conversation import FollowUpController, derive_session
from mathbot.services.exceptions import ConfigurationError, ConversationBusyError, TransportError
from mathbot.utils.prompts import chat_system_instruction
from tests.conftest import FakeClient, transport_error


def test_derive_session_requires_explanation():
    assert derive_session(None, "q", [], "en") is None
    assert derive_session(McqResult(answer_index=0, explanation="  "), "q", ["a"], "en") is None
    assert derive_session(
        McqResult(fail_reason="no match", explanation="tried"), "q", ["a"], "en"
    ) is None


def test_derive_session_seed_and_policy(mcq_result):
    session = derive_session(mcq_result, "2+2=?", ["3", " ", "4"], "ar")

    assert [t.role for t in session.seed_history] == ["user", "model"]
    assert session.seed_history[0].text == "The question was: 2+2=?. The options were: 3, 4"
    assert session.system_instruction == chat_system_instruction("ar")
    assert session.language == "ar"
    assert not session.in_flight


def test_derive_session_without_options():
    session = derive_session(EssayResult(answer="3", explanation="e"), "q", [], "en")
    assert session.seed_history[0].text == "The question was: q. The options were: N/A"


@pytest.mark.asyncio
async def test_ask_streams_fragments_in_order(session):
    client = FakeClient(fragments=["2", "+2", "="])
    seen = []

    async def on_update(turn):
        seen.append(turn.text)

    turn = await FollowUpController(client).ask(session, "  why?  ", on_update=on_update)

    assert seen == ["2", "2+2", "2+2="]
    assert turn.text == "2+2="
    assert not turn.error
    assert [(t.role, t.text) for t in session.live_transcript] == [
        ("user", "why?"),
        ("model", "2+2="),
    ]
    assert client.sent == ["why?"]
    assert not session.in_flight


@pytest.mark.asyncio
async def test_context_is_seed_plus_prior_turns(session):
    client = FakeClient(fragments=["ok"])
    controller = FollowUpController(client)

    await controller.ask(session, "first")
    await controller.ask(session, "second")

    first_context, second_context = client.channels[0].turns, client.channels[1].turns
    assert first_context == session.seed_history
    assert [t.text for t in second_context[2:]] == ["first", "ok"]
    assert client.channels[1].system_instruction == "Only explain the math."


@pytest.mark.asyncio
async def test_blank_question_is_ignored(session):
    client = FakeClient(fragments=["x"])

    assert await FollowUpController(client).ask(session, "   ") is None
    assert session.live_transcript == []
    assert client.channels == []


@pytest.mark.asyncio
async def test_no_session_is_ignored():
    assert await FollowUpController(FakeClient()).ask(None, "why?") is None


@pytest.mark.asyncio
async def test_stream_error_keeps_partial_text(session):
    client = FakeClient(
        fragments=["The sum"],
        stream_error=transport_error(TransportError.UNAVAILABLE, "connection lost"),
    )
    updates = []

    async def on_update(turn):
        updates.append(turn.text)

    turn = await FollowUpController(client).ask(session, "why?", on_update=on_update)

    assert turn.error
    assert turn.text == "The sum\n\nError: connection lost"
    assert updates[-1] == turn.text
    assert not session.in_flight


@pytest.mark.asyncio
async def test_stream_error_label_follows_language(session):
    session.language = "ru"
    client = FakeClient(stream_error=transport_error(message="down"))

    turn = await FollowUpController(client).ask(session, "почему?")

    assert turn.text == "Ошибка: down"


@pytest.mark.asyncio
async def test_failed_exchange_is_left_out_of_context(session):
    client = FakeClient(stream_error=transport_error(message="down"))
    controller = FollowUpController(client)
    await controller.ask(session, "lost question")

    client.stream_error = None
    client.fragments = ["answer"]
    await controller.ask(session, "retry")

    assert client.channels[1].turns == session.seed_history
    assert len(session.live_transcript) == 4


@pytest.mark.asyncio
async def test_concurrent_ask_is_rejected(session):
    client = FakeClient(fragments=["a"])
    client.stream_gate = asyncio.Event()
    controller = FollowUpController(client)

    first = asyncio.create_task(controller.ask(session, "one"))
    await asyncio.sleep(0)
    assert session.in_flight

    with pytest.raises(ConversationBusyError):
        await controller.ask(session, "two")
    assert [t.text for t in session.live_transcript if t.role == "user"] == ["one"]

    client.stream_gate.set()
    turn = await first
    assert turn.text == "a"
    assert not session.in_flight


def test_in_flight_is_not_serialized(session):
    session.in_flight = True
    assert "in_flight" not in session.model_dump()
    assert ChatTurn(role="model").text == ""


@pytest.mark.asyncio
async def test_unconfigured_client_leaves_transcript_untouched(session):
    client = FakeClient()
    client.create_chat = MagicMock(side_effect=ConfigurationError("OPENROUTER_API_KEY is not set"))

    with pytest.raises(ConfigurationError):
        await FollowUpController(client).ask(session, "why?")

    assert session.live_transcript == []
    assert not session.in_flight
    assert session.context_turns() == session.seed_history
