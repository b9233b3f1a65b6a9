"""Tests for the OpenRouter client."""

import json
from unittest.mock import AsyncMock

import pytest

from mathbot.schemas.conversation import ChatTurn
from mathbot.schemas.solve import ImageAttachment
from mathbot.services.exceptions import ConfigurationError, TransportError
from mathbot.services.openrouter import (
    STREAM_DONE,
    OpenRouterClient,
    _wire_messages,
    classify_status,
    parse_sse_line,
)
from mathbot.utils.prompts import PromptPayload


class FakeResponse:
    def __init__(self, status=200, body=None, lines=()):
        self.status = status
        self.body = body
        self.content = self._iter_lines(lines)

    @staticmethod
    async def _iter_lines(lines):
        for line in lines:
            yield line.encode("utf-8")

    async def json(self, content_type=None):
        return self.body

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc):
        return False


class FakeHttpSession:
    def __init__(self, response):
        self.response = response
        self.requests = []

    def post(self, url, json=None):
        self.requests.append((url, json))
        return self.response


def make_client(response):
    client = OpenRouterClient(api_key="test-key", model="test/model", base_url="https://example.test/v1/")
    http = FakeHttpSession(response)
    client._get_session = AsyncMock(return_value=http)
    return client, http


def sse(content):
    return "data: " + json.dumps({"choices": [{"delta": {"content": content}}]}) + "\n"


@pytest.mark.parametrize(
    "status,kind",
    [
        (401, TransportError.UNAUTHENTICATED),
        (403, TransportError.UNAUTHENTICATED),
        (429, TransportError.QUOTA),
        (500, TransportError.UNAVAILABLE),
        (503, TransportError.UNAVAILABLE),
        (408, TransportError.UNAVAILABLE),
        (400, TransportError.OTHER),
    ],
)
def test_classify_status(status, kind):
    assert classify_status(status) == kind


def test_parse_sse_line():
    assert parse_sse_line(sse("2+2")) == "2+2"
    assert parse_sse_line("data: [DONE]") is STREAM_DONE
    assert parse_sse_line("") is None
    assert parse_sse_line(": OPENROUTER PROCESSING") is None
    assert parse_sse_line('data: {"choices": []}') is None
    assert parse_sse_line('data: {"choices": ["oops"]}') is None
    assert parse_sse_line('data: {"choices": [{"delta": "oops"}]}') is None


def test_parse_sse_line_in_band_error():
    line = 'data: {"error": {"code": 429, "message": "Rate limited"}}'
    with pytest.raises(TransportError) as exc_info:
        parse_sse_line(line)
    assert exc_info.value.kind == TransportError.QUOTA
    assert exc_info.value.message == "Rate limited"


def test_wire_messages_map_roles():
    turns = [ChatTurn(role="user", text="q"), ChatTurn(role="model", text="a")]

    assert _wire_messages(turns, "policy") == [
        {"role": "system", "content": "policy"},
        {"role": "user", "content": "q"},
        {"role": "assistant", "content": "a"},
    ]


@pytest.mark.asyncio
async def test_missing_api_key_is_configuration_error():
    client = OpenRouterClient(api_key="")

    assert not client.is_configured
    with pytest.raises(ConfigurationError):
        await client.generate(PromptPayload(text="hi"))
    with pytest.raises(ConfigurationError):
        client.create_chat([], "policy")


@pytest.mark.asyncio
async def test_generate_returns_message_content():
    client, http = make_client(
        FakeResponse(body={"choices": [{"message": {"content": '{"answer": "4"}'}}]})
    )

    text = await client.generate(PromptPayload(text="solve"))

    assert text == '{"answer": "4"}'
    url, body = http.requests[0]
    assert url == "https://example.test/v1/chat/completions"
    assert body["model"] == "test/model"
    assert body["messages"] == [{"role": "user", "content": "solve"}]
    assert "stream" not in body


@pytest.mark.asyncio
async def test_generate_sends_image_parts():
    client, http = make_client(FakeResponse(body={"choices": [{"message": {"content": "{}"}}]}))

    await client.generate(PromptPayload(text="solve", image=ImageAttachment(data="aGk=")))

    content = http.requests[0][1]["messages"][0]["content"]
    assert content[0]["image_url"]["url"] == "data:image/jpeg;base64,aGk="
    assert content[1] == {"type": "text", "text": "solve"}


@pytest.mark.asyncio
async def test_generate_empty_choices_is_empty_text():
    client, _ = make_client(FakeResponse(body={"choices": []}))
    assert await client.generate(PromptPayload(text="x")) == ""


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "body",
    [
        {"choices": ["oops"]},
        {"choices": [{"message": "oops"}]},
        {"choices": [{"message": {"content": ["oops"]}}]},
        {"choices": "oops"},
    ],
)
async def test_generate_odd_choice_shapes_are_empty_text(body):
    client, _ = make_client(FakeResponse(body=body))
    assert await client.generate(PromptPayload(text="x")) == ""


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "status,kind",
    [(401, TransportError.UNAUTHENTICATED), (429, TransportError.QUOTA), (502, TransportError.UNAVAILABLE)],
)
async def test_generate_http_errors(status, kind):
    client, _ = make_client(FakeResponse(status=status, body={"error": {"message": "nope"}}))

    with pytest.raises(TransportError) as exc_info:
        await client.generate(PromptPayload(text="x"))

    assert exc_info.value.kind == kind
    assert exc_info.value.message == "nope"


@pytest.mark.asyncio
async def test_generate_error_object_in_ok_response():
    client, _ = make_client(FakeResponse(body={"error": {"code": 503, "message": "overloaded"}}))

    with pytest.raises(TransportError) as exc_info:
        await client.generate(PromptPayload(text="x"))

    assert exc_info.value.kind == TransportError.UNAVAILABLE


@pytest.mark.asyncio
async def test_chat_channel_streams_fragments():
    response = FakeResponse(lines=[": keep-alive\n", sse("2"), "\n", sse("+2"), sse("="), "data: [DONE]\n", sse("ignored")])
    client, http = make_client(response)

    channel = client.create_chat([ChatTurn(role="model", text="seed")], "policy")
    fragments = [f async for f in channel.send_streaming("why?")]

    assert fragments == ["2", "+2", "="]
    body = http.requests[0][1]
    assert body["stream"] is True
    assert body["messages"][-1] == {"role": "user", "content": "why?"}
    assert body["messages"][1] == {"role": "assistant", "content": "seed"}
