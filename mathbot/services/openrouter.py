"""OpenRouter API client: one-shot generation and streaming chat."""

import asyncio
import json
import logging
import time
from typing import Any, AsyncIterator, Dict, List, Optional, Sequence, Union

import aiohttp
from aiohttp import ClientTimeout

from mathbot.config import settings
from mathbot.schemas.conversation import ChatTurn
from mathbot.services.exceptions import ConfigurationError, TransportError
from mathbot.utils.prompts import PromptPayload

logger = logging.getLogger(__name__)

# Sentinel returned by parse_sse_line for the terminating "[DONE]" event
STREAM_DONE = object()

_WIRE_ROLES = {"user": "user", "model": "assistant"}


def classify_status(status: int) -> str:
    """Map an HTTP status to a TransportError kind."""
    if status in (401, 403):
        return TransportError.UNAUTHENTICATED
    if status == 429:
        return TransportError.QUOTA
    if status >= 500 or status == 408:
        return TransportError.UNAVAILABLE
    return TransportError.OTHER


def _error_message(body: Any, fallback: str) -> str:
    """Extract a human-readable message from an OpenRouter error body."""
    if isinstance(body, dict):
        error = body.get("error")
        if isinstance(error, dict) and error.get("message"):
            return str(error["message"])
        if isinstance(error, str) and error:
            return error
    return fallback


def parse_sse_line(line: str) -> Union[str, object, None]:
    """
    Decode one server-sent-events line from a streaming completion.

    Returns the delta text, STREAM_DONE for the final event, or None for
    blank lines, comments and keep-alives.

    Raises:
        TransportError: the stream carried an in-band error object.
    """
    line = line.strip()
    if not line or line.startswith(":") or not line.startswith("data:"):
        return None

    data = line[len("data:"):].strip()
    if data == "[DONE]":
        return STREAM_DONE

    try:
        event = json.loads(data)
    except ValueError:
        logger.debug(f"Skipping undecodable stream event: {data[:100]!r}")
        return None
    if not isinstance(event, dict):
        return None

    if "error" in event:
        code = event["error"].get("code") if isinstance(event["error"], dict) else None
        kind = classify_status(code) if isinstance(code, int) else TransportError.OTHER
        raise TransportError(kind, _error_message(event, "Stream interrupted"))

    choices = event.get("choices") or []
    first = choices[0] if isinstance(choices, list) and choices else None
    delta = first.get("delta") if isinstance(first, dict) else None
    content = delta.get("content") if isinstance(delta, dict) else None
    return content if isinstance(content, str) and content else None


def _wire_messages(
    turns: Sequence[ChatTurn],
    system_instruction: Optional[str] = None,
) -> List[Dict[str, Any]]:
    messages: List[Dict[str, Any]] = []
    if system_instruction:
        messages.append({"role": "system", "content": system_instruction})
    for turn in turns:
        messages.append({"role": _WIRE_ROLES[turn.role], "content": turn.text})
    return messages


class ChatChannel:
    """Streaming chat scoped to a fixed history and system instruction."""

    def __init__(
        self,
        client: "OpenRouterClient",
        turns: Sequence[ChatTurn],
        system_instruction: str,
    ):
        self._client = client
        self._messages = _wire_messages(turns, system_instruction)

    async def send_streaming(self, message: str) -> AsyncIterator[str]:
        """Send a user message and yield response fragments in arrival order."""
        messages = self._messages + [{"role": "user", "content": message}]
        async for fragment in self._client.stream_completion(messages):
            yield fragment


class OpenRouterClient:
    """Async client for the OpenRouter chat-completions API. Single attempt, no retries."""

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        max_tokens: Optional[int] = None,
        temperature: Optional[float] = None,
        timeout: Optional[int] = None,
        base_url: Optional[str] = None,
    ):
        self.api_key = api_key if api_key is not None else settings.openrouter_api_key
        self.model = model or settings.openrouter_model
        self.max_tokens = max_tokens or settings.openrouter_max_tokens
        self.temperature = (
            temperature if temperature is not None else settings.openrouter_temperature
        )
        self.timeout = ClientTimeout(total=timeout or settings.openrouter_timeout)
        self.base_url = (base_url or settings.openrouter_base_url).rstrip("/")
        self._session: Optional[aiohttp.ClientSession] = None

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key)

    def _ensure_configured(self) -> None:
        if not self.is_configured:
            raise ConfigurationError("OPENROUTER_API_KEY is not set")

    async def _get_session(self) -> aiohttp.ClientSession:
        """Get or create aiohttp session."""
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(
                timeout=self.timeout,
                headers={
                    "Authorization": f"Bearer {self.api_key}",
                    "Content-Type": "application/json",
                    "X-Title": "MathBot",
                },
            )
        return self._session

    async def close(self) -> None:
        """Close the aiohttp session."""
        if self._session and not self._session.closed:
            await self._session.close()

    def _payload(self, messages: List[Dict[str, Any]], stream: bool = False) -> Dict[str, Any]:
        payload = {
            "model": self.model,
            "messages": messages,
            "max_tokens": self.max_tokens,
            "temperature": self.temperature,
        }
        if stream:
            payload["stream"] = True
        return payload

    async def _raise_for_status(self, resp: aiohttp.ClientResponse) -> None:
        if resp.status < 400:
            return
        try:
            body = await resp.json(content_type=None)
        except (aiohttp.ClientError, ValueError):
            body = None
        message = _error_message(body, f"AI service returned HTTP {resp.status}")
        logger.warning(f"OpenRouter error {resp.status}: {message}")
        raise TransportError(classify_status(resp.status), message)

    async def generate(self, payload: PromptPayload) -> str:
        """
        Send a single prompt and return the raw model text.

        Raises:
            ConfigurationError: no API key configured
            TransportError: network, auth or quota failure
        """
        self._ensure_configured()
        session = await self._get_session()
        start_time = time.time()

        request = self._payload([{"role": "user", "content": payload.parts()}])

        try:
            async with session.post(f"{self.base_url}/chat/completions", json=request) as resp:
                await self._raise_for_status(resp)
                data = await resp.json(content_type=None)
        except aiohttp.ClientError as e:
            logger.warning(f"Connection error: {e}")
            raise TransportError(TransportError.UNAVAILABLE, str(e) or None) from e
        except asyncio.TimeoutError as e:
            logger.warning("Request timed out")
            raise TransportError(TransportError.UNAVAILABLE, "The AI service timed out") from e
        except ValueError as e:
            raise TransportError(TransportError.OTHER, "The AI service returned an unreadable body") from e

        if not isinstance(data, dict):
            data = {}
        if "error" in data:
            code = data["error"].get("code") if isinstance(data["error"], dict) else None
            kind = classify_status(code) if isinstance(code, int) else TransportError.OTHER
            raise TransportError(kind, _error_message(data, "AI service error"))

        response_time_ms = int((time.time() - start_time) * 1000)
        choices = data.get("choices") or []
        first = choices[0] if isinstance(choices, list) and choices else None
        message = first.get("message") if isinstance(first, dict) else None
        content = message.get("content") if isinstance(message, dict) else None
        logger.info(f"Completion from {self.model} in {response_time_ms}ms")

        return content if isinstance(content, str) else ""

    def create_chat(self, turns: Sequence[ChatTurn], system_instruction: str) -> ChatChannel:
        """Open a chat channel primed with ``turns``."""
        self._ensure_configured()
        return ChatChannel(self, turns, system_instruction)

    async def stream_completion(self, messages: List[Dict[str, Any]]) -> AsyncIterator[str]:
        """Yield content fragments of a streaming completion."""
        self._ensure_configured()
        session = await self._get_session()

        try:
            async with session.post(
                f"{self.base_url}/chat/completions",
                json=self._payload(messages, stream=True),
            ) as resp:
                await self._raise_for_status(resp)
                async for raw_line in resp.content:
                    piece = parse_sse_line(raw_line.decode("utf-8", errors="replace"))
                    if piece is STREAM_DONE:
                        break
                    if piece:
                        yield piece
        except aiohttp.ClientError as e:
            logger.warning(f"Stream connection error: {e}")
            raise TransportError(TransportError.UNAVAILABLE, str(e) or None) from e
        except asyncio.TimeoutError as e:
            logger.warning("Stream timed out")
            raise TransportError(TransportError.UNAVAILABLE, "The AI service timed out") from e


# Global client instance
openrouter_client = OpenRouterClient()
