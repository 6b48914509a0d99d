"""
Chat-completion client for OpenAI-compatible endpoints.

Sends edited messages from a parsed request to a live API, either as a
single request or as a server-sent-events stream.
"""

import asyncio
import json
import logging
import time
from dataclasses import dataclass, field
from typing import Any, AsyncIterator, Dict, List, Optional, Sequence

import httpx

from .config_manager import TesterConfig
from .exceptions import ApiCallError, ApiTimeoutError
from .messages import MessageLike, as_message

logger = logging.getLogger(__name__)

# Returned by _parse_event for the final "data: [DONE]" line
STREAM_DONE = object()

STATUS_DESCRIPTIONS = {
    400: "Bad request",
    401: "Authentication failed: the API key is invalid or expired",
    403: "Access denied",
    404: "API endpoint not found",
    429: "Rate limit exceeded",
    500: "Internal server error",
    502: "Bad gateway",
    503: "Service unavailable",
}


@dataclass
class CompletionResult:
    """Final result of a non-streamed completion"""
    text: str
    finish_reason: Optional[str] = None
    usage: Dict[str, Any] = field(default_factory=dict)
    duration: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            'text': self.text,
            'finish_reason': self.finish_reason,
            'usage': self.usage,
            'duration': self.duration,
        }


def prepare_messages(messages: Sequence[MessageLike]) -> List[Dict[str, Any]]:
    """Convert messages to request form, dropping empty system messages."""
    prepared = []
    for raw in messages:
        message = as_message(raw)
        if message.role == 'system' and not message.text.strip():
            continue
        prepared.append({'role': message.role, 'content': message.text})
    return prepared


def describe_error(status_code: int, body: str) -> str:
    """Human-readable message for an error response.

    Prefers the provider's own error message from the JSON body.
    """
    detail = None
    try:
        data = json.loads(body)
    except (json.JSONDecodeError, TypeError):
        data = None

    if isinstance(data, dict):
        error = data.get('error')
        if isinstance(error, str):
            detail = error
        elif isinstance(error, dict) and isinstance(error.get('message'), str):
            detail = error['message']

    description = STATUS_DESCRIPTIONS.get(status_code, "API call failed")
    if detail:
        return f"{description} ({status_code}): {detail}"
    return f"{description} ({status_code})"


class ChatCompletionClient:
    """Async client for /chat/completions.

    Args:
        config: Endpoint, key and sampling settings.
        transport: Optional httpx transport, used by tests.
    """

    def __init__(self, config: TesterConfig, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.config = config
        self._transport = transport

    @property
    def endpoint(self) -> str:
        return f"{self.config.base_url.rstrip('/')}/chat/completions"

    def _headers(self) -> Dict[str, str]:
        return {
            'Authorization': f"Bearer {self.config.api_key}",
            'Content-Type': 'application/json',
        }

    def _payload(self, messages: Sequence[MessageLike], stream: bool) -> Dict[str, Any]:
        return {
            'model': self.config.model,
            'messages': prepare_messages(messages),
            'temperature': self.config.temperature,
            'max_tokens': self.config.max_tokens,
            'stream': stream,
        }

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=self.config.timeout, transport=self._transport)

    async def complete(self, messages: Sequence[MessageLike]) -> CompletionResult:
        """Send messages and wait for the whole completion."""
        self.config.validate()
        start = time.monotonic()

        async with self._client() as client:
            try:
                response = await client.post(
                    self.endpoint, headers=self._headers(), json=self._payload(messages, False)
                )
            except httpx.TimeoutException as e:
                raise ApiTimeoutError(f"Request timed out: {e}") from e

        if response.status_code >= 400:
            raise ApiCallError(
                describe_error(response.status_code, response.text),
                status_code=response.status_code,
                body=response.text,
            )

        try:
            data = response.json()
            choice = data['choices'][0]
        except (ValueError, KeyError, IndexError, TypeError) as e:
            raise ApiCallError(f"Could not parse completion response: {e}", body=response.text) from e

        message = choice.get('message') or {}
        return CompletionResult(
            text=message.get('content') or '',
            finish_reason=choice.get('finish_reason'),
            usage=data.get('usage') or {},
            duration=time.monotonic() - start,
        )

    async def stream(
        self,
        messages: Sequence[MessageLike],
        cancel_event: Optional[asyncio.Event] = None,
    ) -> AsyncIterator[str]:
        """
        Send messages and yield content deltas as they arrive.

        Args:
            messages: Messages to send
            cancel_event: Stops the stream when set

        Yields:
            Text fragments of the assistant reply
        """
        self.config.validate()

        async with self._client() as client:
            try:
                async with client.stream(
                    'POST', self.endpoint, headers=self._headers(), json=self._payload(messages, True)
                ) as response:
                    if response.status_code >= 400:
                        body = (await response.aread()).decode('utf-8', errors='replace')
                        raise ApiCallError(
                            describe_error(response.status_code, body),
                            status_code=response.status_code,
                            body=body,
                        )

                    async for line in response.aiter_lines():
                        if cancel_event is not None and cancel_event.is_set():
                            logger.info("Stream cancelled by caller")
                            return
                        delta = self._parse_event(line)
                        if delta is None:
                            continue
                        if delta is STREAM_DONE:
                            return
                        yield delta
            except httpx.TimeoutException as e:
                raise ApiTimeoutError(f"Request timed out: {e}") from e

    def _parse_event(self, line: str):
        """Content delta from one SSE line, STREAM_DONE on [DONE], else None."""
        if not line.startswith('data:'):
            return None
        data = line[5:].strip()
        if data == '[DONE]':
            return STREAM_DONE
        try:
            chunk = json.loads(data)
        except json.JSONDecodeError:
            logger.warning("Skipping malformed stream chunk: %s", data[:200])
            return None

        if not isinstance(chunk, dict):
            return None
        choices = chunk.get('choices') or []
        if not choices:
            return None
        content = (choices[0].get('delta') or {}).get('content')
        return content or None
