"""
Configuration for testing a parsed request against a live endpoint.

The parser itself needs no configuration; these settings only matter for
ChatCompletionClient and the /api/test endpoint.
"""

import os
import re
from dataclasses import dataclass
from typing import Optional
from urllib.parse import urlparse

from . import config
from .exceptions import ConfigurationError
from .models import ParsedRequest

_VERSION_SEGMENT = re.compile(r'/(v\d+)(?:/|$)')


def derive_base_url(url: str) -> str:
    """Reduce a full endpoint URL to its API base.

    Keeps the path up to and including the first version segment (e.g. /v1),
    so .../compatible-mode/v1/chat/completions becomes .../compatible-mode/v1.
    Without a version segment only the origin is kept. Values that are not
    absolute URLs are returned unchanged.
    """
    parsed = urlparse(url)
    if not parsed.scheme or not parsed.netloc:
        return url

    origin = f"{parsed.scheme}://{parsed.netloc}"
    match = _VERSION_SEGMENT.search(parsed.path)
    if match:
        return origin + parsed.path[:match.end(1)]
    return origin


@dataclass
class TesterConfig:
    """Settings for sending a chat-completion request.

    For api_key: explicit arg > PROMPT_EXTRACTOR_API_KEY > OPENAI_API_KEY.

    Args:
        base_url: API base URL; a full endpoint URL is reduced with derive_base_url().
        api_key: Bearer token sent in the Authorization header.
        model: Model name sent in the request body.
        temperature: Sampling temperature.
        max_tokens: Completion token limit.
        stream: Whether to request a streamed (SSE) response.
        timeout: Request timeout in seconds.
    """

    base_url: str = ""
    api_key: Optional[str] = None
    model: str = ""
    temperature: float = config.DEFAULT_TEMPERATURE
    max_tokens: int = config.DEFAULT_MAX_TOKENS
    stream: bool = False
    timeout: float = config.REQUEST_TIMEOUT

    def __post_init__(self):
        """Resolve the API key from env vars if not explicitly set."""
        if self.api_key is None:
            for name in config.API_KEY_ENV_VARS:
                if os.environ.get(name):
                    self.api_key = os.environ[name]
                    break
        self.base_url = derive_base_url(self.base_url)

    @classmethod
    def from_parsed(cls, parsed: ParsedRequest, **overrides) -> 'TesterConfig':
        """Defaults taken from a parsed request; keyword args win."""
        api_config = parsed.api_config
        values = {
            'base_url': api_config.url,
            'model': api_config.model or '',
            'temperature': api_config.temperature if api_config.temperature is not None else config.DEFAULT_TEMPERATURE,
            'max_tokens': api_config.max_tokens if api_config.max_tokens is not None else config.DEFAULT_MAX_TOKENS,
            'stream': bool(api_config.stream),
        }
        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**values)

    def validate(self):
        """Raise ConfigurationError if a request cannot be sent with these settings."""
        if not self.api_key or not self.api_key.strip():
            raise ConfigurationError("An API key is required")
        if not self.model:
            raise ConfigurationError("A model name is required")
        if not self.base_url:
            raise ConfigurationError("A base URL is required")
