"""
Prompt Extractor

Turns a chat-completion curl command copied from a browser's network
inspector into editable messages and settings, and back again.

Quick start (library usage):
    from prompt_extractor import parse_curl, build_curl

    parsed = parse_curl(curl_text)
    for message in parsed.messages:
        print(message.role, message.content)

    edited = parsed.with_messages(parsed.messages[:1])
    print(build_curl(edited))
"""

from .decoder import build_curl, detect_provider, normalize_command, parse_curl
from .exceptions import (
    ApiCallError,
    ApiTimeoutError,
    BodyDecodeError,
    ConfigurationError,
    MalformedCommandError,
    PromptExtractorError,
)
from .messages import MessageStats, estimate_token_count, get_message_stats, validate_messages
from .models import ApiConfig, ChatMessage, ParsedRequest, Provider
from .session import ParserSession

__version__ = "1.0.0"
__all__ = [
    "parse_curl",
    "build_curl",
    "normalize_command",
    "detect_provider",
    "validate_messages",
    "estimate_token_count",
    "get_message_stats",
    "MessageStats",
    "ApiConfig",
    "ChatMessage",
    "ParsedRequest",
    "Provider",
    "ParserSession",
    "ChatCompletionClient",
    "PromptExtractorError",
    "MalformedCommandError",
    "BodyDecodeError",
    "ConfigurationError",
    "ApiCallError",
    "ApiTimeoutError",
]


def __getattr__(name):
    """Lazy imports for the HTTP-facing parts.

    ChatCompletionClient and the FastAPI app pull in httpx and FastAPI;
    parsing alone does not need them.
    """
    if name == "ChatCompletionClient":
        from .client import ChatCompletionClient
        return ChatCompletionClient
    if name == "app":
        from .server import app
        return app
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
