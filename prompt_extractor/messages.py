"""
Message validation and statistics.

Validation is advisory: it returns a list of human-readable problems
instead of raising, so it can run against messages still being edited.
"""

import math
import re
from dataclasses import dataclass, asdict
from typing import Any, Dict, List, Sequence, Union

from .models import VALID_ROLES, ChatMessage

MessageLike = Union[ChatMessage, Dict[str, Any]]

_ENGLISH_WORD = re.compile(r'[a-zA-Z]+')
_CJK_CHAR = re.compile(r'[\u4e00-\u9fff]')
_COUNTED = re.compile(r'[a-zA-Z\u4e00-\u9fff\s]')


def text_length(text: str) -> int:
    """Length in UTF-16 code units; characters outside the BMP count twice."""
    return len(text.encode('utf-16-le', 'surrogatepass')) // 2


def as_message(message: MessageLike) -> ChatMessage:
    if isinstance(message, ChatMessage):
        return message
    if isinstance(message, dict):
        return ChatMessage.from_dict(message)
    return ChatMessage()


def validate_messages(messages: Any) -> List[str]:
    """
    Check a message list for missing or invalid fields.

    Args:
        messages: List of ChatMessage objects or plain dicts

    Returns:
        Ordered list of error strings; empty when the list is valid
    """
    errors: List[str] = []

    if not isinstance(messages, (list, tuple)):
        errors.append("Messages must be a list")
        return errors

    if not messages:
        errors.append("At least one message is required")
        return errors

    for index, raw in enumerate(messages, start=1):
        message = as_message(raw)

        if message.role not in VALID_ROLES:
            errors.append(f"Message {index}: role must be one of system, user or assistant")

        if not isinstance(message.content, str) or not message.content:
            errors.append(f"Message {index}: content must be a non-empty string")

    return errors


def estimate_token_count(text: str) -> int:
    """Rough token estimate.

    English words count one each, CJK characters one each, and every four
    remaining non-whitespace characters count as one.
    """
    english_words = len(_ENGLISH_WORD.findall(text))
    cjk_chars = len(_CJK_CHAR.findall(text))
    other_chars = text_length(_COUNTED.sub('', text))

    return english_words + cjk_chars + math.ceil(other_chars / 4)


@dataclass
class MessageStats:
    """Aggregate counts over a message list"""
    total: int = 0
    system: int = 0
    user: int = 0
    assistant: int = 0
    total_tokens: int = 0
    total_chars: int = 0

    def to_dict(self) -> Dict[str, int]:
        return asdict(self)


def get_message_stats(messages: Sequence[MessageLike]) -> MessageStats:
    """Count messages per role plus estimated tokens and characters."""
    stats = MessageStats(total=len(messages))

    for raw in messages:
        message = as_message(raw)
        if message.role in VALID_ROLES:
            setattr(stats, message.role, getattr(stats, message.role) + 1)
        text = message.text
        stats.total_tokens += estimate_token_count(text)
        stats.total_chars += text_length(text)

    return stats
