"""
Data model for parsed chat-completion requests.

ParsedRequest is produced atomically by the curl parser. Callers may replace
its messages wholesale; api_config, raw_body and provider are snapshots of
the original extraction.
"""

import json
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Dict, List, Optional, Union

JsonValue = Union[None, bool, int, float, str, List['JsonValue'], Dict[str, 'JsonValue']]
RawBody = Dict[str, JsonValue]

VALID_ROLES = ('system', 'user', 'assistant')


class Provider(Enum):
    """Inferred AI API vendor"""
    OPENAI = 'openai'
    DEEPSEEK = 'deepseek'
    DASHSCOPE = 'dashscope'
    CLAUDE = 'claude'
    UNKNOWN = 'unknown'


@dataclass
class ChatMessage:
    """A single chat message.

    role and content are None when the source object lacked them. Any other
    keys of the source object are kept in extra so that rebuilding the body
    does not drop them.
    """
    role: Optional[str] = None
    content: Any = None
    extra: Dict[str, JsonValue] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Dict[str, JsonValue]) -> 'ChatMessage':
        extra = {k: v for k, v in data.items() if k not in ('role', 'content')}
        return cls(role=data.get('role'), content=data.get('content'), extra=extra)

    def to_dict(self) -> Dict[str, JsonValue]:
        result: Dict[str, JsonValue] = {}
        if self.role is not None:
            result['role'] = self.role
        if self.content is not None:
            result['content'] = self.content
        result.update(self.extra)
        return result

    @property
    def text(self) -> str:
        """Plain text of the content, joining text parts of multi-part content."""
        if isinstance(self.content, str):
            return self.content
        if isinstance(self.content, list):
            parts = []
            for part in self.content:
                if isinstance(part, dict) and isinstance(part.get('text'), str):
                    parts.append(part['text'])
                elif isinstance(part, str):
                    parts.append(part)
            return ''.join(parts)
        return ''


def _number(value: JsonValue) -> Optional[Union[int, float]]:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    return value


def _integer(value: JsonValue) -> Optional[int]:
    number = _number(value)
    if isinstance(number, float):
        return int(number) if number.is_integer() else None
    return number


@dataclass
class ApiConfig:
    """Request settings derived from the URL, headers and JSON body"""
    url: str
    method: str = "POST"
    headers: Dict[str, str] = field(default_factory=dict)
    model: Optional[str] = None
    temperature: Optional[float] = None
    max_tokens: Optional[int] = None
    top_p: Optional[float] = None
    frequency_penalty: Optional[float] = None
    presence_penalty: Optional[float] = None
    stream: Optional[bool] = None

    @classmethod
    def from_body(cls, url: str, headers: Dict[str, str], raw_body: RawBody) -> 'ApiConfig':
        model = raw_body.get('model')
        stream = raw_body.get('stream')
        return cls(
            url=url,
            headers=headers,
            model=model if isinstance(model, str) else None,
            temperature=_number(raw_body.get('temperature')),
            max_tokens=_integer(raw_body.get('max_tokens')),
            top_p=_number(raw_body.get('top_p')),
            frequency_penalty=_number(raw_body.get('frequency_penalty')),
            presence_penalty=_number(raw_body.get('presence_penalty')),
            stream=stream if isinstance(stream, bool) else None,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            'url': self.url,
            'method': self.method,
            'headers': dict(self.headers),
            'model': self.model,
            'temperature': self.temperature,
            'max_tokens': self.max_tokens,
            'top_p': self.top_p,
            'frequency_penalty': self.frequency_penalty,
            'presence_penalty': self.presence_penalty,
            'stream': self.stream,
        }


@dataclass
class ParsedRequest:
    """Complete parsed curl command"""
    api_config: ApiConfig
    messages: List[ChatMessage] = field(default_factory=list)
    raw_body: RawBody = field(default_factory=dict)
    provider: Provider = Provider.UNKNOWN
    # Non-fatal diagnostics, e.g. a body that could not be decoded
    warnings: List[str] = field(default_factory=list)

    def with_messages(self, messages: List[ChatMessage]) -> 'ParsedRequest':
        """Return a copy holding a new message list; self is left untouched."""
        return replace(self, messages=list(messages))

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary"""
        return {
            'api_config': self.api_config.to_dict(),
            'messages': [m.to_dict() for m in self.messages],
            'raw_body': self.raw_body,
            'provider': self.provider.value,
            'warnings': list(self.warnings),
        }

    def to_json(self, indent: int = 2) -> str:
        """Convert to JSON string"""
        return json.dumps(self.to_dict(), indent=indent, ensure_ascii=False)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'ParsedRequest':
        """Rebuild a ParsedRequest from the shape produced by to_dict()."""
        config = data.get('api_config') or {}
        raw_body = data.get('raw_body') or {}
        api_config = ApiConfig.from_body(
            config.get('url', ''),
            {str(k).lower(): str(v) for k, v in (config.get('headers') or {}).items()},
            raw_body,
        )
        messages = [
            ChatMessage.from_dict(m) for m in data.get('messages') or [] if isinstance(m, dict)
        ]
        provider = data.get('provider') or Provider.UNKNOWN.value
        try:
            provider = Provider(provider)
        except ValueError:
            provider = Provider.UNKNOWN
        return cls(
            api_config=api_config,
            messages=messages,
            raw_body=raw_body,
            provider=provider,
            warnings=list(data.get('warnings') or []),
        )
