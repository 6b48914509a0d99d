"""
Command normalization and provider detection.
"""

import re

from ..models import Provider

# Checked in order, first substring match wins
PROVIDER_HOSTS = (
    ('api.openai.com', Provider.OPENAI),
    ('api.deepseek.com', Provider.DEEPSEEK),
    ('dashscope.aliyuncs.com', Provider.DASHSCOPE),
    ('api.anthropic.com', Provider.CLAUDE),
)

_CONTINUATION = re.compile(r'\\\s*\n\s*')
_WHITESPACE = re.compile(r'\s+')


def normalize_command(command: str) -> str:
    """Collapse a multi-line curl command into a single line.

    Line continuations and whitespace runs become single spaces. Quotes are
    not interpreted, so whitespace inside quoted arguments is collapsed too.
    """
    command = _CONTINUATION.sub(' ', command)
    command = _WHITESPACE.sub(' ', command)
    return command.strip()


def detect_provider(url: str) -> Provider:
    """Infer the API vendor from a request URL."""
    for host, provider in PROVIDER_HOSTS:
        if host in url:
            return provider
    return Provider.UNKNOWN
