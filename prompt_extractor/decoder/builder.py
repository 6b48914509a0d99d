"""
Curl Command Builder

Rebuilds a curl command from a (possibly edited) ParsedRequest.
"""

import json
from typing import List

from ..models import ParsedRequest, RawBody

LINE_SEPARATOR = ' \\\n  '


def shell_quote(value: str) -> str:
    """Single-quote a value for Bash; embedded quotes become '\\''."""
    return "'" + value.replace("'", "'\\''") + "'"


def build_body(parsed: ParsedRequest) -> RawBody:
    """Shallow copy of the raw body with the current messages injected.

    A body without a messages list keeps its own messages value (or none)
    unless the caller has added messages.
    """
    body = dict(parsed.raw_body)
    if parsed.messages or isinstance(body.get('messages'), list):
        body['messages'] = [m.to_dict() for m in parsed.messages]
    return body


def build_curl(parsed: ParsedRequest) -> str:
    """
    Build a curl command equivalent to the parsed request.

    The output is not byte-identical to the original input but parses back
    to the same URL, headers, messages and body. ANSI-C quoted input comes
    out plain single-quoted.

    Args:
        parsed: The request, with messages possibly edited by the caller

    Returns:
        Multi-line curl command string
    """
    config = parsed.api_config
    lines: List[str] = [f"curl {shell_quote(config.url)}"]

    for key, value in config.headers.items():
        lines.append(f"-H {shell_quote(f'{key}: {value}')}")

    if parsed.raw_body or parsed.messages:
        body = json.dumps(build_body(parsed), ensure_ascii=False, separators=(',', ':'))
        lines.append(f"--data-raw {shell_quote(body)}")

    return LINE_SEPARATOR.join(lines)
