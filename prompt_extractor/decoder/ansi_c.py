"""
Bash ANSI-C ($'...') Decoder

Turns the text of a $'...' quoted argument into the string Bash would pass
to curl, and prepares such strings for JSON parsing.

Supported escapes:
  \\n \\r \\t \\" \\' \\\\     control characters and quotes
  \\a \\b \\e \\E \\f \\v \\?   less common control characters
  \\uXXXX \\UXXXXXXXX       unicode code points
  \\xHH \\NNN               hex and octal bytes
  \\cX                     control-X
"""

import json
import re

from ..exceptions import BodyDecodeError
from ..models import RawBody

SIMPLE_ESCAPES = {
    'n': '\n',
    'r': '\r',
    't': '\t',
    '"': '"',
    "'": "'",
    '\\': '\\',
    'a': '\a',
    'b': '\b',
    'e': '\x1b',
    'E': '\x1b',
    'f': '\f',
    'v': '\v',
    '?': '?',
}

JSON_CONTROL_ESCAPES = {
    '\n': '\\n',
    '\r': '\\r',
    '\t': '\\t',
    '\b': '\\b',
    '\f': '\\f',
}

_NUMERIC_ESCAPES = {
    'u': re.compile(r'[0-9a-fA-F]{4}'),
    'U': re.compile(r'[0-9a-fA-F]{1,8}'),
    'x': re.compile(r'[0-9a-fA-F]{1,2}'),
}
_OCTAL = re.compile(r'[0-7]{1,3}')
_LOW_SURROGATE = re.compile(r'\\u(d[c-f][0-9a-f]{2})', re.IGNORECASE)


def decode_ansi_c(text: str) -> str:
    """Decode the escapes of a $'...' body in a single left-to-right pass.

    Unknown escapes are kept with their backslash, as Bash does. A \\u
    surrogate pair becomes one character; a lone surrogate becomes U+FFFD.
    """
    out = []
    pos = 0
    length = len(text)

    while pos < length:
        char = text[pos]
        if char != '\\' or pos + 1 == length:
            out.append(char)
            pos += 1
            continue

        escape = text[pos + 1]

        if escape in SIMPLE_ESCAPES:
            out.append(SIMPLE_ESCAPES[escape])
            pos += 2
            continue

        if escape in _NUMERIC_ESCAPES:
            match = _NUMERIC_ESCAPES[escape].match(text, pos + 2)
            code = int(match.group(0), 16) if match else None
            if code is not None and code <= 0x10FFFF:
                pos = match.end()
                if 0xD800 <= code <= 0xDBFF:
                    low = _LOW_SURROGATE.match(text, pos)
                    if low:
                        code = 0x10000 + ((code - 0xD800) << 10) + (int(low.group(1), 16) - 0xDC00)
                        pos = low.end()
                if 0xD800 <= code <= 0xDFFF:
                    code = 0xFFFD
                out.append(chr(code))
                continue

        elif escape in '01234567':
            match = _OCTAL.match(text, pos + 1)
            out.append(chr(int(match.group(0), 8) & 0xFF))
            pos = match.end()
            continue

        elif escape == 'c' and pos + 2 < length:
            out.append(chr(ord(text[pos + 2]) & 0x1F))
            pos += 3
            continue

        out.append(char)
        out.append(escape)
        pos += 2

    return ''.join(out)


def escape_json_controls(text: str) -> str:
    """Re-encode literal control characters inside JSON string literals.

    JSON forbids raw control characters in strings, so after ANSI-C
    decoding a body like {"content":"a<LF>b"} must become
    {"content":"a\\nb"} again. Whitespace between tokens is left alone.
    """
    out = []
    in_string = False
    pos = 0
    length = len(text)

    while pos < length:
        char = text[pos]

        if in_string and char == '\\' and pos + 1 < length:
            out.append(text[pos:pos + 2])
            pos += 2
            continue

        if char == '"':
            in_string = not in_string
        elif in_string and ord(char) < 0x20:
            char = JSON_CONTROL_ESCAPES.get(char, '\\u%04x' % ord(char))

        out.append(char)
        pos += 1

    return ''.join(out)


def decode_json_body(text: str, ansi_c: bool = False) -> RawBody:
    """
    Parse a request body argument into a JSON object.

    Args:
        text: The body argument as curl receives it
        ansi_c: Whether the argument was written with $'...' quoting

    Returns:
        The decoded JSON object

    Raises:
        BodyDecodeError: if the text is not a JSON object
    """
    if ansi_c:
        text = escape_json_controls(text)

    try:
        body = json.loads(text)
    except json.JSONDecodeError as e:
        raise BodyDecodeError(f"Request body is not valid JSON: {e}") from e

    if not isinstance(body, dict):
        raise BodyDecodeError(
            f"Request body must be a JSON object, got {type(body).__name__}"
        )

    return body
