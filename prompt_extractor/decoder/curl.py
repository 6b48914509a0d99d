"""
Curl Command Parser

Parses curl commands copied from a browser's network inspector into a
ParsedRequest: URL, headers, JSON body, chat messages and provider.

Parsing happens in two passes:
  1. tokenize_command() splits the text into shell words, honouring
     '...', "..." and $'...' quoting and backslash line continuations.
  2. CurlParser walks the words with a small state machine:
     EXPECT_URL -> SCAN_FLAGS, with IN_HEADER / IN_BODY / IN_OPTION
     entered for one word after a flag that takes an argument.
"""

import logging
import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional

from ..exceptions import BodyDecodeError, MalformedCommandError
from ..models import ApiConfig, ChatMessage, ParsedRequest, RawBody
from .ansi_c import decode_ansi_c, decode_json_body
from .normalize import detect_provider

logger = logging.getLogger(__name__)


class QuoteStyle(Enum):
    """How a segment of a shell word was written"""
    BARE = 'bare'
    SINGLE = "'"
    DOUBLE = '"'
    ANSI_C = "$'"


@dataclass
class Segment:
    style: QuoteStyle
    text: str

    @property
    def value(self) -> str:
        if self.style is QuoteStyle.ANSI_C:
            return decode_ansi_c(self.text)
        return self.text


@dataclass
class Word:
    """A shell word, possibly made of several adjacent quoted segments"""
    segments: List[Segment] = field(default_factory=list)
    unterminated: bool = False

    @property
    def value(self) -> str:
        return ''.join(s.value for s in self.segments)

    @property
    def ansi_c(self) -> bool:
        return any(s.style is QuoteStyle.ANSI_C for s in self.segments)

    def add(self, style: QuoteStyle, text: str):
        if self.segments and style is QuoteStyle.BARE and self.segments[-1].style is QuoteStyle.BARE:
            self.segments[-1].text += text
        else:
            self.segments.append(Segment(style, text))


# Backslash, optional trailing blanks, newline
_CONTINUATION = re.compile(r'\\[ \t\r]*\n')
# Characters a backslash escapes inside double quotes
_DOUBLE_QUOTE_ESCAPABLE = '$`"\\\n'


def _read_single(command: str, pos: int):
    end = command.find("'", pos)
    if end == -1:
        return command[pos:], len(command), False
    return command[pos:end], end + 1, True


def _read_ansi_c(command: str, pos: int):
    start = pos
    while pos < len(command):
        char = command[pos]
        if char == '\\':
            pos += 2
            continue
        if char == "'":
            return command[start:pos], pos + 1, True
        pos += 1
    return command[start:], len(command), False


def _read_double(command: str, pos: int):
    out = []
    while pos < len(command):
        char = command[pos]
        if char == '\\' and pos + 1 < len(command) and command[pos + 1] in _DOUBLE_QUOTE_ESCAPABLE:
            if command[pos + 1] != '\n':
                out.append(command[pos + 1])
            pos += 2
            continue
        if char == '"':
            return ''.join(out), pos + 1, True
        out.append(char)
        pos += 1
    return ''.join(out), len(command), False


def tokenize_command(command: str) -> List[Word]:
    """
    Split a command into shell words in a single forward scan.

    Line continuations and runs of whitespace outside quotes separate words;
    text inside quotes is kept as written. An unclosed quote runs to the end
    of the input and marks the last word as unterminated.
    """
    words: List[Word] = []
    current: Optional[Word] = None
    pos = 0
    length = len(command)

    while pos < length:
        char = command[pos]

        continuation = _CONTINUATION.match(command, pos) if char == '\\' else None
        if continuation or char.isspace():
            current = None
            pos = continuation.end() if continuation else pos + 1
            continue

        if current is None:
            current = Word()
            words.append(current)

        if char == "'":
            text, pos, closed = _read_single(command, pos + 1)
            current.add(QuoteStyle.SINGLE, text)
        elif char == '"':
            text, pos, closed = _read_double(command, pos + 1)
            current.add(QuoteStyle.DOUBLE, text)
        elif char == '$' and command.startswith("'", pos + 1):
            text, pos, closed = _read_ansi_c(command, pos + 2)
            current.add(QuoteStyle.ANSI_C, text)
        elif char == '\\' and pos + 1 < length:
            current.add(QuoteStyle.BARE, command[pos + 1])
            pos += 2
            continue
        else:
            current.add(QuoteStyle.BARE, char)
            pos += 1
            continue

        if not closed:
            current.unterminated = True

    return words


class _State(Enum):
    EXPECT_URL = 'expect_url'
    SCAN_FLAGS = 'scan_flags'
    IN_HEADER = 'in_header'
    IN_BODY = 'in_body'
    IN_OPTION = 'in_option'


class CurlParser:
    """Parser for curl commands"""

    HEADER_FLAGS = frozenset(['-H', '--header'])
    BODY_FLAGS = frozenset(['-d', '--data', '--data-raw', '--data-binary', '--data-ascii'])
    URL_FLAGS = frozenset(['--url'])

    # Flags whose argument is stored as a header
    HEADER_ALIASES = {
        '-b': 'cookie',
        '--cookie': 'cookie',
        '-A': 'user-agent',
        '--user-agent': 'user-agent',
        '-e': 'referer',
        '--referer': 'referer',
    }

    # Other flags that consume the following word
    ARGUMENT_FLAGS = frozenset([
        '-X', '--request', '-u', '--user', '-x', '--proxy', '-U', '--proxy-user',
        '-o', '--output', '-m', '--max-time', '--connect-timeout', '-F', '--form',
        '--data-urlencode', '-w', '--write-out', '-r', '--range', '-T', '--upload-file',
        '-E', '--cert', '--cacert', '--key', '-c', '--cookie-jar', '-K', '--config',
        '-D', '--dump-header', '-C', '--continue-at', '--retry', '--resolve',
        '--limit-rate', '--max-redirs', '--interface', '-Y', '--speed-limit',
        '-y', '--speed-time', '-z', '--time-cond',
    ])

    # Short flags that accept an attached argument, e.g. -d'{...}'
    ATTACHABLE_FLAGS = ('-H', '-d', '-b', '-A', '-e')

    _COMMAND_NAME = re.compile(r'(?:^|[/\\])curl(?:\.exe)?$', re.IGNORECASE)

    def parse(self, curl_command: str) -> ParsedRequest:
        """
        Parse a curl command string into a ParsedRequest.

        Args:
            curl_command: The full curl command as a string

        Returns:
            ParsedRequest with all extracted components

        Raises:
            MalformedCommandError: if the command is not a curl invocation
                or no URL can be located
        """
        words = tokenize_command(curl_command)

        if not words or not self._COMMAND_NAME.search(words[0].value):
            raise MalformedCommandError("Could not find a URL: input is not a curl command")

        url: Optional[str] = None
        headers: Dict[str, str] = {}
        body_word: Optional[Word] = None
        warnings: List[str] = []

        state = _State.EXPECT_URL
        pending_flag = ''

        for word in words[1:]:
            value = word.value

            if state is _State.IN_HEADER:
                self._add_header(headers, pending_flag, value)
            elif state is _State.IN_BODY:
                if body_word is None:
                    body_word = word
                else:
                    warnings.append(f"Ignored additional body directive {pending_flag}")
            elif state is _State.IN_OPTION:
                if pending_flag in self.URL_FLAGS and url is None:
                    url = value
            elif value.startswith('-') and len(value) > 1:
                flag_state = self._enter_flag(value)
                if flag_state is not None:
                    state = flag_state
                    pending_flag = value
                    continue
                flag, attached = value[:2], value[2:]
                if flag == '-d':
                    if body_word is None:
                        body_word = self._strip_flag(word, 2)
                    else:
                        warnings.append("Ignored additional body directive -d")
                elif flag in self.ATTACHABLE_FLAGS:
                    self._add_header(headers, flag, attached)
            elif url is None:
                url = value

            state = _State.SCAN_FLAGS if url is not None else _State.EXPECT_URL

        if state not in (_State.EXPECT_URL, _State.SCAN_FLAGS):
            warnings.append(f"Option {pending_flag} is missing its argument")

        if not url:
            raise MalformedCommandError("Could not find a URL in the curl command")

        raw_body: RawBody = {}
        if body_word is not None:
            try:
                if body_word.unterminated:
                    raise BodyDecodeError("Request body has unbalanced quoting")
                raw_body = decode_json_body(body_word.value, ansi_c=body_word.ansi_c)
            except BodyDecodeError as e:
                logger.warning("Could not parse request body: %s", e)
                warnings.append(str(e))

        messages = self._extract_messages(raw_body)

        return ParsedRequest(
            api_config=ApiConfig.from_body(url, headers, raw_body),
            messages=messages,
            raw_body=raw_body,
            provider=detect_provider(url),
            warnings=warnings,
        )

    def _enter_flag(self, flag: str) -> Optional[_State]:
        """State for the word after a flag, or None if the flag takes no separate argument"""
        if flag in self.HEADER_FLAGS or flag in self.HEADER_ALIASES:
            return _State.IN_HEADER
        if flag in self.BODY_FLAGS:
            return _State.IN_BODY
        if flag in self.ARGUMENT_FLAGS or flag in self.URL_FLAGS:
            return _State.IN_OPTION
        return None

    def _add_header(self, headers: Dict[str, str], flag: str, line: str):
        """Store a header line, splitting on the first colon; lines without one are skipped"""
        alias = self.HEADER_ALIASES.get(flag)
        if alias:
            headers[alias] = line.strip()
            return

        colon_index = line.find(':')
        if colon_index > 0:
            key = line[:colon_index].strip().lower()
            headers[key] = line[colon_index + 1:].strip()

    def _strip_flag(self, word: Word, length: int) -> Word:
        """Copy of word without its first `length` characters (an attached flag)"""
        stripped = Word(unterminated=word.unterminated)
        remaining = length
        for segment in word.segments:
            if remaining >= len(segment.text):
                remaining -= len(segment.text)
                continue
            stripped.segments.append(Segment(segment.style, segment.text[remaining:]))
            remaining = 0
        return stripped

    def _extract_messages(self, raw_body: RawBody) -> List[ChatMessage]:
        messages = raw_body.get('messages')
        if not isinstance(messages, list):
            return []
        return [ChatMessage.from_dict(m) for m in messages if isinstance(m, dict)]


def parse_curl(curl_command: str) -> ParsedRequest:
    """Convenience function to parse a curl command."""
    parser = CurlParser()
    return parser.parse(curl_command)
