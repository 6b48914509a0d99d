"""
ParserSession - caller-owned parse state.

Holds the latest parse result for one editor (a UI panel, a CLI loop, a
test). Rapid repeated calls are debounced and stale results are dropped:
only the most recent parse() call updates the session.
"""

import asyncio
import logging
from typing import List, Optional

from . import config
from .decoder import parse_curl
from .exceptions import MalformedCommandError
from .models import ChatMessage, ParsedRequest

logger = logging.getLogger(__name__)


class ParserSession:
    """Parse state owned by a single caller.

    Attributes:
        parsed: Latest successful result, or None.
        error: Message of the latest failure, or None.
        is_loading: True while a parse is pending.

    Args:
        debounce: Seconds to wait before parsing; a newer call in that
                  window supersedes this one.
    """

    def __init__(self, debounce: float = config.PARSE_DEBOUNCE):
        self.debounce = debounce
        self.parsed: Optional[ParsedRequest] = None
        self.error: Optional[str] = None
        self.is_loading = False
        self._generation = 0

    async def parse(self, curl_command: str) -> Optional[ParsedRequest]:
        """
        Parse a command and store the result.

        Returns:
            The ParsedRequest, or None if parsing failed or a newer call
            superseded this one
        """
        self._generation += 1
        if not curl_command.strip():
            self.parsed = None
            self.error = "Please enter a curl command"
            self.is_loading = False
            return None

        generation = self._generation
        self.is_loading = True
        self.error = None

        if self.debounce > 0:
            await asyncio.sleep(self.debounce)
        if generation != self._generation:
            logger.debug("Dropping superseded parse #%d", generation)
            return None

        try:
            parsed = parse_curl(curl_command)
        except MalformedCommandError as e:
            self.parsed = None
            self.error = str(e)
            return None
        finally:
            self.is_loading = False

        self.parsed = parsed
        return parsed

    def update_messages(self, messages: List[ChatMessage]):
        """Replace the messages of the current result; no-op without one."""
        if self.parsed is None:
            return
        self.parsed = self.parsed.with_messages(messages)

    def reset(self):
        """Clear all state and drop any pending parse."""
        self._generation += 1
        self.parsed = None
        self.error = None
        self.is_loading = False
