"""
Decoder module for curl commands.

- normalize.py: Collapses multi-line commands, detects the API provider
- ansi_c.py: Decodes Bash $'...' bodies into JSON text
- curl.py: Tokenizes curl commands into a ParsedRequest
- builder.py: Rebuilds curl commands from a ParsedRequest
"""

from .normalize import normalize_command, detect_provider
from .ansi_c import decode_ansi_c, escape_json_controls, decode_json_body
from .curl import CurlParser, parse_curl, tokenize_command
from .builder import build_curl, build_body, shell_quote
