"""
Default configuration for the prompt extractor.

Every value can be overridden through a PROMPT_EXTRACTOR_* environment
variable. Library users can also pass values to TesterConfig directly.
"""

import os

# API Server
API_HOST = os.environ.get("PROMPT_EXTRACTOR_HOST", "0.0.0.0")
API_PORT = int(os.environ.get("PROMPT_EXTRACTOR_PORT", "8000"))

# Chat-completion tester defaults
DEFAULT_TEMPERATURE = 0.7
DEFAULT_MAX_TOKENS = 1000
REQUEST_TIMEOUT = float(os.environ.get("PROMPT_EXTRACTOR_TIMEOUT", "60"))

# Environment variables checked, in order, for an API key
API_KEY_ENV_VARS = ("PROMPT_EXTRACTOR_API_KEY", "OPENAI_API_KEY")

# Delay before a session parses its latest input (seconds)
PARSE_DEBOUNCE = float(os.environ.get("PROMPT_EXTRACTOR_DEBOUNCE", "0.1"))
