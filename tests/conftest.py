"""Shared pytest fixtures for prompt-extractor tests."""

import pytest
from httpx import ASGITransport, AsyncClient

from prompt_extractor.server import app

OPENAI_CURL = """curl 'https://api.openai.com/v1/chat/completions' \\
  -H 'authorization: Bearer sk-test' \\
  -H 'content-type: application/json' \\
  --data-raw '{"model":"gpt-4o","messages":[{"role":"system","content":"Be brief."},{"role":"user","content":"Hi  there"}],"temperature":0.5,"max_tokens":256,"stream":false,"seed":7}'"""

# As exported by Chrome's "Copy as cURL (bash)" when the body holds escapes
ANSI_C_CURL = r"""curl 'https://api.deepseek.com/chat/completions' \
  -H 'Content-Type: application/json' \
  --data-raw $'{"model":"deepseek-chat","messages":[{"role":"user","content":"line1\\nline2 it\'s \\u4f60\\u597d"}]}'"""


@pytest.fixture
def openai_curl():
    return OPENAI_CURL


@pytest.fixture
def ansi_c_curl():
    return ANSI_C_CURL


@pytest.fixture
async def client():
    """Async test client wired to the FastAPI app."""
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as client:
        yield client
