"""
FastAPI Server for the Prompt Extractor

Provides API endpoints for:
- Parsing curl commands into messages and settings
- Rebuilding curl commands after edits
- Validating messages and computing statistics
- Testing edited messages against a live endpoint
"""

from typing import Any, AsyncIterator, Dict, List, Optional

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import StreamingResponse
from pydantic import BaseModel

from .client import ChatCompletionClient
from .config_manager import TesterConfig
from .decoder import build_curl, detect_provider, normalize_command, parse_curl
from .exceptions import ApiCallError, ApiTimeoutError, ConfigurationError, MalformedCommandError
from .messages import get_message_stats, validate_messages
from .models import ParsedRequest


# FastAPI app
app = FastAPI(title="Prompt Extractor API")

# Enable CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Request Models
class CurlInput(BaseModel):
    curl_command: str


class BuildRequest(BaseModel):
    parsed: Dict[str, Any]


class MessagesInput(BaseModel):
    messages: List[Any]


class TestRequest(BaseModel):
    curl_command: str
    api_key: Optional[str] = None
    model: Optional[str] = None
    messages: Optional[List[Dict[str, Any]]] = None  # Edited messages; defaults to the parsed ones
    temperature: Optional[float] = None
    max_tokens: Optional[int] = None
    stream: Optional[bool] = None


def _parse_or_400(curl_command: str) -> ParsedRequest:
    try:
        return parse_curl(curl_command)
    except MalformedCommandError as e:
        raise HTTPException(status_code=400, detail=str(e))


# API Endpoints
@app.get("/api/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "ok"}


@app.post("/api/parse")
async def parse_command(input: CurlInput):
    """Parse a curl command and return structured parameters."""
    parsed = _parse_or_400(input.curl_command)
    return {"success": True, "data": parsed.to_dict()}


@app.post("/api/build")
async def build_command(request: BuildRequest):
    """Rebuild a curl command from a (possibly edited) parse result."""
    parsed = ParsedRequest.from_dict(request.parsed)
    if not parsed.api_config.url:
        raise HTTPException(status_code=400, detail="api_config.url is required")
    return {"success": True, "curl_command": build_curl(parsed)}


@app.post("/api/normalize")
async def normalize(input: CurlInput):
    """Collapse a multi-line command into one line."""
    normalized = normalize_command(input.curl_command)
    return {
        "normalized": normalized,
        "provider": detect_provider(normalized).value,
    }


@app.post("/api/validate")
async def validate(input: MessagesInput):
    """Validate a message list."""
    errors = validate_messages(input.messages)
    return {"valid": not errors, "errors": errors}


@app.post("/api/stats")
async def stats(input: MessagesInput):
    """Message counts and token estimates."""
    return get_message_stats(input.messages).to_dict()


@app.post("/api/test")
async def test_request(request: TestRequest):
    """Send the (edited) messages of a curl command to its endpoint."""
    parsed = _parse_or_400(request.curl_command)
    messages = request.messages if request.messages is not None else parsed.messages

    config = TesterConfig.from_parsed(
        parsed,
        api_key=request.api_key,
        model=request.model,
        temperature=request.temperature,
        max_tokens=request.max_tokens,
        stream=request.stream,
    )
    try:
        config.validate()
    except ConfigurationError as e:
        raise HTTPException(status_code=400, detail=str(e))

    client = ChatCompletionClient(config)

    try:
        if config.stream:
            # Upstream errors surface on the first chunk, before any headers go out
            chunks = client.stream(messages)
            try:
                first = await chunks.__anext__()
            except StopAsyncIteration:
                first = None
            return StreamingResponse(_relay(first, chunks), media_type="text/plain")

        result = await client.complete(messages)
    except ApiTimeoutError:
        raise HTTPException(status_code=504, detail="Request timed out")
    except ApiCallError as e:
        raise HTTPException(status_code=e.status_code or 502, detail=str(e))

    return {"success": True, "provider": parsed.provider.value, "result": result.to_dict()}


async def _relay(first: Optional[str], chunks: AsyncIterator[str]) -> AsyncIterator[str]:
    if first is None:
        return
    yield first
    async for chunk in chunks:
        yield chunk


def run_server(host: Optional[str] = None, port: Optional[int] = None):
    """Run the API server."""
    import uvicorn
    from . import config
    uvicorn.run(app, host=host or config.API_HOST, port=port or config.API_PORT)


if __name__ == "__main__":
    run_server()
