"""Endpoint tests for the FastAPI app."""

import json

import httpx
import pytest

from prompt_extractor import server
from prompt_extractor.client import ChatCompletionClient


@pytest.fixture
def upstream(monkeypatch):
    """Route ChatCompletionClient traffic to a mocked endpoint; returns captured requests."""
    captured = []

    def handler(request: httpx.Request) -> httpx.Response:
        captured.append(request)
        if request.headers["authorization"] == "Bearer bad":
            return httpx.Response(401, json={"error": {"message": "Invalid key"}})
        if request.headers["authorization"] == "Bearer slow":
            raise httpx.ReadTimeout("too slow", request=request)
        if json.loads(request.content)["stream"]:
            chunks = [{"choices": [{"delta": {"content": text}}]} for text in ("Po", "ng")]
            body = "".join(f"data: {json.dumps(chunk)}\n\n" for chunk in chunks) + "data: [DONE]\n\n"
            return httpx.Response(200, content=body.encode(), headers={"content-type": "text/event-stream"})
        return httpx.Response(200, json={
            "choices": [{"message": {"content": "Pong"}, "finish_reason": "stop"}],
            "usage": {"total_tokens": 5},
        })

    transport = httpx.MockTransport(handler)
    monkeypatch.setattr(
        server, "ChatCompletionClient",
        lambda config: ChatCompletionClient(config, transport=transport),
    )
    return captured


@pytest.mark.asyncio
class TestParseEndpoints:

    async def test_health(self, client):
        resp = await client.get("/api/health")
        assert resp.status_code == 200
        assert resp.json() == {"status": "ok"}

    async def test_parse(self, client, openai_curl):
        resp = await client.post("/api/parse", json={"curl_command": openai_curl})
        assert resp.status_code == 200
        data = resp.json()["data"]
        assert data["provider"] == "openai"
        assert data["api_config"]["model"] == "gpt-4o"
        assert data["messages"][1] == {"role": "user", "content": "Hi  there"}
        assert data["warnings"] == []

    async def test_parse_malformed(self, client):
        resp = await client.post("/api/parse", json={"curl_command": "not a curl command"})
        assert resp.status_code == 400
        assert "URL" in resp.json()["detail"]

    async def test_build_round_trip(self, client, ansi_c_curl):
        parsed = (await client.post("/api/parse", json={"curl_command": ansi_c_curl})).json()["data"]
        parsed["messages"].append({"role": "assistant", "content": "ok"})

        resp = await client.post("/api/build", json={"parsed": parsed})
        assert resp.status_code == 200
        command = resp.json()["curl_command"]

        reparsed = (await client.post("/api/parse", json={"curl_command": command})).json()["data"]
        assert reparsed["messages"] == parsed["messages"]
        assert reparsed["provider"] == "deepseek"
        assert reparsed["api_config"]["headers"] == {"content-type": "application/json"}

    async def test_build_requires_url(self, client):
        resp = await client.post("/api/build", json={"parsed": {"api_config": {}}})
        assert resp.status_code == 400

    async def test_normalize(self, client):
        resp = await client.post("/api/normalize", json={"curl_command": "curl \\\n  'https://api.anthropic.com/v1'"})
        assert resp.json() == {
            "normalized": "curl 'https://api.anthropic.com/v1'",
            "provider": "claude",
        }

    async def test_validate(self, client):
        resp = await client.post("/api/validate", json={"messages": [{"role": "user", "content": ""}]})
        assert resp.json() == {
            "valid": False,
            "errors": ["Message 1: content must be a non-empty string"],
        }

    async def test_stats(self, client):
        resp = await client.post("/api/stats", json={"messages": [{"role": "user", "content": "hello 你好 !!!"}]})
        assert resp.json() == {
            "total": 1,
            "system": 0,
            "user": 1,
            "assistant": 0,
            "total_tokens": 4,
            "total_chars": 12,
        }


@pytest.mark.asyncio
class TestTestEndpoint:

    async def test_sends_parsed_messages(self, client, openai_curl, upstream):
        resp = await client.post("/api/test", json={"curl_command": openai_curl, "api_key": "sk-live"})
        assert resp.status_code == 200
        body = resp.json()
        assert body["provider"] == "openai"
        assert body["result"]["text"] == "Pong"
        assert body["result"]["finish_reason"] == "stop"

        request = upstream[0]
        assert str(request.url) == "https://api.openai.com/v1/chat/completions"
        assert request.headers["authorization"] == "Bearer sk-live"

    async def test_uses_edited_messages(self, client, openai_curl, upstream):
        resp = await client.post("/api/test", json={
            "curl_command": openai_curl,
            "api_key": "sk-live",
            "model": "gpt-4",
            "messages": [{"role": "user", "content": "Ping"}],
        })
        assert resp.status_code == 200
        sent = upstream[0].read().decode()
        assert '"Ping"' in sent
        assert '"gpt-4"' in sent

    async def test_upstream_error_status(self, client, openai_curl, upstream):
        resp = await client.post("/api/test", json={"curl_command": openai_curl, "api_key": "bad"})
        assert resp.status_code == 401
        assert "Invalid key" in resp.json()["detail"]

    async def test_missing_model(self, client, upstream):
        resp = await client.post("/api/test", json={"curl_command": "curl https://x.test/v1", "api_key": "k"})
        assert resp.status_code == 400
        assert "model" in resp.json()["detail"]
        assert upstream == []

    async def test_stream_relays_chunks(self, client, openai_curl, upstream):
        resp = await client.post("/api/test", json={
            "curl_command": openai_curl, "api_key": "sk-live", "stream": True,
        })
        assert resp.status_code == 200
        assert resp.text == "Pong"

    async def test_stream_upstream_error_status(self, client, openai_curl, upstream):
        resp = await client.post("/api/test", json={
            "curl_command": openai_curl, "api_key": "bad", "stream": True,
        })
        assert resp.status_code == 401
        assert "Invalid key" in resp.json()["detail"]

    async def test_stream_timeout(self, client, openai_curl, upstream):
        resp = await client.post("/api/test", json={
            "curl_command": openai_curl, "api_key": "slow", "stream": True,
        })
        assert resp.status_code == 504

    async def test_timeout(self, client, openai_curl, upstream):
        resp = await client.post("/api/test", json={"curl_command": openai_curl, "api_key": "slow"})
        assert resp.status_code == 504
