import asyncio
import json
import time

import httpx
import pytest
from conftest import TEST_API_KEY, make_settings

from perplexity_bridge.core.types import Failure
from perplexity_bridge.llm.services.perplexity_client import PerplexityClient
from perplexity_bridge.mcp.catalog import ASK_TOOL
from perplexity_bridge.mcp.executor import ToolExecutor

COMPLETION = {
    "id": "cmpl-1",
    "object": "chat.completion",
    "created": 1735689600,
    "model": "sonar",
    "choices": [
        {
            "index": 0,
            "finish_reason": "stop",
            "message": {"role": "assistant", "content": "Paris is the capital of France."},
        }
    ],
    "usage": {
        "prompt_tokens": 9,
        "completion_tokens": 7,
        "total_tokens": 16,
        "search_context_size": "low",
    },
    "citations": ["https://z.example", "https://a.example", "https://z.example"],
}


def _client(handler, **settings_overrides) -> PerplexityClient:
    http_client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return PerplexityClient(make_settings(**settings_overrides), http_client=http_client)


@pytest.mark.asyncio
async def test_ask_posts_completion_request_and_normalises_response():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["url"] = str(request.url)
        seen["auth"] = request.headers.get("Authorization")
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json=COMPLETION)

    client = _client(handler)
    response = await client.ask("capital of France?", "sonar", 0.2, 1500)

    assert seen["url"] == "https://api.perplexity.ai/chat/completions"
    assert seen["auth"] == f"Bearer {TEST_API_KEY}"
    assert seen["body"]["model"] == "sonar"
    assert seen["body"]["messages"] == [{"role": "user", "content": "capital of France?"}]
    assert seen["body"]["temperature"] == 0.2
    assert seen["body"]["max_tokens"] == 1500

    assert response.success is True
    assert response.answer == "Paris is the capital of France."
    assert response.model == "sonar"
    assert response.usage.total_tokens == 16
    assert response.to_payload()["usage"]["search_context_size"] == "low"


@pytest.mark.asyncio
async def test_citations_pass_through_in_order():
    client = _client(lambda request: httpx.Response(200, json=COMPLETION))

    response = await client.ask("q")

    assert response.citations == ["https://z.example", "https://a.example", "https://z.example"]


@pytest.mark.asyncio
async def test_missing_citations_become_empty_list():
    body = {key: value for key, value in COMPLETION.items() if key != "citations"}
    client = _client(lambda request: httpx.Response(200, json=body))

    response = await client.ask("q")

    assert response.success is True
    assert response.citations == []


@pytest.mark.asyncio
async def test_error_status_is_normalised_with_upstream_message():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(
            401,
            json={"error": {"message": "Invalid API key", "type": "invalid_request_error"}},
        )

    response = await _client(handler).ask("q")

    assert response.success is False
    assert response.error == "Perplexity API error (status 401): Invalid API key"
    assert response.to_payload() == {"success": False, "error": response.error}


@pytest.mark.asyncio
async def test_only_one_request_is_sent_on_server_error():
    attempts = []

    def handler(request: httpx.Request) -> httpx.Response:
        attempts.append(request)
        return httpx.Response(503, json={"error": {"message": "overloaded"}})

    response = await _client(handler).ask("q")

    assert response.success is False
    assert "503" in response.error
    assert len(attempts) == 1


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "reply",
    [
        httpx.Response(200, json={"unexpected": True}),
        httpx.Response(200, json={"model": "sonar", "choices": []}),
        httpx.Response(200, text="<html>gateway</html>", headers={"content-type": "text/html"}),
    ],
)
async def test_malformed_body_is_a_failure(reply):
    response = await _client(lambda request: reply).ask("q")

    assert response.success is False
    assert response.error.startswith("Malformed response from Perplexity API")


@pytest.mark.asyncio
async def test_connection_error_is_a_failure():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    response = await _client(handler).ask("q")

    assert response.success is False
    assert response.error.startswith("Perplexity API error")


@pytest.mark.asyncio
async def test_timeout_is_reported_instead_of_hanging():
    async def handler(request: httpx.Request) -> httpx.Response:
        await asyncio.sleep(5)
        return httpx.Response(200, json=COMPLETION)

    client = _client(handler, request_timeout=0.05)

    started = time.perf_counter()
    response = await client.ask("q")
    elapsed = time.perf_counter() - started

    assert response.success is False
    assert "timed out after 0.05s" in response.error
    assert elapsed < 2


@pytest.mark.asyncio
async def test_executor_turns_provider_timeout_into_failure():
    async def handler(request: httpx.Request) -> httpx.Response:
        await asyncio.sleep(5)
        return httpx.Response(200, json=COMPLETION)

    executor = ToolExecutor(_client(handler, request_timeout=0.05))

    result = await asyncio.wait_for(executor.execute(ASK_TOOL, {"prompt": "q"}), timeout=2)

    assert isinstance(result, Failure)
    assert "timed out" in result.message
