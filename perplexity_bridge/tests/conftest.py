from __future__ import annotations

import pytest

from perplexity_bridge.core.config import BridgeSettings
from perplexity_bridge.llm.main import create_app
from perplexity_bridge.llm.schemas.completion import CompletionUsage, ProviderResponse
from perplexity_bridge.mcp.executor import ToolExecutor

TEST_API_KEY = "pplx-test-key-1234"


class StubProvider:
    """Records every ask() call and answers with a fixed response."""

    def __init__(self, response: ProviderResponse | None = None) -> None:
        self.calls: list[dict] = []
        self.closed = False
        self.response = response or ProviderResponse(
            success=True,
            answer="hi",
            model="sonar",
            usage=CompletionUsage(prompt_tokens=3, completion_tokens=1, total_tokens=4),
            citations=["https://example.com/a", "https://example.com/b"],
        )

    async def ask(self, prompt, model, temperature, max_tokens):
        self.calls.append(
            {
                "prompt": prompt,
                "model": model,
                "temperature": temperature,
                "max_tokens": max_tokens,
            }
        )
        return self.response

    async def aclose(self):
        self.closed = True


def make_settings(**overrides) -> BridgeSettings:
    values = {"perplexity_api_key": TEST_API_KEY}
    values.update(overrides)
    return BridgeSettings(_env_file=None, **values)


@pytest.fixture
def settings() -> BridgeSettings:
    return make_settings()


@pytest.fixture
def provider() -> StubProvider:
    return StubProvider()


@pytest.fixture
def executor(provider) -> ToolExecutor:
    return ToolExecutor(provider)


@pytest.fixture
def app(executor, settings):
    return create_app(executor, settings)
