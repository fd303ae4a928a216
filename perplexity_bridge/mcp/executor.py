"""Tool execution shared by every transport.

Both the MCP server and the HTTP routes hold the same ``ToolExecutor`` and
never interpret tool arguments themselves.
"""

from __future__ import annotations

import time
from dataclasses import asdict, dataclass
from typing import Any, Callable, Mapping

from ..core.exceptions import ConfigurationError, ToolNotFoundError
from ..core.logging_config import get_logger
from ..core.types import Failure, FailureReason, Success, ToolCall, ToolResult
from ..llm.services.perplexity_client import DEFAULT_MODEL, PerplexityClient
from .catalog import (
    ASK_TOOL,
    DEFAULT_CATALOG,
    SEARCH_MAX_TOKENS,
    SEARCH_TEMPERATURE,
    SEARCH_TOOL,
    ToolCatalog,
    ToolDescriptor,
)

logger = get_logger(__name__)


@dataclass(frozen=True, slots=True)
class ProviderRequest:
    """Arguments of one ``PerplexityClient.ask`` call."""

    prompt: str
    model: str
    temperature: float
    max_tokens: int


def _is_missing(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def _choice(descriptor: ToolDescriptor, arguments: Mapping[str, Any], name: str) -> Any:
    value = arguments[name]
    allowed = descriptor.fields[name].enum
    if allowed is not None and value not in allowed:
        raise ValueError(f"{name} must be one of: {', '.join(map(str, allowed))}")
    return value


def _temperature(value: Any) -> float:
    if isinstance(value, bool):
        raise ValueError("temperature must be a number")
    try:
        temperature = float(value)
    except (TypeError, ValueError):
        raise ValueError("temperature must be a number") from None
    if not 0.0 <= temperature <= 1.0:
        raise ValueError("temperature must be between 0 and 1")
    return temperature


def _max_tokens(value: Any) -> int:
    if isinstance(value, bool):
        raise ValueError("max_tokens must be a positive integer")
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise ValueError("max_tokens must be a positive integer") from None
    if not number.is_integer() or number <= 0:
        raise ValueError("max_tokens must be a positive integer")
    return int(number)


def _ask_request(descriptor: ToolDescriptor, arguments: Mapping[str, Any]) -> ProviderRequest:
    return ProviderRequest(
        prompt=str(arguments["prompt"]),
        model=_choice(descriptor, arguments, "model"),
        temperature=_temperature(arguments["temperature"]),
        max_tokens=_max_tokens(arguments["max_tokens"]),
    )


def _search_request(descriptor: ToolDescriptor, arguments: Mapping[str, Any]) -> ProviderRequest:
    # Caller-supplied sampling options are ignored; search always uses its own policy.
    return ProviderRequest(
        prompt=str(arguments["query"]),
        model=DEFAULT_MODEL,
        temperature=SEARCH_TEMPERATURE,
        max_tokens=SEARCH_MAX_TOKENS,
    )


RequestBuilder = Callable[[ToolDescriptor, Mapping[str, Any]], ProviderRequest]

_REQUEST_BUILDERS: dict[str, RequestBuilder] = {
    ASK_TOOL: _ask_request,
    SEARCH_TOOL: _search_request,
}


class ToolExecutor:
    """Validate a tool call, run it against Perplexity and return one ToolResult."""

    def __init__(
        self,
        provider: PerplexityClient,
        catalog: ToolCatalog = DEFAULT_CATALOG,
    ) -> None:
        unmapped = [name for name in catalog.names() if name not in _REQUEST_BUILDERS]
        if unmapped:
            raise ConfigurationError(f"No request mapping for tools: {', '.join(unmapped)}")
        self._provider = provider
        self._catalog = catalog

    @property
    def catalog(self) -> ToolCatalog:
        return self._catalog

    async def aclose(self) -> None:
        await self._provider.aclose()

    def build_request(self, call: ToolCall) -> ProviderRequest | Failure:
        """Resolve a call into provider arguments, or the validation failure."""

        try:
            descriptor = self._catalog.get_tool(call.tool_name)
        except ToolNotFoundError:
            return Failure(f"Unknown tool: {call.tool_name}", FailureReason.UNKNOWN_TOOL)

        for field_name in descriptor.required:
            if _is_missing(call.arguments.get(field_name)):
                return Failure(f"{field_name} is required", FailureReason.VALIDATION)

        resolved = descriptor.defaults()
        resolved.update(
            (name, value) for name, value in call.arguments.items() if value is not None
        )
        try:
            return _REQUEST_BUILDERS[descriptor.name](descriptor, resolved)
        except ValueError as exc:
            return Failure(str(exc), FailureReason.VALIDATION)

    async def execute(self, tool_name: str, arguments: Mapping[str, Any] | None = None) -> ToolResult:
        call = ToolCall(tool_name=tool_name, arguments=dict(arguments or {}))
        started = time.perf_counter()

        request = self.build_request(call)
        if isinstance(request, Failure):
            logger.warning(
                "tool_call_rejected",
                tool=tool_name,
                reason=request.reason.value,
                error=request.message,
            )
            return request

        try:
            response = await self._provider.ask(**asdict(request))
        except Exception as exc:  # noqa: BLE001 - provider errors become a Failure envelope
            logger.exception("tool_call_provider_error", tool=tool_name)
            return Failure(str(exc) or type(exc).__name__, FailureReason.UPSTREAM)

        latency_ms = round((time.perf_counter() - started) * 1000, 1)
        if not response.success:
            logger.warning(
                "tool_call_failed",
                tool=tool_name,
                latency_ms=latency_ms,
                error=response.error,
            )
            return Failure(response.error or "Perplexity API request failed", FailureReason.UPSTREAM)

        logger.info("tool_call_executed", tool=tool_name, latency_ms=latency_ms)
        return Success(response)
