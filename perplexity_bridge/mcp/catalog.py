"""Static tool catalog shared by the MCP and HTTP transports."""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Iterable, Mapping

from ..core.exceptions import ToolNotFoundError
from ..llm.services.perplexity_client import (
    DEFAULT_MAX_TOKENS,
    DEFAULT_MODEL,
    DEFAULT_TEMPERATURE,
)

ASK_TOOL = "perplexity_ask"
SEARCH_TOOL = "perplexity_search"

# Search favours factual recall: low temperature, longer answers.
SEARCH_TEMPERATURE = 0.2
SEARCH_MAX_TOKENS = 1500

SONAR_MODELS: tuple[str, ...] = (
    "sonar",
    "sonar-pro",
    "sonar-reasoning",
    "sonar-reasoning-pro",
    "sonar-deep-research",
)

_MISSING = object()


@dataclass(frozen=True, slots=True)
class FieldSpec:
    type: str
    description: str
    default: Any = _MISSING
    enum: tuple[Any, ...] | None = None

    @property
    def has_default(self) -> bool:
        return self.default is not _MISSING

    def to_schema(self) -> dict[str, Any]:
        schema: dict[str, Any] = {"type": self.type, "description": self.description}
        if self.has_default:
            schema["default"] = self.default
        if self.enum is not None:
            schema["enum"] = list(self.enum)
        return schema


@dataclass(frozen=True, slots=True)
class ToolDescriptor:
    """Name, description and input schema of one tool."""

    name: str
    description: str
    fields: Mapping[str, FieldSpec]
    required: tuple[str, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        unknown = [name for name in self.required if name not in self.fields]
        if unknown:
            msg = f"Tool {self.name!r} requires undeclared fields: {', '.join(unknown)}"
            raise ValueError(msg)
        object.__setattr__(self, "fields", MappingProxyType(dict(self.fields)))

    def input_schema(self) -> dict[str, Any]:
        """JSON schema object published by both transports."""

        return {
            "type": "object",
            "properties": {name: spec.to_schema() for name, spec in self.fields.items()},
            "required": list(self.required),
        }

    def defaults(self) -> dict[str, Any]:
        return {name: spec.default for name, spec in self.fields.items() if spec.has_default}

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "description": self.description,
            "inputSchema": self.input_schema(),
        }


class ToolCatalog:
    """Ordered, read-only registry of tool descriptors."""

    def __init__(self, descriptors: Iterable[ToolDescriptor]) -> None:
        tools: dict[str, ToolDescriptor] = {}
        for descriptor in descriptors:
            if descriptor.name in tools:
                raise ValueError(f"Duplicate tool name: {descriptor.name}")
            tools[descriptor.name] = descriptor
        self._tools = MappingProxyType(tools)

    def list_tools(self) -> list[ToolDescriptor]:
        return list(self._tools.values())

    def get_tool(self, name: str) -> ToolDescriptor:
        try:
            return self._tools[name]
        except KeyError:
            raise ToolNotFoundError(name) from None

    def names(self) -> list[str]:
        return list(self._tools)

    def __contains__(self, name: object) -> bool:
        return name in self._tools

    def __len__(self) -> int:
        return len(self._tools)


PERPLEXITY_ASK = ToolDescriptor(
    name=ASK_TOOL,
    description=(
        "Ask a question to Perplexity Sonar AI model. This tool uses Perplexity API "
        "to get answers with real-time internet search capabilities."
    ),
    fields={
        "prompt": FieldSpec("string", "The question or prompt to send to Perplexity Sonar"),
        "model": FieldSpec(
            "string",
            f"Perplexity model to use (default: {DEFAULT_MODEL})",
            default=DEFAULT_MODEL,
            enum=SONAR_MODELS,
        ),
        "temperature": FieldSpec(
            "number",
            f"Temperature for response generation (0.0-1.0, default: {DEFAULT_TEMPERATURE})",
            default=DEFAULT_TEMPERATURE,
        ),
        "max_tokens": FieldSpec(
            "number",
            f"Maximum tokens in response (default: {DEFAULT_MAX_TOKENS})",
            default=DEFAULT_MAX_TOKENS,
        ),
    },
    required=("prompt",),
)

PERPLEXITY_SEARCH = ToolDescriptor(
    name=SEARCH_TOOL,
    description=(
        "Search for information using Perplexity with internet access. "
        "Returns detailed answers with citations."
    ),
    fields={"query": FieldSpec("string", "Search query")},
    required=("query",),
)

DEFAULT_CATALOG = ToolCatalog([PERPLEXITY_ASK, PERPLEXITY_SEARCH])
