"""Encoding of tool results into content text, and the best-effort reverse."""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Union

from ..core.types import Success, ToolResult


def result_payload(result: ToolResult) -> dict[str, Any]:
    """Dictionary form of a tool result, identical on every transport."""

    if isinstance(result, Success):
        payload = result.payload
        if hasattr(payload, "to_payload"):
            return payload.to_payload()
        return payload
    return {"success": False, "error": result.message}


def encode_result(result: ToolResult) -> str:
    """Render a tool result as the text of a single content block."""

    indent = 2 if isinstance(result, Success) else None
    return json.dumps(result_payload(result), indent=indent, ensure_ascii=False)


@dataclass(frozen=True, slots=True)
class StructuredPayload:
    value: Any


@dataclass(frozen=True, slots=True)
class RawPayload:
    text: str

    @property
    def value(self) -> str:
        return self.text


DecodedPayload = Union[StructuredPayload, RawPayload]


def decode_payload(text: str | None) -> DecodedPayload:
    """Parse content text as JSON; anything that does not parse stays raw text."""

    if text is None:
        return RawPayload("")
    try:
        return StructuredPayload(json.loads(text))
    except json.JSONDecodeError:
        return RawPayload(text)


__all__ = [
    "DecodedPayload",
    "RawPayload",
    "StructuredPayload",
    "decode_payload",
    "encode_result",
    "result_payload",
]
