"""Shared type definitions."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Mapping, Union


class FailureReason(str, Enum):
    """Why a tool execution failed; only used to pick a transport status code."""

    VALIDATION = "validation"
    UNKNOWN_TOOL = "unknown_tool"
    UPSTREAM = "upstream"


@dataclass(frozen=True, slots=True)
class ToolCall:
    """A single request to run a named tool."""

    tool_name: str
    arguments: Mapping[str, Any] = field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class Success:
    payload: Any

    @property
    def ok(self) -> bool:
        return True


@dataclass(frozen=True, slots=True)
class Failure:
    message: str
    reason: FailureReason = FailureReason.UPSTREAM

    @property
    def ok(self) -> bool:
        return False

    @property
    def is_client_error(self) -> bool:
        return self.reason is not FailureReason.UPSTREAM


ToolResult = Union[Success, Failure]
