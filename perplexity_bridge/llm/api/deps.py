"""Request-scoped accessors for objects owned by the application."""

from fastapi import Request

from ...core.config import BridgeSettings
from ...mcp.executor import ToolExecutor


def get_executor(request: Request) -> ToolExecutor:
    return request.app.state.executor


def get_bridge_settings(request: Request) -> BridgeSettings | None:
    return request.app.state.settings
