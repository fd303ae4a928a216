"""Server status endpoint."""

from datetime import datetime, timezone
from typing import Any

from fastapi import APIRouter, Depends, Request
from fastapi.routing import APIRoute

from ...core.config import SERVER_TITLE, SERVER_VERSION, BridgeSettings
from ...mcp.executor import ToolExecutor
from .deps import get_bridge_settings, get_executor

router = APIRouter(prefix="/api", tags=["status"])


def route_table(request: Request) -> list[str]:
    """``METHOD /path`` for every API route, in registration order."""

    endpoints: list[str] = []
    for route in request.app.routes:
        if not isinstance(route, APIRoute):
            continue
        for method in sorted(route.methods):
            endpoints.append(f"{method} {route.path}")
    return endpoints


@router.get("/status")
async def server_status(
    request: Request,
    executor: ToolExecutor = Depends(get_executor),
    settings: BridgeSettings | None = Depends(get_bridge_settings),
) -> dict[str, Any]:
    transports = ["http"]
    if settings is None or settings.enable_stdio:
        transports.insert(0, "stdio")
    return {
        "success": True,
        "server": SERVER_TITLE,
        "version": SERVER_VERSION,
        "transport": transports,
        "tools": executor.catalog.names(),
        "endpoints": route_table(request),
        "timestamp": datetime.now(tz=timezone.utc).isoformat(),
    }
