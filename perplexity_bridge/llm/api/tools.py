"""Tool endpoints: the HTTP face of the shared tool executor."""

from datetime import datetime, timezone
from typing import Any

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from ...core.exceptions import ToolNotFoundError
from ...core.logging_config import get_logger
from ...core.types import Failure, ToolResult
from ...mcp.catalog import ASK_TOOL, SEARCH_TOOL
from ...mcp.envelope import decode_payload, encode_result, result_payload
from ...mcp.executor import ToolExecutor
from ..schemas.tools import AskRequest, ExecuteRequest, SearchRequest
from .deps import get_executor

router = APIRouter(prefix="/api/tools", tags=["tools"])
logger = get_logger(__name__)


def _timestamp() -> str:
    return datetime.now(tz=timezone.utc).isoformat()


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def _bad_request(message: str) -> JSONResponse:
    return JSONResponse(status_code=400, content={"success": False, "error": message})


def _server_error(route: str, exc: Exception) -> JSONResponse:
    logger.exception("tool_route_failed", route=route)
    return JSONResponse(status_code=500, content={"success": False, "error": str(exc)})


def _tool_response(result: ToolResult, result_value: Any, **echo: Any) -> JSONResponse:
    content: dict[str, Any] = {"success": result.ok, **echo, "result": result_value}
    status_code = 200
    if isinstance(result, Failure):
        content["error"] = result.message
        if result.is_client_error:
            status_code = 400
    content["timestamp"] = _timestamp()
    return JSONResponse(status_code=status_code, content=content)


@router.get("")
async def list_tools(executor: ToolExecutor = Depends(get_executor)) -> Any:
    try:
        return [descriptor.to_dict() for descriptor in executor.catalog.list_tools()]
    except Exception as exc:  # noqa: BLE001 - reported as 500
        return _server_error("list_tools", exc)


@router.get("/{name}")
async def get_tool(name: str, executor: ToolExecutor = Depends(get_executor)) -> Any:
    try:
        return executor.catalog.get_tool(name).to_dict()
    except ToolNotFoundError as exc:
        return JSONResponse(status_code=404, content={"error": str(exc)})
    except Exception as exc:  # noqa: BLE001 - reported as 500
        return _server_error("get_tool", exc)


@router.post("/search")
async def search(body: SearchRequest, executor: ToolExecutor = Depends(get_executor)) -> Any:
    if _is_blank(body.query):
        return _bad_request("query parameter is required")

    logger.info("search_request_received", query=body.query)
    try:
        result = await executor.execute(SEARCH_TOOL, {"query": body.query})
        return _tool_response(result, result_payload(result), query=body.query)
    except Exception as exc:  # noqa: BLE001 - reported as 500
        return _server_error("search", exc)


@router.post("/ask")
async def ask(body: AskRequest, executor: ToolExecutor = Depends(get_executor)) -> Any:
    if _is_blank(body.prompt):
        return _bad_request("prompt parameter is required")

    logger.info("ask_request_received", prompt_preview=body.prompt[:80], model=body.model)
    try:
        result = await executor.execute(ASK_TOOL, body.model_dump(exclude_none=True))
        return _tool_response(result, result_payload(result), prompt=body.prompt)
    except Exception as exc:  # noqa: BLE001 - reported as 500
        return _server_error("ask", exc)


@router.post("/execute")
async def execute(body: ExecuteRequest, executor: ToolExecutor = Depends(get_executor)) -> Any:
    if _is_blank(body.tool_name):
        return _bad_request("toolName parameter is required")

    logger.info("execute_request_received", tool=body.tool_name)
    try:
        result = await executor.execute(body.tool_name, body.arguments or {})
        # Same content text the MCP transport sends. Results always encode to JSON,
        # so the raw-text branch only matters if encode_result ever changes.
        decoded = decode_payload(encode_result(result))
        return _tool_response(result, decoded.value, tool=body.tool_name)
    except Exception as exc:  # noqa: BLE001 - reported as 500
        return _server_error("execute", exc)
