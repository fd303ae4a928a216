"""FastMCP server exposing the tool catalog over stdio."""

from __future__ import annotations

from enum import Enum
from typing import Any

from fastmcp import FastMCP
from fastmcp.exceptions import ToolError
from fastmcp.server.middleware import Middleware, MiddlewareContext
from fastmcp.tools import Tool
from fastmcp.tools.tool import ToolResult
from pydantic import PrivateAttr

from ..core.config import SERVER_NAME
from ..core.exceptions import TransportError
from ..core.logging_config import get_logger
from ..core.types import Failure
from .catalog import ToolDescriptor
from .envelope import encode_result
from .executor import ToolExecutor

logger = get_logger(__name__)


class ChannelState(str, Enum):
    DISCONNECTED = "disconnected"
    CONNECTED = "connected"
    SERVING = "serving"
    CLOSED = "closed"


class CatalogTool(Tool):
    """MCP tool whose schema comes from the catalog and whose work is the executor's."""

    _executor: Any = PrivateAttr(default=None)

    @classmethod
    def from_descriptor(cls, descriptor: ToolDescriptor, executor: ToolExecutor) -> "CatalogTool":
        tool = cls(
            name=descriptor.name,
            description=descriptor.description,
            parameters=descriptor.input_schema(),
        )
        tool._executor = executor
        return tool

    async def run(self, arguments: dict[str, Any]) -> ToolResult:
        result = await self._executor.execute(self.name, arguments)
        text = encode_result(result)
        if isinstance(result, Failure):
            # FastMCP turns ToolError into a content block flagged with isError.
            raise ToolError(text)
        return ToolResult(content=text)


class _ChannelStateMiddleware(Middleware):
    def __init__(self, transport: "ProtocolTransport") -> None:
        self._transport = transport

    async def on_request(self, context: MiddlewareContext, call_next):
        self._transport.mark_serving()
        logger.debug("mcp_request", method=context.method)
        return await call_next(context)


class ProtocolTransport:
    """MCP channel: answers tools/list and tools/call until the channel closes."""

    def __init__(self, executor: ToolExecutor, *, name: str = SERVER_NAME) -> None:
        self._executor = executor
        self.state = ChannelState.DISCONNECTED
        self.server = FastMCP(name=name)
        for descriptor in executor.catalog.list_tools():
            self.server.add_tool(CatalogTool.from_descriptor(descriptor, executor))
        self.server.add_middleware(_ChannelStateMiddleware(self))

    def mark_serving(self) -> None:
        # MCP clients may only send requests once the initialize handshake is done.
        if self.state is ChannelState.CONNECTED:
            self.state = ChannelState.SERVING
            logger.info("mcp_channel_serving")

    def mark_connected(self) -> None:
        self.state = ChannelState.CONNECTED
        logger.info("mcp_channel_connected")

    def mark_closed(self) -> None:
        self.state = ChannelState.CLOSED
        logger.info("mcp_channel_closed")

    async def serve(self) -> None:
        """Serve over stdio; any channel failure is fatal and re-raised."""

        self.mark_connected()
        try:
            await self.server.run_async(transport="stdio")
        except Exception as exc:
            logger.exception("mcp_channel_failed")
            raise TransportError(f"MCP stdio channel failed: {exc}") from exc
        finally:
            self.mark_closed()
