"""Export the tools published over MCP as JSON.

Connects an in-memory MCP client to the bridge's protocol transport, so the
output is exactly what stdio clients receive from ``tools/list``.

Usage: ``perplexity-bridge-tools > tools.json`` or ``perplexity-bridge-tools --names``.
"""

from __future__ import annotations

import argparse
import asyncio
import json
import sys
from datetime import datetime, timezone
from typing import Any

from fastmcp import Client

from perplexity_bridge.core.config import SERVER_TITLE, SERVER_VERSION
from perplexity_bridge.core.logging_config import configure_logging
from perplexity_bridge.mcp.catalog import ASK_TOOL, SEARCH_TOOL
from perplexity_bridge.mcp.executor import ToolExecutor
from perplexity_bridge.mcp.server import ProtocolTransport
from perplexity_bridge.scripts.run_bridge import build_executor, load_settings

USAGE_EXAMPLES: dict[str, dict[str, Any]] = {
    ASK_TOOL: {
        "description": "Ask a question to Perplexity Sonar",
        "example": {
            "prompt": "What is the current status of AI development in 2025?",
            "model": "sonar",
            "temperature": 0.7,
            "max_tokens": 1000,
        },
    },
    SEARCH_TOOL: {
        "description": "Search for information with internet access",
        "example": {"query": "Latest news about Spring Conference 2025"},
    },
}


def usage_example(tool_name: str) -> dict[str, Any]:
    return USAGE_EXAMPLES.get(tool_name, {"description": "Unknown tool", "example": {}})


async def collect_tools(transport: ProtocolTransport) -> list[dict[str, Any]]:
    async with Client(transport.server) as client:
        tools = await client.list_tools()
    return [
        {
            "name": tool.name,
            "description": tool.description,
            "inputSchema": tool.inputSchema,
            "usage": usage_example(tool.name),
        }
        for tool in tools
    ]


async def _export(executor: ToolExecutor) -> list[dict[str, Any]]:
    try:
        return await collect_tools(ProtocolTransport(executor))
    finally:
        await executor.aclose()


def build_export(tools: list[dict[str, Any]]) -> dict[str, Any]:
    return {
        "server": {
            "name": SERVER_TITLE,
            "version": SERVER_VERSION,
            "description": "MCP Server for Perplexity AI Integration",
            "timestamp": datetime.now(tz=timezone.utc).isoformat(),
        },
        "tools": tools,
    }


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument("--names", action="store_true", help="print tool names only")
    args = parser.parse_args(argv)

    settings = load_settings()
    # stdout carries the export; logs go to stderr.
    configure_logging(settings)
    try:
        tools = asyncio.run(_export(build_executor(settings)))
    except Exception as exc:  # noqa: BLE001 - reported as a JSON error line
        print(json.dumps({"error": True, "message": str(exc)}), file=sys.stderr)
        raise SystemExit(1) from None

    if args.names:
        for tool in tools:
            print(tool["name"])
        return
    print(json.dumps(build_export(tools), indent=2, ensure_ascii=False))


if __name__ == "__main__":
    main()
