import json

import pytest

from perplexity_bridge.mcp.server import ProtocolTransport
from perplexity_bridge.scripts import export_tools


@pytest.mark.asyncio
async def test_collect_tools_lists_published_tools_with_usage(executor):
    tools = await export_tools.collect_tools(ProtocolTransport(executor))

    assert [tool["name"] for tool in tools] == ["perplexity_ask", "perplexity_search"]
    assert tools[0]["usage"]["example"]["prompt"]
    assert tools[1]["usage"]["example"] == {"query": "Latest news about Spring Conference 2025"}
    assert tools[1]["inputSchema"]["required"] == ["query"]


def test_build_export_wraps_tools_with_server_info():
    export = export_tools.build_export([{"name": "perplexity_ask"}])

    assert export["server"]["name"] == "Perplexity MCP Server"
    assert export["server"]["version"] == "1.0.0"
    assert export["tools"] == [{"name": "perplexity_ask"}]


def test_unknown_tool_has_placeholder_usage():
    assert export_tools.usage_example("nope") == {"description": "Unknown tool", "example": {}}


def test_names_flag_prints_one_name_per_line(monkeypatch, capsys, settings, executor):
    monkeypatch.setattr(export_tools, "load_settings", lambda: settings)
    monkeypatch.setattr(export_tools, "build_executor", lambda settings: executor)

    export_tools.main(["--names"])

    assert capsys.readouterr().out.splitlines() == ["perplexity_ask", "perplexity_search"]


def test_stdout_is_pure_json_with_real_client(monkeypatch, capsys, settings):
    monkeypatch.setattr(export_tools, "load_settings", lambda: settings)

    export_tools.main([])

    export = json.loads(capsys.readouterr().out)
    assert [tool["name"] for tool in export["tools"]] == ["perplexity_ask", "perplexity_search"]
    assert export["server"]["name"] == "Perplexity MCP Server"


def test_export_closes_the_provider(monkeypatch, capsys, settings, provider, executor):
    monkeypatch.setattr(export_tools, "load_settings", lambda: settings)
    monkeypatch.setattr(export_tools, "build_executor", lambda settings: executor)

    export_tools.main(["--names"])

    capsys.readouterr()
    assert provider.closed is True
