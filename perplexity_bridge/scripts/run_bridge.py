"""Run the Perplexity bridge: MCP over stdio and, unless disabled, HTTP.

The API key is checked before any transport is created; without it the
process prints a single error line on stderr and exits with status 1.
"""

from __future__ import annotations

import asyncio
import sys

import uvicorn
from pydantic import ValidationError

from perplexity_bridge.core.config import BridgeSettings, get_settings
from perplexity_bridge.core.logging_config import configure_logging, get_logger
from perplexity_bridge.llm.main import create_app
from perplexity_bridge.llm.services.perplexity_client import PerplexityClient
from perplexity_bridge.mcp.executor import ToolExecutor
from perplexity_bridge.mcp.server import ProtocolTransport

logger = get_logger(__name__)


def startup_error_line(exc: ValidationError) -> str:
    """One-line description of why settings could not be loaded."""

    for error in exc.errors():
        if "perplexity_api_key" in error.get("loc", ()):
            return "Error: PERPLEXITY_API_KEY environment variable is not set"
    first = exc.errors()[0] if exc.errors() else {}
    location = ".".join(str(part) for part in first.get("loc", ()))
    return f"Error: invalid configuration {location}: {first.get('msg', 'invalid value')}"


def load_settings() -> BridgeSettings:
    try:
        return get_settings()
    except ValidationError as exc:
        print(startup_error_line(exc), file=sys.stderr)
        raise SystemExit(1) from None


def build_executor(settings: BridgeSettings) -> ToolExecutor:
    return ToolExecutor(PerplexityClient(settings))


async def _serve_http(settings: BridgeSettings, executor: ToolExecutor) -> None:
    app = create_app(executor, settings)
    config = uvicorn.Config(
        app,
        host=settings.http_host,
        port=settings.http_port,
        log_config=None,
    )
    logger.info("http_transport_listening", host=settings.http_host, port=settings.http_port)
    await uvicorn.Server(config).serve()


async def run_transports(settings: BridgeSettings, executor: ToolExecutor | None = None) -> None:
    """Start every enabled transport and wait until all of them finish."""

    owned = executor is None
    executor = executor or build_executor(settings)
    transports = []
    if settings.enable_rest:
        transports.append(_serve_http(settings, executor))
    if settings.enable_stdio:
        transports.append(ProtocolTransport(executor).serve())

    try:
        if not transports:
            logger.warning("no_transport_enabled")
            return

        logger.info(
            "bridge_startup",
            env=settings.app_env,
            rest=settings.enable_rest,
            stdio=settings.enable_stdio,
            perplexity_base=str(settings.perplexity_api_base),
        )
        await asyncio.gather(*transports)
    finally:
        if owned:
            await executor.aclose()


def main() -> None:
    settings = load_settings()
    configure_logging(settings)

    try:
        asyncio.run(run_transports(settings))
    except KeyboardInterrupt:
        logger.info("bridge_interrupted")
    except Exception:
        logger.exception("bridge_fatal_error")
        raise SystemExit(1) from None


if __name__ == "__main__":
    main()
