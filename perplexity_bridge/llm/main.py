"""FastAPI application factory for the HTTP transport."""

from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from ..core.config import SERVER_TITLE, SERVER_VERSION, BridgeSettings
from ..core.logging_config import get_logger
from ..mcp.executor import ToolExecutor
from .api.health import router as health_router
from .api.status import router as status_router
from .api.tools import router as tools_router

logger = get_logger(__name__)


def _describe_validation_error(exc: RequestValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return "Invalid request body"
    first = errors[0]
    location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
    message = first.get("msg", "invalid value")
    return f"{location}: {message}" if location else message


async def _validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    message = _describe_validation_error(exc)
    logger.warning("http_request_invalid", path=request.url.path, error=message)
    return JSONResponse(status_code=400, content={"success": False, "error": message})


async def _unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("http_request_failed", path=request.url.path)
    return JSONResponse(status_code=500, content={"success": False, "error": str(exc)})


async def log_incoming_requests(request: Request, call_next):
    logger.info(
        "http_request_received",
        method=request.method,
        path=request.url.path,
        client=str(request.client[0]) if request.client else "unknown",
    )
    response = await call_next(request)
    logger.info(
        "http_request_completed",
        method=request.method,
        path=request.url.path,
        status_code=response.status_code,
    )
    return response


def create_app(executor: ToolExecutor, settings: BridgeSettings | None = None) -> FastAPI:
    """Build the HTTP transport around an already constructed executor."""

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info(
            "http_transport_startup",
            tools=executor.catalog.names(),
            host=settings.http_host if settings else None,
            port=settings.http_port if settings else None,
        )
        yield
        logger.info("http_transport_shutdown")

    app = FastAPI(
        title=SERVER_TITLE,
        version=SERVER_VERSION,
        description="HTTP access to the Perplexity MCP tools.",
        lifespan=lifespan,
    )
    app.state.executor = executor
    app.state.settings = settings

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins if settings else ["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.middleware("http")(log_incoming_requests)
    app.add_exception_handler(RequestValidationError, _validation_error_handler)
    app.add_exception_handler(Exception, _unhandled_error_handler)

    app.include_router(health_router)
    app.include_router(tools_router)
    app.include_router(status_router)
    return app
