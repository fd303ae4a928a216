"""HTTP API routers."""

from .health import router as health_router
from .status import router as status_router
from .tools import router as tools_router

__all__ = ["health_router", "status_router", "tools_router"]
