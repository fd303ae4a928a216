"""Health check endpoints."""

from datetime import datetime, timezone

from fastapi import APIRouter

from ...core.config import SERVER_TITLE, SERVER_VERSION

router = APIRouter(tags=["health"])


@router.get("/health")
async def health_check() -> dict[str, str]:
    return {
        "status": "ok",
        "server": SERVER_TITLE,
        "version": SERVER_VERSION,
        "timestamp": datetime.now(tz=timezone.utc).isoformat(),
    }
