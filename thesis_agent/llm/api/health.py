"""Health check endpoints."""

from datetime import datetime, timezone

from fastapi import APIRouter

from ...tools.registry import tool_registry

router = APIRouter(prefix="/health", tags=["health"])


@router.get("/")
async def health_check() -> dict[str, str | int]:
    return {
        "status": "ok",
        "tools": len(tool_registry),
        "timestamp": datetime.now(tz=timezone.utc).isoformat(),
    }
