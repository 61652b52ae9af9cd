"""HTTP API routers."""

from .agent import router as agent_router
from .assist import router as assist_router
from .health import router as health_router
from .prompts import router as prompts_router

__all__ = ["agent_router", "assist_router", "health_router", "prompts_router"]
