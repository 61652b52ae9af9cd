"""FastAPI application entry point."""

from contextlib import asynccontextmanager

from fastapi import FastAPI, Request

from ..core.config import AgentSettings, env_file_candidates, get_settings, resolved_env_file
from ..core.logging_config import (
    bind_request_context,
    clear_request_context,
    configure_logging,
    get_logger,
)
from ..core.sqlite_store import SqliteRecordStore
from ..core.store import InMemoryRecordStore, RecordStore
from ..tools.registry import tool_registry
from .api.agent import router as agent_router
from .api.assist import router as assist_router
from .api.health import router as health_router
from .api.prompts import router as prompts_router

configure_logging()
logger = get_logger(__name__)


async def build_record_store(settings: AgentSettings) -> RecordStore:
    if settings.store_backend == "memory":
        logger.warning("memory_store_selected", note="records are lost on shutdown")
        return InMemoryRecordStore()
    store = SqliteRecordStore(settings.database_path)
    await store.init()
    return store


@asynccontextmanager
async def lifespan(app: FastAPI):
    """FastAPI lifespan handler."""

    settings = get_settings()
    logger.info(
        "agent_startup",
        env=settings.app_env,
        log_level=settings.log_level,
        agent_host=settings.agent_host,
        agent_port=settings.agent_port,
        llm_base=str(settings.llm_api_base),
        llm_model=settings.llm_model,
        store_backend=settings.store_backend,
    )
    logger.info(
        "environment_loaded",
        log_file=settings.log_file or "stdout-only",
        env_file=resolved_env_file() or "not-found",
        env_candidates=list(env_file_candidates()),
    )
    app.state.store = await build_record_store(settings)
    logger.info("tool_registry_ready", tools=[tool.name for tool in tool_registry.list_tools()])
    yield
    logger.info("agent_shutdown")


app = FastAPI(
    title="ThesisFlow Agent",
    version="0.1.0",
    description="Natural-language command agent for ThesisFlow.",
    lifespan=lifespan,
)


@app.middleware("http")
async def log_incoming_requests(request: Request, call_next):
    clear_request_context()
    bind_request_context(method=request.method, path=request.url.path)
    logger.info(
        "http_request_received",
        client=str(request.client[0]) if request.client else "unknown",
    )
    response = await call_next(request)
    logger.info(
        "http_request_completed",
        status_code=response.status_code,
    )
    return response

app.include_router(health_router)
app.include_router(agent_router)
app.include_router(prompts_router)
app.include_router(assist_router)


@app.get("/")
async def index() -> dict[str, str]:
    return {"service": "thesis-agent", "status": "ok"}
