"""FastAPI dependencies: identity, user-scoped store and service wiring."""

from __future__ import annotations

from fastapi import Depends, Header, HTTPException, Request, status

from ...core.config import AgentSettings, get_settings
from ...core.exceptions import ConfigurationError
from ...core.logging_config import bind_request_context, get_logger
from ...core.store import RecordStore, ScopedRecordStore
from ..services.document_summarizer import DocumentSummarizer
from ..services.oracle_client import LanguageModelOracle, get_oracle
from ..services.prompt_log import PromptLogService
from ..services.prompt_refiner import PromptRefiner
from ..services.task_list_modifier import TaskListModifier
from ..services.thesis_agent import ThesisAgent, build_thesis_agent

logger = get_logger(__name__)


def get_record_store(request: Request) -> RecordStore:
    store = getattr(request.app.state, "store", None)
    if store is None:
        raise HTTPException(status.HTTP_503_SERVICE_UNAVAILABLE, detail="Store is not initialised")
    return store


def get_language_model() -> LanguageModelOracle:
    try:
        return get_oracle()
    except ConfigurationError as exc:
        logger.error("oracle_unavailable", error=str(exc))
        raise HTTPException(status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(exc)) from exc


async def get_current_user(
    x_user_id: str | None = Header(None, alias="X-User-Id"),
    settings: AgentSettings = Depends(get_settings),
) -> str:
    user_id = (x_user_id or "").strip() or settings.default_user_id
    if not user_id:
        raise HTTPException(status.HTTP_401_UNAUTHORIZED, detail="Utilisateur non authentifié.")
    bind_request_context(user_id=user_id)
    return user_id


def get_scoped_store(
    store: RecordStore = Depends(get_record_store),
    user_id: str = Depends(get_current_user),
) -> RecordStore:
    return ScopedRecordStore(store, user_id)


def get_thesis_agent(
    store: RecordStore = Depends(get_scoped_store),
    oracle: LanguageModelOracle = Depends(get_language_model),
    settings: AgentSettings = Depends(get_settings),
) -> ThesisAgent:
    return build_thesis_agent(store, oracle, settings)


def get_prompt_log_service(
    store: RecordStore = Depends(get_scoped_store),
    oracle: LanguageModelOracle = Depends(get_language_model),
    settings: AgentSettings = Depends(get_settings),
) -> PromptLogService:
    return PromptLogService(store, PromptRefiner(oracle), settings)


def get_task_list_modifier(
    _user_id: str = Depends(get_current_user),
    oracle: LanguageModelOracle = Depends(get_language_model),
) -> TaskListModifier:
    return TaskListModifier(oracle)


def get_document_summarizer(
    _user_id: str = Depends(get_current_user),
    oracle: LanguageModelOracle = Depends(get_language_model),
) -> DocumentSummarizer:
    return DocumentSummarizer(oracle)
