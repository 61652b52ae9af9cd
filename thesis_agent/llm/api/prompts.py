"""Prompt refinement and prompt log endpoints."""

from fastapi import APIRouter, Depends, HTTPException, Query, status

from ...core.exceptions import RefinementError, StoreError
from ...core.logging_config import get_logger
from ..schemas.prompts import (
    LogPromptRequest,
    PromptLogEntry,
    RefinePromptRequest,
    RefinePromptResponse,
)
from ..services.prompt_log import PromptLogService
from .deps import get_prompt_log_service

router = APIRouter(prefix="/prompts", tags=["prompts"])
logger = get_logger(__name__)


@router.post("/refine", response_model=RefinePromptResponse)
async def refine_prompt(
    request: RefinePromptRequest,
    service: PromptLogService = Depends(get_prompt_log_service),
) -> RefinePromptResponse:
    try:
        result = await service.refine(request.prompt, request.history)
    except RefinementError as exc:
        logger.warning("refine_request_failed", error=str(exc))
        raise HTTPException(status.HTTP_502_BAD_GATEWAY, detail=str(exc)) from exc
    return RefinePromptResponse(refined_prompt=result.refined_prompt, reasoning=result.reasoning)


@router.get("/", response_model=list[PromptLogEntry])
async def list_prompt_log(
    limit: int | None = Query(None, ge=1, le=500),
    service: PromptLogService = Depends(get_prompt_log_service),
) -> list[PromptLogEntry]:
    try:
        return await service.list_entries(limit)
    except StoreError as exc:
        logger.error("prompt_log_list_failed", error=str(exc))
        raise HTTPException(status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(exc)) from exc


@router.post("/", response_model=PromptLogEntry, status_code=status.HTTP_201_CREATED)
async def log_prompt(
    request: LogPromptRequest,
    service: PromptLogService = Depends(get_prompt_log_service),
) -> PromptLogEntry:
    try:
        return await service.log_prompt(request.prompt, request.tags)
    except StoreError as exc:
        logger.error("prompt_log_insert_failed", error=str(exc))
        raise HTTPException(status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(exc)) from exc


@router.post(
    "/refine-and-log", response_model=PromptLogEntry, status_code=status.HTTP_201_CREATED
)
async def refine_and_log_prompt(
    request: LogPromptRequest,
    service: PromptLogService = Depends(get_prompt_log_service),
) -> PromptLogEntry:
    try:
        return await service.refine_and_log(request.prompt, request.tags)
    except RefinementError as exc:
        raise HTTPException(
            status.HTTP_502_BAD_GATEWAY,
            detail=f"Affinage échoué, prompt original consigné : {exc}",
        ) from exc
    except StoreError as exc:
        logger.error("prompt_log_insert_failed", error=str(exc))
        raise HTTPException(status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(exc)) from exc
