"""Task list rewriting and document summary endpoints."""

from fastapi import APIRouter, Depends, HTTPException, status

from ...core.exceptions import DocumentError, ModelError, UnsupportedDocumentError
from ...core.logging_config import get_logger
from ..schemas.assist import (
    ModifyTaskListRequest,
    SummarizeDocumentRequest,
    SummarizeDocumentResponse,
)
from ..services.document_summarizer import DocumentSummarizer
from ..services.task_list_modifier import TaskListModification, TaskListModifier
from .deps import get_document_summarizer, get_task_list_modifier

router = APIRouter(tags=["assist"])
logger = get_logger(__name__)


@router.post("/tasks/modify", response_model=TaskListModification)
async def modify_task_list(
    request: ModifyTaskListRequest,
    modifier: TaskListModifier = Depends(get_task_list_modifier),
) -> TaskListModification:
    try:
        return await modifier.modify(request.instructions, request.task_list)
    except ModelError as exc:
        logger.warning("task_list_modification_failed", error=str(exc))
        raise HTTPException(status.HTTP_502_BAD_GATEWAY, detail=str(exc)) from exc


@router.post("/documents/summarize", response_model=SummarizeDocumentResponse)
async def summarize_document(
    request: SummarizeDocumentRequest,
    summarizer: DocumentSummarizer = Depends(get_document_summarizer),
) -> SummarizeDocumentResponse:
    try:
        summary = await summarizer.summarize(request.document_data_uri)
    except UnsupportedDocumentError as exc:
        raise HTTPException(status.HTTP_415_UNSUPPORTED_MEDIA_TYPE, detail=str(exc)) from exc
    except DocumentError as exc:
        raise HTTPException(status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(exc)) from exc
    except ModelError as exc:
        logger.warning("document_summary_failed", error=str(exc))
        raise HTTPException(status.HTTP_502_BAD_GATEWAY, detail=str(exc)) from exc
    return SummarizeDocumentResponse(summary=summary)
