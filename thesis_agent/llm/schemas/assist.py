"""Pydantic schemas for the task list and document assistance endpoints."""

from __future__ import annotations

from pydantic import AliasChoices, BaseModel, Field


class ModifyTaskListRequest(BaseModel):
    instructions: str = Field(..., min_length=1)
    task_list: list[str] = Field(
        default_factory=list, validation_alias=AliasChoices("task_list", "taskList")
    )


class SummarizeDocumentRequest(BaseModel):
    document_data_uri: str = Field(
        ...,
        min_length=1,
        validation_alias=AliasChoices("document_data_uri", "documentDataUri"),
        description="Document as 'data:<mimetype>;base64,<encoded_data>'",
    )


class SummarizeDocumentResponse(BaseModel):
    summary: str
