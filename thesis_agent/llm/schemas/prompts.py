"""Pydantic schemas for the prompt refinement and prompt log endpoints."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field, field_validator

from ...tools.prompt_log import parse_tags


class RefinePromptRequest(BaseModel):
    prompt: str = Field(..., min_length=1)
    history: list[str] | None = Field(
        None, description="Explicit history; when omitted the user's prompt log is used"
    )


class RefinePromptResponse(BaseModel):
    refined_prompt: str
    reasoning: str


class LogPromptRequest(BaseModel):
    prompt: str = Field(..., min_length=1)
    tags: list[str] = Field(default_factory=list)

    @field_validator("tags", mode="before")
    @classmethod
    def _split_tags(cls, value: Any) -> list[str]:
        return parse_tags(value)


class PromptLogEntry(BaseModel):
    id: str
    original_prompt: str
    refined_prompt: str | None = None
    reasoning: str | None = None
    timestamp: datetime
    tags: list[str] = Field(default_factory=list)

    @classmethod
    def from_record(cls, record: dict[str, Any]) -> "PromptLogEntry":
        return cls(
            id=record["id"],
            original_prompt=record.get("original_prompt") or "",
            refined_prompt=record.get("refined_prompt"),
            reasoning=record.get("reasoning"),
            timestamp=record.get("timestamp") or record["created_at"],
            tags=list(record.get("tags") or []),
        )
