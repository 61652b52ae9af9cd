"""Pydantic schemas for the agent endpoint."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Literal

from pydantic import BaseModel, Field

from ...core.types import ToolInvocationResult


class ChatTurn(BaseModel):
    role: Literal["user", "agent"]
    content: str


class AgentRequest(BaseModel):
    user_request: str = Field(..., min_length=1, description="Free-text instruction")
    chat_history: list[ChatTurn] = Field(
        default_factory=list, description="Previous turns, oldest first"
    )
    user_name: str | None = Field(None, description="Display name used to personalise replies")


class ActionTaken(BaseModel):
    tool_name: str
    input: Any = None
    output: dict[str, Any]
    entity_id: str | None = None
    latency_ms: float = 0.0
    timestamp: datetime

    @property
    def success(self) -> bool:
        return bool(self.output.get("success"))

    @classmethod
    def from_result(cls, result: ToolInvocationResult) -> "ActionTaken":
        return cls(
            tool_name=result.tool_name,
            input=result.input,
            output=dict(result.output),
            entity_id=result.entity_id,
            latency_ms=result.latency_ms,
            timestamp=result.timestamp,
        )


class AgentResponse(BaseModel):
    response_message: str = Field(..., min_length=1)
    actions_taken: list[ActionTaken] | None = None
    degraded: bool = False
