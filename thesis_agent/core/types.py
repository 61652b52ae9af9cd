"""Shared type definitions."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Mapping


def utc_now() -> datetime:
    return datetime.now(tz=timezone.utc)


@dataclass(slots=True, frozen=True)
class RefinementResult:
    refined_prompt: str
    reasoning: str


@dataclass(slots=True, frozen=True)
class ToolInvocationRequest:
    """A tool call requested by the model; ``input`` is untrusted until an executor validates it."""

    tool_name: str
    input: Any
    call_id: str | None = None


@dataclass(slots=True)
class ToolInvocationResult:
    """Represents the outcome of executing one tool invocation."""

    tool_name: str
    input: Any
    output: Mapping[str, Any]
    entity_id: str | None = None
    latency_ms: float = 0.0
    timestamp: datetime = field(default_factory=utc_now)

    @property
    def success(self) -> bool:
        return bool(self.output.get("success"))

    @property
    def message(self) -> str:
        return str(self.output.get("message", ""))
