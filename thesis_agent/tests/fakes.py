"""Test doubles shared by the test-suite."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any, Mapping, Sequence

from thesis_agent.core.exceptions import RefinementError, StoreError
from thesis_agent.core.store import InMemoryRecordStore, Record
from thesis_agent.core.types import RefinementResult, ToolInvocationRequest
from thesis_agent.llm.services.oracle_client import Completion


def tool_call(tool_name: str, /, **arguments: Any) -> ToolInvocationRequest:
    return ToolInvocationRequest(tool_name=tool_name, input=arguments)


def json_completion(payload: Mapping[str, Any]) -> Completion:
    return Completion(message=json.dumps(payload, ensure_ascii=False), finish_reason="stop")


@dataclass
class OracleCall:
    system_prompt: str
    user_prompt: str
    tool_specs: list[dict[str, Any]] | None
    json_mode: bool


class FakeOracle:
    """Replays scripted completions (or raises scripted exceptions) in order."""

    def __init__(self, *script: Completion | Exception) -> None:
        self._script = list(script)
        self.calls: list[OracleCall] = []

    def queue(self, *steps: Completion | Exception) -> None:
        self._script.extend(steps)

    async def complete(
        self,
        system_prompt: str,
        user_prompt: str,
        tool_specs: Sequence[dict[str, Any]] | None = None,
        *,
        json_mode: bool = False,
    ) -> Completion:
        self.calls.append(
            OracleCall(
                system_prompt=system_prompt,
                user_prompt=user_prompt,
                tool_specs=list(tool_specs) if tool_specs is not None else None,
                json_mode=json_mode,
            )
        )
        if not self._script:
            raise AssertionError("FakeOracle script exhausted")
        step = self._script.pop(0)
        if isinstance(step, Exception):
            raise step
        return step


class SpyStore(InMemoryRecordStore):
    """In-memory store that records calls and can fail on demand."""

    def __init__(
        self,
        *,
        fail_inserts: int = 0,
        fail_tables: Sequence[str] = (),
        fail_queries: bool = False,
        permanent: bool = False,
    ) -> None:
        super().__init__()
        self.fail_inserts = fail_inserts
        self.fail_tables = set(fail_tables)
        self.fail_queries = fail_queries
        self.permanent = permanent
        self.insert_calls: list[tuple[str, dict[str, Any]]] = []
        self.query_calls: list[dict[str, Any]] = []

    async def insert(self, table: str, record: Mapping[str, Any]) -> str:
        self.insert_calls.append((table, dict(record)))
        if self.fail_inserts > 0:
            self.fail_inserts -= 1
            raise StoreError("disque plein", retryable=not self.permanent)
        if table in self.fail_tables:
            raise StoreError(f"table {table} indisponible")
        return await super().insert(table, record)

    async def query(self, table: str, **kwargs: Any) -> list[Record]:
        self.query_calls.append({"table": table, **kwargs})
        if self.fail_queries:
            raise StoreError("lecture impossible")
        return await super().query(table, **kwargs)

    async def rows(self, table: str) -> list[Record]:
        return await InMemoryRecordStore.query(self, table, descending=False)


@dataclass
class FakeRefiner:
    result: RefinementResult | None = None
    error: Exception | None = None
    calls: list[tuple[str, list[str]]] = field(default_factory=list)

    async def refine(self, prompt: str, history: Sequence[str] = ()) -> RefinementResult:
        self.calls.append((prompt, list(history)))
        if self.error is not None:
            raise self.error
        return self.result or RefinementResult(
            refined_prompt=f"{prompt} (affiné)", reasoning="Plus précis."
        )


@dataclass
class FakePlanGenerator:
    plan: str = "I. Introduction\nII. Méthodologie\nIII. Conclusion"
    error: Exception | None = None
    calls: list[str] = field(default_factory=list)

    async def generate(self, topic_or_instructions: str) -> str:
        self.calls.append(topic_or_instructions)
        if self.error is not None:
            raise self.error
        return self.plan


def failing_refiner(message: str = "sortie vide") -> FakeRefiner:
    return FakeRefiner(error=RefinementError(message))
