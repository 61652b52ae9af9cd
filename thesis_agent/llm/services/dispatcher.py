"""Executor dispatcher: runs planned tool invocations one after another."""

from __future__ import annotations

import asyncio
import time
from typing import Iterable, Mapping

from ...core.logging_config import get_logger
from ...core.types import ToolInvocationRequest, ToolInvocationResult
from ...tools.executors import ToolExecutor
from ...tools.registry import ToolKind, ToolRegistry, tool_registry
from ...tools.schemas import ToolOutput

logger = get_logger(__name__)


class Dispatcher:
    """Sequential, order-preserving dispatch.

    A failed invocation never stops the ones after it and nothing is rolled back.
    Only store failures (``retryable`` outputs) are retried, and only when
    ``max_retries`` is positive.
    """

    def __init__(
        self,
        executors: Mapping[ToolKind, ToolExecutor],
        registry: ToolRegistry = tool_registry,
        *,
        max_retries: int = 0,
        retry_backoff: float = 0.0,
    ) -> None:
        self._executors = dict(executors)
        self._registry = registry
        self._max_retries = max(0, max_retries)
        self._retry_backoff = max(0.0, retry_backoff)

    async def dispatch(
        self, invocations: Iterable[ToolInvocationRequest]
    ) -> list[ToolInvocationResult]:
        results: list[ToolInvocationResult] = []
        for position, invocation in enumerate(invocations):
            result = await self._dispatch_one(invocation)
            logger.info(
                "tool_call_executed",
                position=position,
                tool=invocation.tool_name,
                success=result.success,
                entity_id=result.entity_id,
                latency_ms=round(result.latency_ms, 2),
            )
            results.append(result)
        return results

    async def _dispatch_one(self, invocation: ToolInvocationRequest) -> ToolInvocationResult:
        started = time.perf_counter()
        kind = self._registry.resolve(invocation.tool_name)
        executor = self._executors.get(kind) if kind is not None else None
        if executor is None:
            logger.warning("tool_call_unknown", tool=invocation.tool_name)
            output = {
                "success": False,
                "message": f"Outil {invocation.tool_name or '(sans nom)'} non reconnu.",
            }
            return ToolInvocationResult(
                tool_name=invocation.tool_name,
                input=invocation.input,
                output=output,
                latency_ms=(time.perf_counter() - started) * 1000,
            )

        output = await self._execute_with_retries(executor, invocation)
        payload = output.model_dump()
        entity_field = executor.definition.entity_field
        entity_id = payload.get(entity_field) if entity_field and output.success else None
        return ToolInvocationResult(
            tool_name=invocation.tool_name,
            input=invocation.input,
            output=payload,
            entity_id=entity_id,
            latency_ms=(time.perf_counter() - started) * 1000,
        )

    async def _execute_with_retries(
        self, executor: ToolExecutor, invocation: ToolInvocationRequest
    ) -> ToolOutput:
        attempt = 0
        while True:
            try:
                output = await executor.execute(invocation.input)
            except Exception as exc:  # noqa: BLE001
                logger.exception("tool_call_crashed", tool=invocation.tool_name)
                return executor.failure(f"Erreur inattendue lors de l'exécution : {exc}")

            if output.success or not output.retryable or attempt >= self._max_retries:
                return output

            attempt += 1
            delay = self._retry_backoff * (2 ** (attempt - 1))
            logger.info(
                "tool_call_retry",
                tool=invocation.tool_name,
                attempt=attempt,
                max_retries=self._max_retries,
                delay=delay,
            )
            if delay:
                await asyncio.sleep(delay)
