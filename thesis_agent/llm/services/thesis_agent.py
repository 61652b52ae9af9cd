"""Agent façade: plan, dispatch and synthesize one natural-language request."""

from __future__ import annotations

from enum import Enum

from ...core.config import AgentSettings, get_settings
from ...core.logging_config import get_logger
from ...core.store import RecordStore
from ...core.types import ToolInvocationResult
from ...tools.executors import build_executors
from ...tools.registry import ToolRegistry, tool_registry
from ..schemas.agent import ActionTaken, AgentRequest, AgentResponse
from .dispatcher import Dispatcher
from .oracle_client import LanguageModelOracle
from .plan_generator import ThesisPlanGenerator
from .planner import FinishReason, Plan, Planner
from .prompt_refiner import PromptRefiner
from .synthesizer import synthesize

logger = get_logger(__name__)


class RequestState(str, Enum):
    RECEIVED = "received"
    PLANNED = "planned"
    DISPATCHING = "dispatching"
    SYNTHESIZED = "synthesized"
    RETURNED = "returned"
    RETURNED_DEGRADED = "returned_with_degraded_message"


class ThesisAgent:
    """Single-shot plan-then-execute agent.

    ``process_user_request`` never raises: model failures, invalid tool input
    and store failures all end up in the response message and in the
    per-action ``success`` flags.
    """

    def __init__(self, planner: Planner, dispatcher: Dispatcher) -> None:
        self._planner = planner
        self._dispatcher = dispatcher

    async def process_user_request(self, request: AgentRequest) -> AgentResponse:
        logger.info(
            "agent_request_received",
            state=RequestState.RECEIVED.value,
            request_chars=len(request.user_request),
            history_turns=len(request.chat_history),
        )

        try:
            plan = await self._planner.plan(request)
        except Exception:  # noqa: BLE001
            logger.exception("agent_request_planning_crashed")
            plan = Plan(draft_message=None, finish_reason=FinishReason.ERROR)
        logger.info(
            "agent_request_planned",
            state=RequestState.PLANNED.value,
            finish_reason=plan.finish_reason.value,
            invocations=len(plan.invocations),
        )

        results: list[ToolInvocationResult] = []
        if plan.invocations:
            logger.info(
                "agent_request_dispatching",
                state=RequestState.DISPATCHING.value,
                invocations=len(plan.invocations),
            )
            results = await self._dispatcher.dispatch(plan.invocations)

        message = synthesize(plan.draft_message, results)
        logger.info(
            "agent_request_synthesized",
            state=RequestState.SYNTHESIZED.value,
            used_draft=message == plan.draft_message,
            successes=sum(1 for result in results if result.success),
            failures=sum(1 for result in results if not result.success),
        )

        final_state = RequestState.RETURNED_DEGRADED if plan.degraded else RequestState.RETURNED
        logger.info("agent_request_returned", state=final_state.value)
        return AgentResponse(
            response_message=message,
            actions_taken=[ActionTaken.from_result(result) for result in results] or None,
            degraded=plan.degraded,
        )


def build_thesis_agent(
    store: RecordStore,
    oracle: LanguageModelOracle,
    settings: AgentSettings | None = None,
    registry: ToolRegistry = tool_registry,
) -> ThesisAgent:
    """Wire planner, executors and dispatcher around a (user-scoped) store."""

    settings = settings or get_settings()
    executors = build_executors(
        store,
        refiner=PromptRefiner(oracle),
        plan_generator=ThesisPlanGenerator(oracle),
        history_limit=settings.prompt_history_limit,
    )
    dispatcher = Dispatcher(
        executors,
        registry,
        max_retries=settings.tool_max_retries,
        retry_backoff=settings.tool_retry_backoff,
    )
    return ThesisAgent(Planner(oracle, registry, settings), dispatcher)
