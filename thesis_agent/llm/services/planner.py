"""Planner/router: one oracle call turns an instruction into tool invocations."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from ...core.config import AgentSettings, get_settings
from ...core.exceptions import ModelError
from ...core.logging_config import get_logger
from ...core.types import ToolInvocationRequest
from ...tools.registry import ToolRegistry, tool_registry
from ..schemas.agent import AgentRequest, ChatTurn
from .oracle_client import LanguageModelOracle

logger = get_logger(__name__)


class FinishReason(str, Enum):
    STOP = "stop"
    TOOL_CALLS = "tool_calls"
    LENGTH = "length"
    CONTENT_FILTER = "content_filter"
    ERROR = "error"
    OTHER = "other"

    @classmethod
    def from_raw(cls, raw: str | None) -> "FinishReason":
        if raw is None:
            return cls.OTHER
        if raw == "function_call":
            return cls.TOOL_CALLS
        try:
            return cls(raw)
        except ValueError:
            return cls.OTHER

    @property
    def is_normal(self) -> bool:
        return self in (FinishReason.STOP, FinishReason.TOOL_CALLS)


@dataclass(slots=True)
class Plan:
    draft_message: str | None
    invocations: list[ToolInvocationRequest] = field(default_factory=list)
    finish_reason: FinishReason = FinishReason.STOP

    @property
    def degraded(self) -> bool:
        return not self.finish_reason.is_normal


_SYSTEM_PROMPT = """Vous êtes ThesisBot, un assistant IA intégré à ThesisFlow, une application de gestion de thèse et de mémoire. Vous aidez l'utilisateur à organiser son travail en utilisant les outils disponibles.

Consignes :
- Répondez toujours en {language}.
- Soyez concis.
- Votre message est rédigé avant l'exécution des outils : annoncez ce que vous allez faire (« Je vais ajouter… ») sans jamais affirmer qu'une action a déjà été effectuée ou a réussi.
- Si la demande est ambiguë, demandez une clarification plutôt que de deviner.
- Si vous êtes raisonnablement sûr de l'intention, agissez directement avec les outils.
- Vous pouvez appeler plusieurs outils pour une même demande.
- Si aucun outil ne correspond, répondez simplement à l'utilisateur."""


def _speaker(turn: ChatTurn) -> str:
    return "Utilisateur" if turn.role == "user" else "Assistant"


def build_user_prompt(request: AgentRequest) -> str:
    lines: list[str] = []
    if request.user_name:
        lines.append(f"Nom de l'utilisateur : {request.user_name}")
    if request.chat_history:
        lines.append("Historique de la conversation :")
        lines.extend(f"{_speaker(turn)} : {turn.content}" for turn in request.chat_history)
    if lines:
        lines.append("")
    lines.append(f"Demande de l'utilisateur : {request.user_request}")
    return "\n".join(lines)


class Planner:
    """Sends the instruction and the whole tool catalogue on every call; no re-planning."""

    def __init__(
        self,
        oracle: LanguageModelOracle,
        registry: ToolRegistry = tool_registry,
        settings: AgentSettings | None = None,
    ) -> None:
        self._oracle = oracle
        self._registry = registry
        self._settings = settings or get_settings()

    @property
    def system_prompt(self) -> str:
        return _SYSTEM_PROMPT.format(language=self._settings.agent_language)

    async def plan(self, request: AgentRequest) -> Plan:
        try:
            completion = await self._oracle.complete(
                self.system_prompt,
                build_user_prompt(request),
                self._registry.tools_schema(),
            )
        except ModelError as exc:
            logger.warning("planner_oracle_failure", error=str(exc))
            return Plan(draft_message=None, finish_reason=FinishReason.ERROR)

        finish_reason = FinishReason.from_raw(completion.finish_reason)
        draft = completion.message.strip() if completion.message else None
        plan = Plan(
            draft_message=draft or None,
            invocations=list(completion.tool_calls),
            finish_reason=finish_reason,
        )
        if plan.degraded:
            logger.warning(
                "planner_abnormal_finish",
                finish_reason=finish_reason.value,
                raw_finish_reason=completion.finish_reason,
                invocations=len(plan.invocations),
            )
        logger.info(
            "planner_completed",
            finish_reason=finish_reason.value,
            invocations=[invocation.tool_name for invocation in plan.invocations],
            has_draft=plan.draft_message is not None,
        )
        return plan
