"""Thesis plan generation from a topic or free-form instructions."""

from __future__ import annotations

from pydantic import BaseModel, ValidationError

from ...core.exceptions import ModelError
from ...core.logging_config import get_logger
from .json_output import extract_json_object
from .oracle_client import LanguageModelOracle

logger = get_logger(__name__)

_SYSTEM_PROMPT = """Vous êtes un assistant expert en rédaction académique. Générez un plan de thèse ou de mémoire détaillé et structuré (introduction, parties, chapitres, sous-sections, conclusion) à partir du sujet ou des instructions fournis. Si l'utilisateur fournit un plan existant, restructurez-le et améliorez-le.

Répondez uniquement avec un objet JSON de la forme :
{"plan": "<le plan complet, en texte formaté>"}"""


class _PlanPayload(BaseModel):
    plan: str | None = None


class ThesisPlanGenerator:
    def __init__(self, oracle: LanguageModelOracle) -> None:
        self._oracle = oracle

    async def generate(self, topic_or_instructions: str) -> str:
        logger.info("thesis_plan_requested", topic_chars=len(topic_or_instructions))
        completion = await self._oracle.complete(
            _SYSTEM_PROMPT,
            f"Sujet ou instructions : {topic_or_instructions}",
            json_mode=True,
        )
        if not completion.message:
            raise ModelError("Language model returned no plan")

        try:
            payload = _PlanPayload.model_validate_json(extract_json_object(completion.message))
        except ValidationError as exc:
            raise ModelError(f"Unparseable plan output: {exc}") from exc

        plan = (payload.plan or "").strip()
        if not plan:
            raise ModelError("Plan output is missing the plan")
        logger.info("thesis_plan_generated", plan_chars=len(plan))
        return plan
