"""Prompt refinement: ask the model for a better prompt, informed by past effective prompts."""

from __future__ import annotations

from typing import Sequence

from pydantic import AliasChoices, BaseModel, Field, ValidationError

from ...core.exceptions import ModelError, RefinementError
from ...core.logging_config import get_logger
from ...core.types import RefinementResult
from .json_output import extract_json_object
from .oracle_client import LanguageModelOracle

logger = get_logger(__name__)

_SYSTEM_PROMPT = """Vous êtes un optimiseur de prompts IA. Étant donné le prompt actuel et un historique de prompts efficaces, suggérez des améliorations au prompt actuel pour améliorer son efficacité.

Répondez uniquement avec un objet JSON de la forme :
{"refinedPrompt": "<le prompt affiné>", "reasoning": "<pourquoi il a été affiné de cette manière>"}"""


class _RefinementPayload(BaseModel):
    refined_prompt: str | None = Field(
        None, validation_alias=AliasChoices("refinedPrompt", "refined_prompt")
    )
    reasoning: str | None = None


def build_refinement_prompt(prompt: str, history: Sequence[str]) -> str:
    lines = [f"Prompt Actuel : {prompt}", "", "Historique des Prompts Efficaces :"]
    if history:
        lines.extend(f"- {item}" for item in history)
    else:
        lines.append("(aucun)")
    lines.extend(["", "Prompt Affiné :"])
    return "\n".join(lines)


class PromptRefiner:
    """Refinement engine. Output without a refined prompt is an error, never the original prompt."""

    def __init__(self, oracle: LanguageModelOracle) -> None:
        self._oracle = oracle

    async def refine(self, prompt: str, history: Sequence[str] = ()) -> RefinementResult:
        logger.info("prompt_refinement_requested", history=len(history), prompt_chars=len(prompt))
        try:
            completion = await self._oracle.complete(
                _SYSTEM_PROMPT,
                build_refinement_prompt(prompt, history),
                json_mode=True,
            )
        except ModelError as exc:
            raise RefinementError(f"Refinement request failed: {exc}") from exc

        if not completion.message:
            raise RefinementError("Language model returned no refinement output")

        try:
            payload = _RefinementPayload.model_validate_json(extract_json_object(completion.message))
        except ValidationError as exc:
            logger.warning("prompt_refinement_unparseable", preview=completion.message[:200])
            raise RefinementError(f"Unparseable refinement output: {exc}") from exc

        refined = (payload.refined_prompt or "").strip()
        if not refined:
            raise RefinementError("Refinement output is missing the refined prompt")

        logger.info("prompt_refinement_completed", refined_chars=len(refined))
        return RefinementResult(refined_prompt=refined, reasoning=(payload.reasoning or "").strip())
