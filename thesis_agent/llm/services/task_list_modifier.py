"""Task list rewriting from free-form instructions."""

from __future__ import annotations

from typing import Sequence

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from ...core.exceptions import ModelError
from ...core.logging_config import get_logger
from .json_output import extract_json_object
from .oracle_client import LanguageModelOracle

logger = get_logger(__name__)

TASK_TYPES = ("urgent", "important", "reading", "chatgpt", "secondary")
_TASK_TYPES_TEXT = ", ".join(f"'{kind}'" for kind in TASK_TYPES)

_SYSTEM_PROMPT = f"""Vous êtes un agent IA responsable de la gestion de la liste de tâches d'un utilisateur.

L'utilisateur fournit sa liste de tâches actuelle et des instructions pour la modifier (ajouter une tâche, marquer une tâche comme terminée, prioriser...). Modifiez la liste conformément aux instructions et expliquez les modifications apportées.
Le type de chaque tâche de la liste modifiée doit être l'une des valeurs suivantes : {_TASK_TYPES_TEXT}.

Répondez uniquement avec un objet JSON de la forme :
{{"modifiedTaskList": ["<tâche>", ...], "reasoning": "<explication des modifications>"}}"""


class TaskListModification(BaseModel):
    modified_task_list: list[str]
    reasoning: str


class _ModificationPayload(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    modified_task_list: list[str] | None = Field(None, alias="modifiedTaskList")
    reasoning: str | None = None


def build_user_prompt(instructions: str, task_list: Sequence[str]) -> str:
    lines = ["Voici la liste de tâches actuelle :"]
    if task_list:
        lines.extend(f"- {task}" for task in task_list)
    else:
        lines.append("(liste vide)")
    lines.extend(["", "Voici les instructions :", instructions])
    return "\n".join(lines)


class TaskListModifier:
    """An empty modified list is a valid answer; a missing one is not."""

    def __init__(self, oracle: LanguageModelOracle) -> None:
        self._oracle = oracle

    async def modify(self, instructions: str, task_list: Sequence[str]) -> TaskListModification:
        logger.info("task_list_modification_requested", tasks=len(task_list))
        completion = await self._oracle.complete(
            _SYSTEM_PROMPT,
            build_user_prompt(instructions, task_list),
            json_mode=True,
        )
        if not completion.message:
            raise ModelError("Language model returned no task list")

        try:
            payload = _ModificationPayload.model_validate_json(
                extract_json_object(completion.message)
            )
        except ValidationError as exc:
            raise ModelError(f"Unparseable task list output: {exc}") from exc

        if payload.modified_task_list is None:
            raise ModelError("Task list output is missing the modified task list")
        tasks = [task.strip() for task in payload.modified_task_list if task.strip()]
        result = TaskListModification(
            modified_task_list=tasks, reasoning=(payload.reasoning or "").strip()
        )
        logger.info(
            "task_list_modified", tasks_before=len(task_list), tasks_after=len(tasks)
        )
        return result
