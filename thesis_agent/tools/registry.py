"""Static catalogue of the tools the agent may invoke."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Iterable

from ..core.exceptions import ToolRegistryError
from ..core.logging_config import get_logger
from .schemas import (
    AddBrainDumpEntryInput,
    AddBrainDumpEntryOutput,
    AddChapterInput,
    AddChapterOutput,
    AddDailyObjectiveInput,
    AddDailyObjectiveOutput,
    AddSourceInput,
    AddSourceOutput,
    AddTaskInput,
    AddTaskOutput,
    CreateThesisPlanInput,
    CreateThesisPlanOutput,
    RefinePromptInput,
    RefinePromptOutput,
    ToolInput,
    ToolOutput,
)

logger = get_logger(__name__)


class ToolKind(str, Enum):
    ADD_CHAPTER = "add_chapter"
    ADD_BRAIN_DUMP_ENTRY = "add_brain_dump_entry"
    ADD_DAILY_OBJECTIVE = "add_daily_objective"
    ADD_SOURCE = "add_source"
    ADD_TASK = "add_task"
    REFINE_PROMPT = "refine_prompt"
    CREATE_THESIS_PLAN = "create_thesis_plan"


@dataclass(frozen=True, slots=True)
class ToolDefinition:
    kind: ToolKind
    description: str
    input_schema: type[ToolInput]
    output_schema: type[ToolOutput]
    entity_field: str | None = None

    @property
    def name(self) -> str:
        return self.kind.value

    def to_function_spec(self) -> dict[str, Any]:
        """Render the definition in the OpenAI ``tools`` format."""

        return {
            "type": "function",
            "function": {
                "name": self.name,
                "description": self.description,
                "parameters": self.input_schema.model_json_schema(),
            },
        }


class ToolRegistry:
    """Immutable name -> definition table, validated once at construction."""

    def __init__(self, definitions: Iterable[ToolDefinition]) -> None:
        table: dict[str, ToolDefinition] = {}
        for definition in definitions:
            if definition.name in table:
                raise ToolRegistryError(f"Tool '{definition.name}' is already registered.")
            table[definition.name] = definition
        self._definitions = table

    def list_tools(self) -> list[ToolDefinition]:
        return list(self._definitions.values())

    def get(self, name: str) -> ToolDefinition | None:
        return self._definitions.get(name)

    def resolve(self, name: str | None) -> ToolKind | None:
        definition = self._definitions.get(name or "")
        return definition.kind if definition else None

    def require_complete(self) -> "ToolRegistry":
        """Fail if a ToolKind has no definition."""

        missing = [kind.value for kind in ToolKind if kind.value not in self._definitions]
        if missing:
            raise ToolRegistryError(f"Tools without definition: {', '.join(missing)}")
        return self

    def tools_schema(self) -> list[dict[str, Any]]:
        return [definition.to_function_spec() for definition in self._definitions.values()]

    def __len__(self) -> int:
        return len(self._definitions)

    def __contains__(self, name: object) -> bool:
        return name in self._definitions


TOOL_DEFINITIONS: tuple[ToolDefinition, ...] = (
    ToolDefinition(
        kind=ToolKind.ADD_CHAPTER,
        description=(
            "Ajoute un nouveau chapitre. Si l'utilisateur dit 'ajoute chapitre X' où X est un "
            "numéro, considère 'chapitre X' comme le nom littéral."
        ),
        input_schema=AddChapterInput,
        output_schema=AddChapterOutput,
        entity_field="chapter_id",
    ),
    ToolDefinition(
        kind=ToolKind.ADD_BRAIN_DUMP_ENTRY,
        description="Ajoute une note au vide-cerveau. Statut par défaut : 'captured'.",
        input_schema=AddBrainDumpEntryInput,
        output_schema=AddBrainDumpEntryOutput,
        entity_field="entry_id",
    ),
    ToolDefinition(
        kind=ToolKind.ADD_DAILY_OBJECTIVE,
        description="Ajoute un objectif au plan du jour.",
        input_schema=AddDailyObjectiveInput,
        output_schema=AddDailyObjectiveOutput,
        entity_field="objective_id",
    ),
    ToolDefinition(
        kind=ToolKind.ADD_SOURCE,
        description=(
            "Enregistre une nouvelle source bibliographique. Si le type n'est pas clair, "
            "utilise 'other'."
        ),
        input_schema=AddSourceInput,
        output_schema=AddSourceOutput,
        entity_field="source_id",
    ),
    ToolDefinition(
        kind=ToolKind.ADD_TASK,
        description=(
            "Ajoute une tâche. Si l'utilisateur mentionne 'chrono' ou 'pomodoro', le texte de la "
            "tâche doit être 'Démarrer Pomodoro pour : [description]'. Type par défaut : "
            "'secondary'."
        ),
        input_schema=AddTaskInput,
        output_schema=AddTaskOutput,
        entity_field="task_id",
    ),
    ToolDefinition(
        kind=ToolKind.REFINE_PROMPT,
        description=(
            "Améliore un prompt fourni par l'utilisateur. Cette action enregistre également le "
            "prompt original et le prompt affiné dans le journal des prompts."
        ),
        input_schema=RefinePromptInput,
        output_schema=RefinePromptOutput,
        entity_field="log_entry_id",
    ),
    ToolDefinition(
        kind=ToolKind.CREATE_THESIS_PLAN,
        description=(
            "Génère un plan de thèse ou de mémoire structuré à partir d'un sujet ou "
            "d'instructions, ou restructure un plan fourni par l'utilisateur."
        ),
        input_schema=CreateThesisPlanInput,
        output_schema=CreateThesisPlanOutput,
    ),
)

tool_registry = ToolRegistry(TOOL_DEFINITIONS).require_complete()
logger.debug("tool_registry_loaded", count=len(tool_registry))
