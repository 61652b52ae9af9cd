"""Tool executors: validate the model's arguments, then perform one store operation."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, ClassVar, Protocol, Sequence

from pydantic import ValidationError

from ..core.exceptions import ExternalServiceError, StoreError, ToolRegistryError
from ..core.logging_config import get_logger
from ..core.store import RecordStore
from ..core.types import RefinementResult, utc_now
from .prompt_log import (
    AGENT_REFINEMENT_TAG,
    DEFAULT_HISTORY_LIMIT,
    PROMPT_LOG_TABLE,
    load_prompt_history,
    new_log_record,
)
from .registry import ToolDefinition, ToolKind, tool_registry
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


class PromptRefinerLike(Protocol):
    async def refine(self, prompt: str, history: Sequence[str]) -> RefinementResult: ...


class PlanGeneratorLike(Protocol):
    async def generate(self, topic_or_instructions: str) -> str: ...


def format_validation_error(exc: ValidationError) -> str:
    parts = []
    for error in exc.errors():
        location = ".".join(str(item) for item in error.get("loc", ())) or "input"
        parts.append(f"{location}: {error.get('msg', 'invalid')}")
    return "; ".join(parts)


def _preview(text: str, width: int = 30) -> str:
    return text if len(text) <= width else f"{text[:width]}..."


class ToolExecutor(ABC):
    """Validate-then-run template shared by every tool.

    ``execute`` never raises for invalid input or store failures; both become an
    output with ``success=False``.
    """

    kind: ClassVar[ToolKind]
    failure_label: ClassVar[str] = "Erreur lors de l'exécution de l'outil"

    def __init__(self, store: RecordStore) -> None:
        self._store = store

    @property
    def definition(self) -> ToolDefinition:
        definition = tool_registry.get(self.kind.value)
        if definition is None:  # pragma: no cover - registry is checked at import
            raise ToolRegistryError(f"Tool '{self.kind.value}' is not registered.")
        return definition

    def failure(self, message: str, *, retryable: bool = False, **extra: Any) -> ToolOutput:
        return self.definition.output_schema(
            success=False, message=message, retryable=retryable, **extra
        )

    async def execute(self, raw_input: Any) -> ToolOutput:
        name = self.kind.value
        try:
            payload = self.definition.input_schema.model_validate(raw_input)
        except ValidationError as exc:
            logger.info("tool_input_rejected", tool=name, errors=exc.error_count())
            return self.failure(f"Paramètres invalides pour '{name}' : {format_validation_error(exc)}")

        try:
            return await self._run(payload)
        except StoreError as exc:
            logger.warning(
                "tool_store_failure", tool=name, error=str(exc), retryable=exc.retryable
            )
            return self.failure(f"{self.failure_label} : {exc}", retryable=exc.retryable)

    @abstractmethod
    async def _run(self, payload: Any) -> ToolOutput:
        """Perform the tool's single store operation."""


class AddChapterExecutor(ToolExecutor):
    kind = ToolKind.ADD_CHAPTER
    failure_label = "Erreur lors de l'ajout du chapitre"

    async def _run(self, payload: AddChapterInput) -> ToolOutput:
        chapter_id = await self._store.insert(
            "chapters",
            {
                "name": payload.name,
                "progress": 0,
                "status": "Non commencé",
                "supervisor_comments": [],
            },
        )
        return AddChapterOutput(
            success=True,
            message=f'Chapitre "{payload.name}" ajouté avec succès.',
            chapter_id=chapter_id,
        )


class AddBrainDumpEntryExecutor(ToolExecutor):
    kind = ToolKind.ADD_BRAIN_DUMP_ENTRY
    failure_label = "Erreur lors de l'ajout au vide-cerveau"

    async def _run(self, payload: AddBrainDumpEntryInput) -> ToolOutput:
        entry_id = await self._store.insert(
            "brain_dump_entries",
            {"text": payload.text, "status": payload.status, "chapter_id": None},
        )
        return AddBrainDumpEntryOutput(
            success=True,
            message=f'Note ajoutée au vide-cerveau : "{_preview(payload.text)}".',
            entry_id=entry_id,
        )


class AddDailyObjectiveExecutor(ToolExecutor):
    kind = ToolKind.ADD_DAILY_OBJECTIVE
    failure_label = "Erreur lors de l'ajout de l'objectif du jour"

    async def _run(self, payload: AddDailyObjectiveInput) -> ToolOutput:
        objective_id = await self._store.insert(
            "daily_objectives",
            {
                "text": payload.text,
                "completed": False,
                "objective_date": utc_now().date().isoformat(),
                "completed_at": None,
                "chapter_id": None,
            },
        )
        return AddDailyObjectiveOutput(
            success=True,
            message=f'Objectif du jour ajouté : "{payload.text}".',
            objective_id=objective_id,
        )


class AddSourceExecutor(ToolExecutor):
    kind = ToolKind.ADD_SOURCE
    failure_label = "Erreur lors de l'ajout de la source"

    async def _run(self, payload: AddSourceInput) -> ToolOutput:
        source_id = await self._store.insert(
            "sources",
            {
                "title": payload.title,
                "type": payload.type,
                "source_link_or_path": payload.source_link_or_path,
                "notes": payload.notes,
            },
        )
        return AddSourceOutput(
            success=True,
            message=f'Source "{payload.title}" ajoutée à la bibliothèque.',
            source_id=source_id,
        )


class AddTaskExecutor(ToolExecutor):
    kind = ToolKind.ADD_TASK
    failure_label = "Erreur lors de l'ajout de la tâche"

    async def _run(self, payload: AddTaskInput) -> ToolOutput:
        task_id = await self._store.insert(
            "tasks",
            {"text": payload.text, "type": payload.type, "completed": False, "chapter_id": None},
        )
        return AddTaskOutput(
            success=True,
            message=f'Tâche ajoutée : "{payload.text}".',
            task_id=task_id,
        )


class RefinePromptExecutor(ToolExecutor):
    kind = ToolKind.REFINE_PROMPT
    failure_label = "Erreur lors de la consignation du prompt affiné"

    def __init__(
        self,
        store: RecordStore,
        refiner: PromptRefinerLike,
        history_limit: int = DEFAULT_HISTORY_LIMIT,
    ) -> None:
        super().__init__(store)
        self._refiner = refiner
        self._history_limit = history_limit

    async def _run(self, payload: RefinePromptInput) -> ToolOutput:
        history = await load_prompt_history(self._store, self._history_limit)
        logger.info("refine_tool_history_loaded", history=len(history))

        try:
            result = await self._refiner.refine(payload.prompt_to_refine, history)
        except ExternalServiceError as exc:
            logger.warning("refine_tool_model_failure", error=str(exc))
            return self.failure(f"Erreur lors de l'affinage du prompt : {exc}")

        try:
            entry_id = await self._store.insert(
                PROMPT_LOG_TABLE,
                new_log_record(
                    payload.prompt_to_refine,
                    refined_prompt=result.refined_prompt,
                    reasoning=result.reasoning,
                    tags=[AGENT_REFINEMENT_TAG],
                ),
            )
        except StoreError as exc:
            # The refinement is returned anyway so the user does not lose it.
            logger.warning("refine_tool_log_failure", error=str(exc))
            return self.failure(
                f"Prompt affiné, mais erreur lors de la consignation : {exc}",
                refined_prompt=result.refined_prompt,
                reasoning=result.reasoning,
            )

        return RefinePromptOutput(
            success=True,
            message="Prompt affiné et consigné avec succès.",
            refined_prompt=result.refined_prompt,
            reasoning=result.reasoning,
            log_entry_id=entry_id,
        )


class CreateThesisPlanExecutor(ToolExecutor):
    kind = ToolKind.CREATE_THESIS_PLAN
    failure_label = "Erreur lors de la génération du plan de thèse"

    def __init__(self, store: RecordStore, plan_generator: PlanGeneratorLike) -> None:
        super().__init__(store)
        self._plan_generator = plan_generator

    async def _run(self, payload: CreateThesisPlanInput) -> ToolOutput:
        try:
            plan = await self._plan_generator.generate(payload.topic_or_instructions)
        except ExternalServiceError as exc:
            logger.warning("thesis_plan_model_failure", error=str(exc))
            return self.failure(f"{self.failure_label} : {exc}")

        return CreateThesisPlanOutput(
            success=True,
            message=f'Plan de thèse généré pour "{_preview(payload.topic_or_instructions, 50)}".',
            plan=plan,
        )


def build_executor(
    kind: ToolKind,
    store: RecordStore,
    *,
    refiner: PromptRefinerLike,
    plan_generator: PlanGeneratorLike,
    history_limit: int = DEFAULT_HISTORY_LIMIT,
) -> ToolExecutor:
    match kind:
        case ToolKind.ADD_CHAPTER:
            return AddChapterExecutor(store)
        case ToolKind.ADD_BRAIN_DUMP_ENTRY:
            return AddBrainDumpEntryExecutor(store)
        case ToolKind.ADD_DAILY_OBJECTIVE:
            return AddDailyObjectiveExecutor(store)
        case ToolKind.ADD_SOURCE:
            return AddSourceExecutor(store)
        case ToolKind.ADD_TASK:
            return AddTaskExecutor(store)
        case ToolKind.REFINE_PROMPT:
            return RefinePromptExecutor(store, refiner, history_limit)
        case ToolKind.CREATE_THESIS_PLAN:
            return CreateThesisPlanExecutor(store, plan_generator)
    raise ToolRegistryError(f"No executor for tool '{kind.value}'")


def build_executors(
    store: RecordStore,
    *,
    refiner: PromptRefinerLike,
    plan_generator: PlanGeneratorLike,
    history_limit: int = DEFAULT_HISTORY_LIMIT,
) -> dict[ToolKind, ToolExecutor]:
    return {
        kind: build_executor(
            kind,
            store,
            refiner=refiner,
            plan_generator=plan_generator,
            history_limit=history_limit,
        )
        for kind in ToolKind
    }
