"""Input and output contracts of the agent tools.

Field descriptions are sent to the language model as part of the JSON schema,
which is why they are written in the operating language of the application.
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

BrainDumpStatus = Literal["captured", "task", "idea"]
SourceType = Literal["pdf", "website", "interview", "field_notes", "other"]
TaskType = Literal["urgent", "important", "reading", "chatgpt", "secondary"]


class ToolInput(BaseModel):
    """Base class of tool inputs: surrounding whitespace is stripped, unknown keys are ignored."""

    model_config = ConfigDict(str_strip_whitespace=True, extra="ignore")


class ToolOutput(BaseModel):
    """Every tool output carries ``success`` and ``message``."""

    model_config = ConfigDict(extra="allow")

    success: bool = Field(..., description="Indique si l'opération a réussi.")
    message: str = Field(..., description="Un message de confirmation ou d'erreur.")
    retryable: bool = Field(False, exclude=True)


# ---------------------------------------------------------------------------
# Inputs
# ---------------------------------------------------------------------------
class AddChapterInput(ToolInput):
    name: str = Field(..., min_length=1, description="Le nom du chapitre à ajouter.")


class AddBrainDumpEntryInput(ToolInput):
    text: str = Field(..., min_length=1, description="Le contenu textuel de la note du vide-cerveau.")
    status: BrainDumpStatus = Field(
        "captured", description="Le statut de la note. Par défaut 'captured'."
    )


class AddDailyObjectiveInput(ToolInput):
    text: str = Field(..., min_length=1, description="Le texte de l'objectif quotidien.")


class AddSourceInput(ToolInput):
    title: str = Field(..., min_length=1, description="Titre de la source.")
    type: SourceType = Field(..., description="Type de la source.")
    source_link_or_path: str | None = Field(
        None, description="Lien ou chemin du fichier pour la source (optionnel)."
    )
    notes: str | None = Field(None, description="Notes additionnelles sur la source (optionnel).")


class AddTaskInput(ToolInput):
    text: str = Field(
        ...,
        min_length=1,
        description=(
            "Description de la tâche. Si l'utilisateur veut 'lancer le chrono' ou 'démarrer un "
            "pomodoro', formulez ceci comme 'Démarrer Pomodoro pour : [description]'."
        ),
    )
    type: TaskType = Field("secondary", description="Type de la tâche. Par défaut 'secondary'.")


class RefinePromptInput(ToolInput):
    prompt_to_refine: str = Field(
        ..., min_length=1, description="Le prompt que l'utilisateur souhaite affiner."
    )


class CreateThesisPlanInput(ToolInput):
    topic_or_instructions: str = Field(
        ...,
        min_length=1,
        description="Le sujet de la thèse ou des instructions spécifiques pour générer le plan.",
    )


# ---------------------------------------------------------------------------
# Outputs
# ---------------------------------------------------------------------------
class AddChapterOutput(ToolOutput):
    chapter_id: str | None = Field(None, description="ID du chapitre créé, si réussi.")


class AddBrainDumpEntryOutput(ToolOutput):
    entry_id: str | None = Field(None, description="ID de la note créée, si réussi.")


class AddDailyObjectiveOutput(ToolOutput):
    objective_id: str | None = Field(None, description="ID de l'objectif créé, si réussi.")


class AddSourceOutput(ToolOutput):
    source_id: str | None = Field(None, description="ID de la source créée, si réussi.")


class AddTaskOutput(ToolOutput):
    task_id: str | None = Field(None, description="ID de la tâche créée, si réussi.")


class RefinePromptOutput(ToolOutput):
    refined_prompt: str | None = Field(None, description="Le prompt affiné.")
    reasoning: str | None = Field(None, description="Explication de l'affinage.")
    log_entry_id: str | None = Field(None, description="ID de l'entrée du journal des prompts.")


class CreateThesisPlanOutput(ToolOutput):
    plan: str | None = Field(None, description="Le plan de thèse généré.")
