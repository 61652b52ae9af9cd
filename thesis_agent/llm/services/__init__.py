"""Service layer exports."""

from .dispatcher import Dispatcher
from .document_summarizer import DocumentSummarizer
from .oracle_client import Completion, LanguageModelOracle, OpenAIOracle, get_oracle
from .plan_generator import ThesisPlanGenerator
from .planner import FinishReason, Plan, Planner
from .prompt_log import PromptLogService
from .prompt_refiner import PromptRefiner
from .synthesizer import CLARIFICATION_MESSAGE, synthesize
from .task_list_modifier import TaskListModification, TaskListModifier
from .thesis_agent import ThesisAgent, build_thesis_agent

__all__ = [
    "CLARIFICATION_MESSAGE",
    "Completion",
    "Dispatcher",
    "DocumentSummarizer",
    "FinishReason",
    "LanguageModelOracle",
    "OpenAIOracle",
    "Plan",
    "Planner",
    "PromptLogService",
    "PromptRefiner",
    "TaskListModification",
    "TaskListModifier",
    "ThesisAgent",
    "ThesisPlanGenerator",
    "build_thesis_agent",
    "get_oracle",
    "synthesize",
]
