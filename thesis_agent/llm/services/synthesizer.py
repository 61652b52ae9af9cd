"""Response synthesis: the user always gets exactly one non-empty message."""

from __future__ import annotations

from typing import Sequence

from ...core.types import ToolInvocationResult

CLARIFICATION_MESSAGE = (
    "Je ne suis pas sûr d'avoir bien compris votre demande. Pouvez-vous la reformuler ?"
)


def _actions(count: int) -> str:
    return f"{count} action réussie" if count == 1 else f"{count} actions réussies"


def _failures(count: int) -> str:
    return f"{count} échec" if count == 1 else f"{count} échecs"


def success_message(success_count: int) -> str:
    if success_count == 1:
        return "C'est fait : 1 action effectuée avec succès."
    return f"C'est fait : {success_count} actions effectuées avec succès."


def partial_message(success_count: int, failure_count: int) -> str:
    return (
        f"Exécution partielle : {_actions(success_count)}, {_failures(failure_count)}. "
        "Vérifiez le détail des actions pour en savoir plus."
    )


def failure_message(failure_count: int) -> str:
    if failure_count == 1:
        return "Désolé, l'action demandée a échoué."
    return f"Désolé, les {failure_count} actions demandées ont échoué."


def summarize_counts(success_count: int, failure_count: int) -> str:
    if success_count + failure_count == 0:
        return CLARIFICATION_MESSAGE
    if failure_count == 0:
        return success_message(success_count)
    if success_count == 0:
        return failure_message(failure_count)
    return partial_message(success_count, failure_count)


def synthesize(draft_message: str | None, results: Sequence[ToolInvocationResult]) -> str:
    """Draft verbatim, else clarification when nothing ran, else a count-based template.

    The draft is written before any tool runs, so when an action failed the
    count-based summary is appended to it.
    """

    success_count = sum(1 for result in results if result.success)
    failure_count = len(results) - success_count
    if draft_message and draft_message.strip():
        if failure_count:
            return f"{draft_message}\n\n{summarize_counts(success_count, failure_count)}"
        return draft_message
    if not results:
        return CLARIFICATION_MESSAGE
    return summarize_counts(success_count, failure_count)
