import pytest

from thesis_agent.core.exceptions import ModelError
from thesis_agent.llm.services.oracle_client import Completion
from thesis_agent.llm.services.task_list_modifier import TASK_TYPES, TaskListModifier
from thesis_agent.tests.fakes import FakeOracle, json_completion


@pytest.mark.asyncio
async def test_modified_list_and_reasoning_are_returned():
    oracle = FakeOracle(
        json_completion(
            {
                "modifiedTaskList": ["urgent: relire le chapitre 2", "reading: article de Dupont"],
                "reasoning": "La relecture passe en urgent.",
            }
        )
    )

    result = await TaskListModifier(oracle).modify(
        "mets la relecture en urgent", ["relire le chapitre 2", "reading: article de Dupont"]
    )

    assert result.modified_task_list == ["urgent: relire le chapitre 2", "reading: article de Dupont"]
    assert result.reasoning == "La relecture passe en urgent."
    [call] = oracle.calls
    assert call.json_mode is True
    assert "- relire le chapitre 2" in call.user_prompt
    assert "mets la relecture en urgent" in call.user_prompt
    assert all(f"'{kind}'" in call.system_prompt for kind in TASK_TYPES)


@pytest.mark.asyncio
async def test_empty_current_list_is_marked_in_prompt():
    oracle = FakeOracle(json_completion({"modifiedTaskList": ["important: plan"], "reasoning": "Ajout."}))

    await TaskListModifier(oracle).modify("ajoute le plan", [])

    assert "(liste vide)" in oracle.calls[0].user_prompt


@pytest.mark.asyncio
async def test_snake_case_key_and_empty_list_are_accepted():
    oracle = FakeOracle(json_completion({"modified_task_list": [], "reasoning": "Tout est terminé."}))

    result = await TaskListModifier(oracle).modify("supprime tout", ["urgent: rendre le mémoire"])

    assert result.modified_task_list == []


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "completion",
    [
        Completion(message=None, finish_reason="stop"),
        json_completion({"reasoning": "Rien à faire."}),
        json_completion({"modifiedTaskList": "pas une liste", "reasoning": ""}),
    ],
)
async def test_missing_task_list_is_a_hard_failure(completion):
    with pytest.raises(ModelError):
        await TaskListModifier(FakeOracle(completion)).modify("trie les tâches", ["a"])
