import pytest

from thesis_agent.core.exceptions import ModelError
from thesis_agent.llm.schemas.agent import AgentRequest
from thesis_agent.llm.services.oracle_client import Completion
from thesis_agent.llm.services.planner import FinishReason, Planner
from thesis_agent.tests.fakes import FakeOracle, tool_call
from thesis_agent.tools.registry import tool_registry


@pytest.mark.asyncio
async def test_planner_sends_catalogue_instructions_and_context(settings):
    oracle = FakeOracle(Completion(message="Bonjour Camille !", finish_reason="stop"))
    request = AgentRequest(
        user_request="Qu'est-ce que tu peux faire ?",
        user_name="Camille",
        chat_history=[
            {"role": "user", "content": "Salut"},
            {"role": "agent", "content": "Bonjour, comment puis-je aider ?"},
        ],
    )

    plan = await Planner(oracle, tool_registry, settings).plan(request)

    [call] = oracle.calls
    assert call.tool_specs == tool_registry.tools_schema()
    assert call.json_mode is False
    assert "français" in call.system_prompt
    assert "Camille" in call.user_prompt
    assert "Assistant : Bonjour, comment puis-je aider ?" in call.user_prompt
    assert call.user_prompt.endswith("Demande de l'utilisateur : Qu'est-ce que tu peux faire ?")
    assert plan.draft_message == "Bonjour Camille !"
    assert plan.invocations == []
    assert plan.degraded is False


@pytest.mark.asyncio
async def test_planner_returns_tool_invocations(settings):
    calls = [tool_call("add_chapter", name="Méthodologie"), tool_call("add_task", text="Lire")]
    oracle = FakeOracle(Completion(message="", tool_calls=calls, finish_reason="tool_calls"))

    plan = await Planner(oracle, settings=settings).plan(AgentRequest(user_request="ajoute"))

    assert plan.invocations == calls
    assert plan.draft_message is None
    assert plan.finish_reason is FinishReason.TOOL_CALLS
    assert plan.degraded is False


@pytest.mark.asyncio
async def test_abnormal_finish_keeps_partial_invocations(settings):
    calls = [tool_call("add_chapter", name="Introduction")]
    oracle = FakeOracle(Completion(message=None, tool_calls=calls, finish_reason="length"))

    plan = await Planner(oracle, settings=settings).plan(AgentRequest(user_request="ajoute"))

    assert plan.invocations == calls
    assert plan.finish_reason is FinishReason.LENGTH
    assert plan.degraded is True


@pytest.mark.asyncio
async def test_oracle_failure_produces_empty_error_plan(settings):
    oracle = FakeOracle(ModelError("timeout"))

    plan = await Planner(oracle, settings=settings).plan(AgentRequest(user_request="ajoute"))

    assert plan.invocations == []
    assert plan.draft_message is None
    assert plan.finish_reason is FinishReason.ERROR
    assert plan.degraded is True


def test_system_prompt_follows_configured_language(settings):
    settings.agent_language = "anglais"

    assert "Répondez toujours en anglais." in Planner(FakeOracle(), settings=settings).system_prompt


def test_system_prompt_asks_for_intent_rather_than_outcome(settings):
    prompt = Planner(FakeOracle(), settings=settings).system_prompt

    assert "rédigé avant l'exécution des outils" in prompt
    assert "Je vais ajouter" in prompt
    assert "confirmez clairement les actions effectuées" not in prompt


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("stop", FinishReason.STOP),
        ("tool_calls", FinishReason.TOOL_CALLS),
        ("function_call", FinishReason.TOOL_CALLS),
        ("content_filter", FinishReason.CONTENT_FILTER),
        ("something_new", FinishReason.OTHER),
        (None, FinishReason.OTHER),
    ],
)
def test_finish_reason_from_raw(raw, expected):
    assert FinishReason.from_raw(raw) is expected
