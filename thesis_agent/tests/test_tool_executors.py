from datetime import datetime, timezone

import pytest

from thesis_agent.core.exceptions import ModelError
from thesis_agent.core.types import RefinementResult
from thesis_agent.tests.fakes import FakePlanGenerator, FakeRefiner, SpyStore, failing_refiner
from thesis_agent.tools.executors import build_executor
from thesis_agent.tools.prompt_log import AGENT_REFINEMENT_TAG, PROMPT_LOG_TABLE
from thesis_agent.tools.registry import ToolKind


def _executor(kind, store, *, refiner=None, plan_generator=None, history_limit=10):
    return build_executor(
        kind,
        store,
        refiner=refiner or FakeRefiner(),
        plan_generator=plan_generator or FakePlanGenerator(),
        history_limit=history_limit,
    )


@pytest.mark.asyncio
async def test_add_chapter_inserts_not_started_chapter(store):
    output = await _executor(ToolKind.ADD_CHAPTER, store).execute({"name": "Méthodologie"})

    assert output.success is True
    assert "Méthodologie" in output.message
    rows = await store.rows("chapters")
    assert len(rows) == 1
    assert rows[0]["id"] == output.chapter_id
    assert rows[0]["progress"] == 0
    assert rows[0]["status"] == "Non commencé"
    assert rows[0]["supervisor_comments"] == []


@pytest.mark.asyncio
@pytest.mark.parametrize("kind", list(ToolKind))
async def test_missing_required_field_is_rejected_without_store_access(kind):
    store = SpyStore()
    refiner = FakeRefiner()
    plan_generator = FakePlanGenerator()

    output = await _executor(kind, store, refiner=refiner, plan_generator=plan_generator).execute({})

    assert output.success is False
    assert output.message.startswith(f"Paramètres invalides pour '{kind.value}'")
    assert store.insert_calls == []
    assert store.query_calls == []
    assert refiner.calls == []
    assert plan_generator.calls == []


@pytest.mark.asyncio
async def test_non_mapping_input_is_rejected(store):
    output = await _executor(ToolKind.ADD_TASK, store).execute("{not json")

    assert output.success is False
    assert store.insert_calls == []


@pytest.mark.asyncio
async def test_blank_text_is_rejected(store):
    output = await _executor(ToolKind.ADD_CHAPTER, store).execute({"name": "   "})

    assert output.success is False
    assert store.insert_calls == []


@pytest.mark.asyncio
async def test_enum_fields_default_and_validate(store):
    dump = await _executor(ToolKind.ADD_BRAIN_DUMP_ENTRY, store).execute({"text": "idée"})
    task = await _executor(ToolKind.ADD_TASK, store).execute({"text": "Relire"})
    rejected = await _executor(ToolKind.ADD_TASK, store).execute({"text": "Relire", "type": "urgentissime"})

    assert dump.success and task.success
    assert (await store.rows("brain_dump_entries"))[0]["status"] == "captured"
    assert (await store.rows("tasks"))[0]["type"] == "secondary"
    assert rejected.success is False
    assert "type" in rejected.message


@pytest.mark.asyncio
async def test_daily_objective_is_dated_today(store):
    output = await _executor(ToolKind.ADD_DAILY_OBJECTIVE, store).execute({"text": "Écrire 500 mots"})

    row = (await store.rows("daily_objectives"))[0]
    assert output.objective_id == row["id"]
    assert row["completed"] is False
    assert row["objective_date"] == datetime.now(tz=timezone.utc).date().isoformat()


@pytest.mark.asyncio
async def test_add_source_keeps_optional_fields(store):
    output = await _executor(ToolKind.ADD_SOURCE, store).execute(
        {"title": "Bourdieu 1979", "type": "pdf", "notes": "chapitre 2"}
    )

    row = (await store.rows("sources"))[0]
    assert output.success is True
    assert output.source_id == row["id"]
    assert row["notes"] == "chapitre 2"
    assert row["source_link_or_path"] is None


@pytest.mark.asyncio
async def test_store_failure_becomes_retryable_failure_output():
    store = SpyStore(fail_inserts=1)

    output = await _executor(ToolKind.ADD_CHAPTER, store).execute({"name": "Introduction"})

    assert output.success is False
    assert output.retryable is True
    assert "disque plein" in output.message
    assert "retryable" not in output.model_dump()
    assert output.model_dump()["chapter_id"] is None


async def _seed_prompt_log(store, count):
    for day in range(1, count + 1):
        await store.insert(
            PROMPT_LOG_TABLE,
            {
                "original_prompt": f"original {day}",
                "refined_prompt": None if day % 2 else f"affiné {day}",
                "reasoning": None,
                "tags": [],
                "timestamp": f"2024-01-{day:02d}T08:00:00+00:00",
            },
        )


@pytest.mark.asyncio
async def test_refine_prompt_uses_ten_newest_entries_and_logs_result(store):
    await _seed_prompt_log(store, 12)
    await store.insert(
        PROMPT_LOG_TABLE,
        {"original_prompt": "  ", "refined_prompt": "", "tags": [], "timestamp": "2024-01-20T08:00:00+00:00"},
    )
    refiner = FakeRefiner(result=RefinementResult(refined_prompt="Résume en 3 points", reasoning="Format."))

    output = await _executor(ToolKind.REFINE_PROMPT, store, refiner=refiner).execute(
        {"prompt_to_refine": "résume"}
    )

    assert output.success is True
    assert output.refined_prompt == "Résume en 3 points"
    [(prompt, history)] = refiner.calls
    assert prompt == "résume"
    assert history == [
        "affiné 12", "original 11", "affiné 10", "original 9", "affiné 8",
        "original 7", "affiné 6", "original 5", "affiné 4",
    ]

    logged = [row for row in await store.rows(PROMPT_LOG_TABLE) if row["id"] == output.log_entry_id]
    assert logged[0]["tags"] == [AGENT_REFINEMENT_TAG]
    assert logged[0]["original_prompt"] == "résume"
    assert logged[0]["refined_prompt"] == "Résume en 3 points"


@pytest.mark.asyncio
async def test_refine_prompt_respects_configured_history_limit(store):
    await _seed_prompt_log(store, 5)
    refiner = FakeRefiner()

    await _executor(ToolKind.REFINE_PROMPT, store, refiner=refiner, history_limit=2).execute(
        {"prompt_to_refine": "plan"}
    )

    assert refiner.calls[0][1] == ["original 5", "affiné 4"]


@pytest.mark.asyncio
async def test_refine_prompt_history_failure_degrades_to_empty_history():
    store = SpyStore(fail_queries=True)
    refiner = FakeRefiner()

    output = await _executor(ToolKind.REFINE_PROMPT, store, refiner=refiner).execute(
        {"prompt_to_refine": "résume ce texte"}
    )

    assert output.success is True
    assert refiner.calls == [("résume ce texte", [])]


@pytest.mark.asyncio
async def test_refine_prompt_log_failure_keeps_refinement():
    store = SpyStore(fail_tables=[PROMPT_LOG_TABLE])

    output = await _executor(ToolKind.REFINE_PROMPT, store).execute({"prompt_to_refine": "résume"})

    assert output.success is False
    assert output.refined_prompt == "résume (affiné)"
    assert output.reasoning == "Plus précis."
    assert output.log_entry_id is None


@pytest.mark.asyncio
async def test_refine_prompt_model_failure_logs_nothing(store):
    output = await _executor(ToolKind.REFINE_PROMPT, store, refiner=failing_refiner()).execute(
        {"prompt_to_refine": "résume"}
    )

    assert output.success is False
    assert "sortie vide" in output.message
    assert store.insert_calls == []


@pytest.mark.asyncio
async def test_create_thesis_plan_returns_plan_without_store_mutation(store):
    generator = FakePlanGenerator()

    output = await _executor(ToolKind.CREATE_THESIS_PLAN, store, plan_generator=generator).execute(
        {"topic_or_instructions": "Sociologie du travail à distance"}
    )

    assert output.success is True
    assert "Méthodologie" in output.plan
    assert generator.calls == ["Sociologie du travail à distance"]
    assert store.insert_calls == []


@pytest.mark.asyncio
async def test_create_thesis_plan_model_failure(store):
    generator = FakePlanGenerator(error=ModelError("Plan output is missing the plan"))

    output = await _executor(ToolKind.CREATE_THESIS_PLAN, store, plan_generator=generator).execute(
        {"topic_or_instructions": "Sujet"}
    )

    assert output.success is False
    assert output.plan is None


@pytest.mark.asyncio
async def test_permanent_store_failure_is_not_retryable():
    store = SpyStore(fail_inserts=1, permanent=True)

    output = await _executor(ToolKind.ADD_TASK, store).execute({"text": "Relire"})

    assert output.success is False
    assert output.retryable is False
