import pytest

from thesis_agent.core.exceptions import ToolRegistryError
from thesis_agent.tools.registry import (
    TOOL_DEFINITIONS,
    ToolDefinition,
    ToolKind,
    ToolRegistry,
    tool_registry,
)
from thesis_agent.tools.schemas import AddChapterInput, AddChapterOutput


def test_registry_covers_every_tool_kind():
    names = {definition.name for definition in tool_registry.list_tools()}

    assert names == {kind.value for kind in ToolKind}
    assert len(tool_registry) == len(ToolKind)


def test_duplicate_tool_names_fail_at_construction():
    duplicate = ToolDefinition(
        kind=ToolKind.ADD_CHAPTER,
        description="doublon",
        input_schema=AddChapterInput,
        output_schema=AddChapterOutput,
    )

    with pytest.raises(ToolRegistryError, match="already registered"):
        ToolRegistry([*TOOL_DEFINITIONS, duplicate])


def test_incomplete_registry_is_rejected():
    registry = ToolRegistry(TOOL_DEFINITIONS[:2])

    with pytest.raises(ToolRegistryError, match="without definition"):
        registry.require_complete()


def test_tools_schema_uses_function_calling_format():
    specs = {spec["function"]["name"]: spec for spec in tool_registry.tools_schema()}

    add_chapter = specs["add_chapter"]
    assert add_chapter["type"] == "function"
    assert add_chapter["function"]["description"]
    parameters = add_chapter["function"]["parameters"]
    assert parameters["required"] == ["name"]
    assert parameters["properties"]["name"]["description"]

    source_type = specs["add_source"]["function"]["parameters"]["properties"]["type"]
    assert set(source_type["enum"]) == {"pdf", "website", "interview", "field_notes", "other"}


def test_resolve_maps_names_to_kinds():
    assert tool_registry.resolve("add_task") is ToolKind.ADD_TASK
    assert tool_registry.resolve("delete_everything") is None
    assert tool_registry.resolve(None) is None
    assert "refine_prompt" in tool_registry


def test_entity_fields_match_output_schemas():
    for definition in tool_registry.list_tools():
        if definition.entity_field is None:
            continue
        assert definition.entity_field in definition.output_schema.model_fields
