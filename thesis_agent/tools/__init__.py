"""Agent tools: static registry, input/output schemas and store-backed executors."""

from .executors import ToolExecutor, build_executor, build_executors
from .registry import ToolDefinition, ToolKind, ToolRegistry, tool_registry

__all__ = [
    "ToolDefinition",
    "ToolExecutor",
    "ToolKind",
    "ToolRegistry",
    "build_executor",
    "build_executors",
    "tool_registry",
]
