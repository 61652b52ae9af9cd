"""Helpers shared by everything that reads or writes the prompt log."""

from __future__ import annotations

from typing import Any, Iterable, Sequence

from ..core.exceptions import StoreError
from ..core.logging_config import get_logger
from ..core.store import Record, RecordStore
from ..core.types import utc_now

logger = get_logger(__name__)

PROMPT_LOG_TABLE = "prompt_log_entries"
AGENT_REFINEMENT_TAG = "affinage_par_agent"
DEFAULT_HISTORY_LIMIT = 10


def history_prompts(entries: Iterable[Record]) -> list[str]:
    """Keep the refined prompt of each entry (or the original one), dropping blanks."""

    prompts: list[str] = []
    for entry in entries:
        text = entry.get("refined_prompt") or entry.get("original_prompt") or ""
        if isinstance(text, str) and text.strip():
            prompts.append(text)
    return prompts


async def load_prompt_history(store: RecordStore, limit: int = DEFAULT_HISTORY_LIMIT) -> list[str]:
    """Return the most recent effective prompts, newest first.

    A failing query yields an empty history: refinement still works without context.
    """

    if limit <= 0:
        return []
    try:
        entries = await store.query(
            PROMPT_LOG_TABLE, order_by="timestamp", descending=True, limit=limit
        )
    except StoreError as exc:
        logger.warning("prompt_history_unavailable", error=str(exc))
        return []
    return history_prompts(entries)


def parse_tags(raw: str | Sequence[str] | None) -> list[str]:
    """Accept ``"a, b"`` or ``["a", " b "]`` and return trimmed, non-empty tags."""

    if raw is None:
        return []
    items = raw.split(",") if isinstance(raw, str) else list(raw)
    return [tag.strip() for tag in items if isinstance(tag, str) and tag.strip()]


def new_log_record(
    original_prompt: str,
    *,
    refined_prompt: str | None = None,
    reasoning: str | None = None,
    tags: Sequence[str] = (),
) -> dict[str, Any]:
    return {
        "original_prompt": original_prompt,
        "refined_prompt": refined_prompt,
        "reasoning": reasoning,
        "tags": list(tags),
        "timestamp": utc_now().isoformat(),
    }
