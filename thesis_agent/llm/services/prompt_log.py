"""Prompt log: manual logging, listing and the refine-and-log user action."""

from __future__ import annotations

from typing import Sequence

from ...core.config import AgentSettings, get_settings
from ...core.exceptions import RefinementError
from ...core.logging_config import get_logger
from ...core.store import RecordStore
from ...core.types import RefinementResult
from ...tools.prompt_log import PROMPT_LOG_TABLE, load_prompt_history, new_log_record, parse_tags
from ..schemas.prompts import PromptLogEntry
from .prompt_refiner import PromptRefiner

logger = get_logger(__name__)


class PromptLogService:
    def __init__(
        self,
        store: RecordStore,
        refiner: PromptRefiner,
        settings: AgentSettings | None = None,
    ) -> None:
        self._store = store
        self._refiner = refiner
        self._settings = settings or get_settings()

    async def list_entries(self, limit: int | None = None) -> list[PromptLogEntry]:
        """Newest entries first."""

        records = await self._store.query(
            PROMPT_LOG_TABLE,
            order_by="timestamp",
            descending=True,
            limit=limit or self._settings.prompt_log_page_size,
        )
        return [PromptLogEntry.from_record(record) for record in records]

    async def log_prompt(
        self,
        original_prompt: str,
        tags: str | Sequence[str] | None = None,
        *,
        refinement: RefinementResult | None = None,
    ) -> PromptLogEntry:
        record = new_log_record(
            original_prompt,
            refined_prompt=refinement.refined_prompt if refinement else None,
            reasoning=refinement.reasoning if refinement else None,
            tags=parse_tags(tags),
        )
        entry_id = await self._store.insert(PROMPT_LOG_TABLE, record)
        logger.info(
            "prompt_logged",
            entry_id=entry_id,
            refined=refinement is not None,
            tags=record["tags"],
        )
        return PromptLogEntry.from_record({**record, "id": entry_id})

    async def refine(
        self, prompt: str, history: Sequence[str] | None = None
    ) -> RefinementResult:
        """Refine *prompt*; without an explicit history the user's recent log is used."""

        if history is None:
            history = await load_prompt_history(self._store, self._settings.prompt_history_limit)
        return await self._refiner.refine(prompt, history)

    async def refine_and_log(
        self, prompt: str, tags: str | Sequence[str] | None = None
    ) -> PromptLogEntry:
        """Refine then log; when refinement fails the original prompt is still logged."""

        try:
            result = await self.refine(prompt)
        except RefinementError:
            logger.warning("refine_and_log_refinement_failed", prompt_chars=len(prompt))
            await self.log_prompt(prompt, tags)
            raise
        return await self.log_prompt(prompt, tags, refinement=result)
