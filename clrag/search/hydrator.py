"""Re-read search hits by primary key so text fields are exact."""

from __future__ import annotations

import asyncio
from typing import Protocol

from pydantic import ValidationError

from ..core.config.settings import RetrievalSettings
from ..core.models.enums import KnowledgeCategory
from ..core.models.knowledge import record_from_row
from ..core.models.ranked_candidate import RankedCandidate, sort_by_similarity
from ..core.models.retrieval import CategorySearchOutcome
from ..core.storage.base import VectorStore
from ..observability.logger import get_logger

logger = get_logger(__name__)

# Columns read back per category; embeddings are never needed downstream.
HYDRATION_COLUMNS: dict[str, list[str]] = {
    KnowledgeCategory.COVER_LETTERS.value: [
        "job_title",
        "job_description",
        "cover_letter",
        "cover_letter_text",
        "metadata",
        "created_at",
    ],
    KnowledgeCategory.PROJECTS.value: ["project_title", "project_description", "metadata", "created_at"],
    KnowledgeCategory.SKILLS.value: ["skill_name", "skill_description", "metadata", "created_at"],
}


class ScoredHit(Protocol):
    id: int
    similarity: float


class Hydrator:
    """Fetch authoritative rows for ranked ids and re-attach their similarity.

    Records whose primary text is empty or whitespace after hydration are
    dropped, and the drop count is logged.
    """

    def __init__(
        self,
        store: VectorStore,
        settings: RetrievalSettings | None = None,
        timeout: float | None = None,
    ):
        self.store = store
        self.settings = settings or RetrievalSettings()
        self.timeout = timeout

    async def hydrate(
        self,
        ranked_ids: list[ScoredHit],
        category: KnowledgeCategory | str,
        table: str | None = None,
    ) -> list[RankedCandidate]:
        candidates, _, _ = await self._hydrate(ranked_ids, KnowledgeCategory(category), table)
        return candidates

    async def hydrate_outcome(self, outcome: CategorySearchOutcome) -> CategorySearchOutcome:
        """Hydrate an outcome's candidates in place, recording drops and errors."""
        candidates, dropped, error = await self._hydrate(
            outcome.candidates, KnowledgeCategory(outcome.category), outcome.table
        )
        outcome.candidates = candidates
        outcome.dropped_rows += dropped
        if error:
            outcome.errors.append(error)
        return outcome

    async def _hydrate(
        self,
        ranked_ids: list[ScoredHit],
        category: KnowledgeCategory,
        table: str | None,
    ) -> tuple[list[RankedCandidate], int, str | None]:
        if not ranked_ids:
            return [], 0, None

        table = table or self.settings.table_for(category)

        similarities: dict[int, float] = {}
        order: list[int] = []
        for hit in ranked_ids:
            if hit.id not in similarities:
                similarities[hit.id] = hit.similarity
                order.append(hit.id)

        try:
            rows = await asyncio.wait_for(
                self.store.select_by_ids(table, order, HYDRATION_COLUMNS[category.value]),
                timeout=self.timeout,
            )
        except asyncio.TimeoutError:
            logger.error("hydration_timeout", category=category.value, table=table)
            return [], len(order), "hydration timed out"
        except Exception as e:
            logger.error("hydration_failed", category=category.value, table=table, error=str(e))
            return [], len(order), f"hydration failed: {e}"

        by_id = {}
        for row in rows:
            try:
                record = record_from_row(category, row)
            except ValidationError:
                continue
            by_id[record.id] = record

        # Walk ids in ranked order so equal similarities keep retrieval order.
        hydrated: list[RankedCandidate] = []
        for record_id in order:
            record = by_id.get(record_id)
            if record is None or not record.primary_text.strip():
                continue
            hydrated.append(RankedCandidate.from_record(record, similarities[record_id]))

        dropped = len(order) - len(hydrated)
        if dropped:
            logger.warning(
                "hydration_dropped",
                category=category.value,
                table=table,
                dropped=dropped,
                requested=len(order),
            )
        return sort_by_similarity(hydrated), dropped, None
