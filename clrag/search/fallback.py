"""Most-recent records used when semantic search finds nothing anywhere."""

from __future__ import annotations

import asyncio

from pydantic import Field, ValidationError

from ..core.config.settings import RetrievalSettings
from ..core.models.base import CLRAGBaseModel
from ..core.models.enums import KnowledgeCategory
from ..core.models.knowledge import record_from_row
from ..core.models.ranked_candidate import RankedCandidate
from ..core.storage.base import VectorStore
from ..observability.logger import get_logger

logger = get_logger(__name__)


class FallbackResult(CLRAGBaseModel):
    """Recency lists for the three categories."""

    r1: list[RankedCandidate] = Field(default_factory=list)
    r2: list[RankedCandidate] = Field(default_factory=list)
    r3: list[RankedCandidate] = Field(default_factory=list)
    errors: list[str] = Field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.r1) + len(self.r2) + len(self.r3)


class FallbackProvider:
    """Newest-first records per category, tagged with a sentinel similarity.

    No similarity is computed here. Every record gets `settings.fallback.sentinel`
    (0.05 by default) so it can be formatted like a search hit while still
    reading as a low-confidence match.
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

    async def fallback(self, domain_category: str | None = None) -> FallbackResult:
        categories = list(KnowledgeCategory)
        results = await asyncio.gather(
            *(self._recent(category, domain_category) for category in categories)
        )
        lists = dict(zip(categories, results))

        result = FallbackResult(
            r1=lists[KnowledgeCategory.COVER_LETTERS][0],
            r2=lists[KnowledgeCategory.PROJECTS][0],
            r3=lists[KnowledgeCategory.SKILLS][0],
            errors=[err for _, err in results if err],
        )
        logger.info(
            "fallback_used",
            domain_category=domain_category,
            cover_letters=len(result.r1),
            projects=len(result.r2),
            skills=len(result.r3),
        )
        return result

    async def _recent(
        self,
        category: KnowledgeCategory,
        domain_category: str | None,
    ) -> tuple[list[RankedCandidate], str | None]:
        table = self.settings.table_for(category, domain_category)
        limit = self.settings.fallback.limits[category.value]
        sentinel = self.settings.fallback.sentinel

        try:
            rows = await asyncio.wait_for(self.store.select_recent(table, limit), timeout=self.timeout)
        except asyncio.TimeoutError:
            logger.warning("fallback_read_timeout", category=category.value, table=table)
            return [], f"{category.value}: fallback read timed out"
        except Exception as e:
            logger.warning("fallback_read_failed", category=category.value, table=table, error=str(e))
            return [], f"{category.value}: fallback read failed: {e}"

        candidates: list[RankedCandidate] = []
        dropped = 0
        for row in rows[:limit]:
            try:
                record = record_from_row(category, row)
            except ValidationError:
                dropped += 1
                continue
            # Blank letters never reach generation
            if category == KnowledgeCategory.COVER_LETTERS and not record.primary_text.strip():
                dropped += 1
                continue
            candidates.append(RankedCandidate.from_record(record, sentinel, fallback=True))
        if dropped:
            logger.info("fallback_rows_dropped", category=category.value, table=table, dropped=dropped)
        return candidates, None
