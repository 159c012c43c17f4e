"""Cascading-threshold similarity search over one knowledge category."""

from __future__ import annotations

import asyncio
import math

from pydantic import ValidationError

from ..core.config.settings import RetrievalSettings
from ..core.models.enums import KnowledgeCategory, SearchStrategy
from ..core.models.knowledge import record_from_row
from ..core.models.ranked_candidate import RankedCandidate, sort_by_similarity
from ..core.models.retrieval import CategorySearchOutcome
from ..core.storage.base import Row, VectorStore
from ..kb.vector_math import cosine_similarity
from ..observability.logger import get_logger

logger = get_logger(__name__)


class CategoryMatcher:
    """Search one category with progressively looser similarity thresholds.

    Thresholds are tried strictest first and the first non-empty result set
    wins. When every threshold comes back empty, a capped number of recent
    rows is scored client-side instead (the manual scan). A store error at one
    threshold counts as zero rows for that threshold, so the cascade and the
    manual scan still get their chance.
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

    async def search(
        self,
        category: KnowledgeCategory | str,
        query_vector: list[float],
        thresholds: list[float],
        limit: int,
        table: str | None = None,
    ) -> list[RankedCandidate]:
        outcome = await self.search_with_outcome(category, query_vector, thresholds, limit, table)
        return outcome.candidates

    async def search_with_outcome(
        self,
        category: KnowledgeCategory | str,
        query_vector: list[float],
        thresholds: list[float],
        limit: int,
        table: str | None = None,
    ) -> CategorySearchOutcome:
        category = KnowledgeCategory(category)
        table = table or self.settings.table_for(category)
        outcome = CategorySearchOutcome(category=category, table=table)

        for threshold in thresholds:
            outcome.thresholds_tried.append(threshold)
            try:
                rows = await asyncio.wait_for(
                    self.store.similarity_search(table, query_vector, threshold, limit),
                    timeout=self.timeout,
                )
            except asyncio.TimeoutError:
                logger.warning("threshold_search_timeout", category=category.value, table=table, threshold=threshold)
                outcome.errors.append(f"similarity search timed out at threshold {threshold}")
                continue
            except Exception as e:
                logger.warning(
                    "threshold_search_failed",
                    category=category.value,
                    table=table,
                    threshold=threshold,
                    error=str(e),
                )
                outcome.errors.append(f"similarity search failed at threshold {threshold}: {e}")
                continue

            # First non-empty threshold wins; looser ones are never queried.
            if rows:
                candidates, skipped = self._candidates(category, rows, threshold)
                outcome.candidates = candidates[:limit]
                outcome.skipped_rows += skipped
                outcome.strategy = SearchStrategy.INDEXED
                outcome.accepted_threshold = threshold
                logger.info(
                    "threshold_accepted",
                    category=category.value,
                    table=table,
                    threshold=threshold,
                    count=outcome.count,
                )
                return outcome

        return await self._manual_scan(outcome, query_vector, limit)

    def _candidates(
        self,
        category: KnowledgeCategory,
        rows: list[Row],
        threshold: float,
    ) -> tuple[list[RankedCandidate], int]:
        candidates: list[RankedCandidate] = []
        skipped = 0
        for row in rows:
            try:
                similarity = float(row["similarity"])
                record = record_from_row(category, row)
            except (KeyError, TypeError, ValueError, ValidationError):
                skipped += 1
                continue
            if not math.isfinite(similarity) or similarity < threshold:
                skipped += 1
                continue
            candidates.append(RankedCandidate.from_record(record, similarity))
        return sort_by_similarity(candidates), skipped

    async def _manual_scan(
        self,
        outcome: CategorySearchOutcome,
        query_vector: list[float],
        limit: int,
    ) -> CategorySearchOutcome:
        category = KnowledgeCategory(outcome.category)
        scan_limit = self.settings.manual_scan_limits[category.value]
        logger.info("manual_scan_started", category=category.value, table=outcome.table, scan_limit=scan_limit)

        try:
            rows = await asyncio.wait_for(
                self.store.select_recent(outcome.table, scan_limit),
                timeout=self.timeout,
            )
        except asyncio.TimeoutError:
            logger.warning("manual_scan_timeout", category=category.value, table=outcome.table)
            outcome.errors.append("manual scan timed out")
            return outcome
        except Exception as e:
            logger.warning("manual_scan_failed", category=category.value, table=outcome.table, error=str(e))
            outcome.errors.append(f"manual scan failed: {e}")
            return outcome

        candidates: list[RankedCandidate] = []
        for row in rows:
            try:
                record = record_from_row(category, row)
            except ValidationError:
                outcome.skipped_rows += 1
                continue
            # Rows without a usable embedding are excluded, not scored as 0.
            if not record.has_embedding or len(record.stored_embedding) != len(query_vector):
                outcome.skipped_rows += 1
                continue
            similarity = cosine_similarity(query_vector, record.stored_embedding)
            candidates.append(RankedCandidate.from_record(record, similarity))

        outcome.candidates = sort_by_similarity(candidates)[:limit]
        if outcome.candidates:
            outcome.strategy = SearchStrategy.MANUAL_SCAN
        logger.info(
            "manual_scan_complete",
            category=category.value,
            table=outcome.table,
            scanned=len(rows),
            skipped=outcome.skipped_rows,
            count=outcome.count,
        )
        return outcome
