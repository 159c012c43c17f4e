"""RetrievalOrchestrator - embed, search three categories, rerank, hydrate, fall back."""

import asyncio
from pathlib import Path
from typing import Any

from ...integrations.openai_client import OpenAIClient
from ...kb.embedding import EmbeddingClient
from ...observability.logger import get_logger, request_context, setup_logging_from_config
from ...search.fallback import FallbackProvider
from ...search.hydrator import Hydrator
from ...search.matcher import CategoryMatcher
from ..analysis.domain_classifier import DomainClassifier
from ..analysis.domain_reranker import DomainReranker
from ..analysis.length_targets import LengthTargetDeriver
from ..config.loader import load_config
from ..config.settings import OpenAISettings, RetrievalSettings, TimeoutSettings
from ..models.base import generate_id
from ..models.enums import KnowledgeCategory, SearchStrategy
from ..models.retrieval import CategorySearchOutcome, RetrievalContext
from ..storage.base import EmbeddingProvider, VectorStore
from ..storage.object_store import KnowledgeStore

logger = get_logger(__name__)


class RetrievalOrchestrator:
    """Composes embedding, category search, reranking, hydration and fallback.

    Every collaborator is injected; the orchestrator holds no per-request
    state, so one instance can serve concurrent `retrieve` calls.
    """

    def __init__(
        self,
        store: VectorStore,
        embedding_client: EmbeddingClient,
        settings: RetrievalSettings | None = None,
        timeouts: TimeoutSettings | None = None,
        classifier: DomainClassifier | None = None,
        reranker: DomainReranker | None = None,
        length_deriver: LengthTargetDeriver | None = None,
    ):
        self.store = store
        self.embedding_client = embedding_client
        self.settings = settings or RetrievalSettings()
        self.timeouts = timeouts or TimeoutSettings()
        self.classifier = classifier or DomainClassifier()
        self.reranker = reranker or DomainReranker()
        self.length_deriver = length_deriver or LengthTargetDeriver()

        search_timeout = self.timeouts.search_seconds
        self.matcher = CategoryMatcher(store, self.settings, timeout=search_timeout)
        self.hydrator = Hydrator(store, self.settings, timeout=search_timeout)
        self.fallback_provider = FallbackProvider(store, self.settings, timeout=search_timeout)

    @classmethod
    def from_config(
        cls,
        config: dict[str, Any] | None = None,
        store: VectorStore | None = None,
        embedding_provider: EmbeddingProvider | None = None,
    ) -> "RetrievalOrchestrator":
        """Build an orchestrator from a loaded config dict (loads defaults when None)."""
        config = config if config is not None else load_config()
        setup_logging_from_config(config)
        timeouts = TimeoutSettings.from_config(config)
        provider = embedding_provider or OpenAIClient.from_settings(OpenAISettings.from_config(config))
        return cls(
            store=store or build_store(config),
            embedding_client=EmbeddingClient(provider, timeout=timeouts.embedding_seconds),
            settings=RetrievalSettings.from_config(config),
            timeouts=timeouts,
        )

    async def retrieve(
        self,
        job_title: str,
        job_description: str,
        domain_category: str | None = None,
    ) -> RetrievalContext:
        """Run one end-to-end retrieval for a job posting.

        Args:
            job_title: Job title
            job_description: Job description text
            domain_category: Optional domain category ("mobile", "web", "ai")
                selecting the category-scoped tables

        Returns:
            RetrievalContext with the three ranked lists and metadata

        Raises:
            InvalidDomainCategory: Unknown domain category (before any network call)
            EmbeddingProviderMisconfigured: No embedding credential configured
            EmbeddingUnavailable: The query vector could not be produced
        """
        domain = self.settings.normalize_domain(domain_category)
        request_id = generate_id("req_")

        with request_context(request_id=request_id):
            logger.info(
                "retrieval_started",
                job_title=job_title,
                description_length=len(job_description),
                domain_category=domain,
            )

            # Hard prerequisite: no search without a query vector.
            query_vector = await self.embedding_client.embed_job(job_title, job_description)
            job_analysis = self.classifier.classify(job_title, job_description)

            cover_letters, projects, skills = await asyncio.gather(
                self._search(KnowledgeCategory.COVER_LETTERS, query_vector, domain),
                self._search(KnowledgeCategory.PROJECTS, query_vector, domain),
                self._search(KnowledgeCategory.SKILLS, query_vector, domain),
            )

            if self.settings.rerank_projects and projects.candidates:
                reranked = self.reranker.rerank(projects.candidates, job_analysis)
                projects.candidates = reranked[: self._limit(KnowledgeCategory.PROJECTS)]
            else:
                projects.candidates = projects.candidates[: self._limit(KnowledgeCategory.PROJECTS)]

            cover_letters = await self.hydrator.hydrate_outcome(cover_letters)

            diagnostics = [cover_letters, projects, skills]
            total_matches = sum(outcome.count for outcome in diagnostics)
            # Evaluated before fallback substitution.
            has_knowledge_base = total_matches > 0

            r1, r2, r3 = cover_letters.candidates, projects.candidates, skills.candidates
            fallback_used = False
            if total_matches == 0:
                fallback = await self.fallback_provider.fallback(domain)
                r1, r2, r3 = fallback.r1, fallback.r2, fallback.r3
                fallback_used = True
                for outcome, candidates in zip(diagnostics, (r1, r2, r3)):
                    if candidates:
                        outcome.strategy = SearchStrategy.FALLBACK
                if fallback.errors:
                    logger.warning("fallback_errors", errors=fallback.errors)

            length_targets = self.length_deriver.derive_targets([c.primary_text for c in r1])

            context = RetrievalContext(
                r1=r1,
                r2=r2,
                r3=r3,
                has_knowledge_base=has_knowledge_base,
                total_matches=total_matches,
                fallback_used=fallback_used,
                job_analysis=job_analysis,
                length_targets=length_targets,
                domain_category=domain,
                request_id=request_id,
                diagnostics=diagnostics,
            )

            logger.info(
                "retrieval_completed",
                cover_letters=len(r1),
                projects=len(r2),
                skills=len(r3),
                total_matches=total_matches,
                has_knowledge_base=has_knowledge_base,
                fallback_used=fallback_used,
                primary_domain=job_analysis.primary_domain,
                errors=len(context.errors),
            )
            return context

    async def _search(
        self,
        category: KnowledgeCategory,
        query_vector: list[float],
        domain: str | None,
    ) -> CategorySearchOutcome:
        limit = self._limit(category)
        if category == KnowledgeCategory.PROJECTS and self.settings.rerank_projects:
            limit = max(limit, self.settings.projects_pool_limit)

        outcome = await self.matcher.search_with_outcome(
            category,
            query_vector,
            self.settings.thresholds[category.value],
            limit,
            table=self.settings.table_for(category, domain),
        )
        logger.info(
            "category_search_complete",
            category=category.value,
            table=outcome.table,
            strategy=outcome.strategy,
            accepted_threshold=outcome.accepted_threshold,
            count=outcome.count,
            errors=len(outcome.errors),
        )
        return outcome

    def _limit(self, category: KnowledgeCategory) -> int:
        return self.settings.limits[category.value]


def build_store(config: dict[str, Any]) -> VectorStore:
    """Construct the configured VectorStore backend ("json" or "chroma")."""
    storage = config.get("storage", {}) or {}
    backend = storage.get("backend", "json")

    if backend == "chroma":
        from ...kb.storage.chroma_client import get_chroma_store

        return get_chroma_store(
            mode=storage.get("chroma_mode", "memory"),
            persist_directory=storage.get("chroma_persist_directory"),
        )
    if backend == "json":
        return KnowledgeStore(Path(storage.get("object_store_dir", "data/knowledge")))
    raise ValueError(f"Unknown storage backend: {backend}")
