"""Retrieval results: job analysis, per-category outcomes and the final context."""

from pydantic import Field

from .base import CLRAGBaseModel
from .enums import KnowledgeCategory, SearchStrategy
from .ranked_candidate import RankedCandidate


class JobAnalysis(CLRAGBaseModel):
    """Domains and technologies detected in a job posting."""

    domains: list[str] = Field(default_factory=list, description="Matched domains in definition order")
    technologies: list[str] = Field(default_factory=list, description="Matched technologies (max 10)")
    primary_domain: str = Field("General", description="First matched domain")
    is_multi_domain: bool = Field(False, description="More than one domain matched")


class LengthTargets(CLRAGBaseModel):
    """Length and structure targets derived from example cover letters."""

    target_words: int = Field(..., ge=0, description="Mean word count")
    target_paragraphs: int = Field(..., ge=1, description="Mean paragraph count")
    words_range: tuple[int, int] = Field(..., description="Accepted word count band (low, high)")


class CategorySearchOutcome(CLRAGBaseModel):
    """Result of searching one knowledge category, including degraded paths."""

    category: KnowledgeCategory = Field(..., description="Category searched")
    table: str = Field(..., description="Source table")
    candidates: list[RankedCandidate] = Field(default_factory=list, description="Ranked candidates")
    strategy: SearchStrategy = Field(SearchStrategy.NONE, description="Path that produced the candidates")
    accepted_threshold: float | None = Field(None, description="Threshold that returned rows")
    thresholds_tried: list[float] = Field(default_factory=list, description="Thresholds queried in order")
    skipped_rows: int = Field(0, ge=0, description="Rows excluded for missing or malformed embeddings")
    dropped_rows: int = Field(0, ge=0, description="Rows dropped after hydration for blank text")
    errors: list[str] = Field(default_factory=list, description="Absorbed store or provider errors")

    @property
    def count(self) -> int:
        return len(self.candidates)


class RetrievalContext(CLRAGBaseModel):
    """Everything the prompt builder needs from retrieval."""

    r1: list[RankedCandidate] = Field(default_factory=list, description="Cover letter candidates")
    r2: list[RankedCandidate] = Field(default_factory=list, description="Project candidates")
    r3: list[RankedCandidate] = Field(default_factory=list, description="Skill candidates")
    has_knowledge_base: bool = Field(False, description="Semantic search found anything")
    total_matches: int = Field(0, ge=0, description="Semantic matches before fallback")
    fallback_used: bool = Field(False, description="Recency fallback substituted all lists")
    job_analysis: JobAnalysis | None = Field(None, description="Detected domains and technologies")
    length_targets: LengthTargets | None = Field(None, description="Targets derived from r1")
    domain_category: str | None = Field(None, description="Domain category tables searched")
    request_id: str | None = Field(None, description="Retrieval request identifier")
    diagnostics: list[CategorySearchOutcome] = Field(
        default_factory=list, description="Per-category search outcomes"
    )

    @property
    def errors(self) -> list[str]:
        return [f"{d.category}: {e}" for d in self.diagnostics for e in d.errors]
