"""RankedCandidate models: a knowledge record plus its retrieval scores."""

from pydantic import Field

from .base import CLRAGBaseModel
from .knowledge import CoverLetterExample, KnowledgeRecord, ProjectExample, SkillExample


class ScoredId(CLRAGBaseModel):
    """Minimal search hit: a primary key and the similarity it scored."""

    id: int = Field(..., description="Primary key in the source table")
    similarity: float = Field(..., description="Cosine similarity to the query")


class RankedCandidate(CLRAGBaseModel):
    """Knowledge record annotated with similarity and, for projects, relevance."""

    record: CoverLetterExample | ProjectExample | SkillExample = Field(
        ..., description="The retrieved record"
    )
    similarity: float = Field(..., description="Cosine similarity to the query")

    # Domain reranking (projects only)
    relevance_score: float | None = Field(None, ge=0.0, description="Domain + technology match weight")
    domain_match: bool = Field(False, description="At least one job domain matched")
    tech_match: bool = Field(False, description="At least one job technology matched")

    fallback: bool = Field(False, description="Supplied by recency fallback, not semantic search")

    @property
    def id(self) -> int:
        return self.record.id

    @property
    def primary_text(self) -> str:
        return self.record.primary_text

    @classmethod
    def from_record(cls, record: KnowledgeRecord, similarity: float, **kwargs) -> "RankedCandidate":
        return cls(record=record, similarity=similarity, **kwargs)


def sort_by_similarity(candidates: list[RankedCandidate]) -> list[RankedCandidate]:
    """Sort descending by similarity; ties keep their retrieval order."""
    return sorted(candidates, key=lambda c: c.similarity, reverse=True)
