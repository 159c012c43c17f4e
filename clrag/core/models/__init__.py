"""clrag data models for knowledge records, ranking and retrieval results."""

from .base import CLRAGBaseModel, TimestampSchema, generate_id, utc_now
from .enums import EmbeddingInputType, KnowledgeCategory, SearchStrategy
from .knowledge import (
    CoverLetterExample,
    KnowledgeRecord,
    ProjectExample,
    ProjectMetadata,
    SkillExample,
    SkillMetadata,
    record_from_row,
)
from .ranked_candidate import RankedCandidate, ScoredId, sort_by_similarity
from .retrieval import CategorySearchOutcome, JobAnalysis, LengthTargets, RetrievalContext

__all__ = [
    # Base
    "CLRAGBaseModel",
    "TimestampSchema",
    "generate_id",
    "utc_now",
    # Enums
    "KnowledgeCategory",
    "SearchStrategy",
    "EmbeddingInputType",
    # Knowledge records
    "KnowledgeRecord",
    "CoverLetterExample",
    "ProjectExample",
    "ProjectMetadata",
    "SkillExample",
    "SkillMetadata",
    "record_from_row",
    # Ranking
    "RankedCandidate",
    "ScoredId",
    "sort_by_similarity",
    # Retrieval
    "JobAnalysis",
    "LengthTargets",
    "CategorySearchOutcome",
    "RetrievalContext",
]
