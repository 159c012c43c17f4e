"""Enumeration types for clrag models."""

from enum import Enum


class KnowledgeCategory(str, Enum):
    """Knowledge base categories searched for every job."""

    COVER_LETTERS = "cover_letters"
    PROJECTS = "projects"
    SKILLS = "skills"


class SearchStrategy(str, Enum):
    """How a category search produced its candidates."""

    INDEXED = "indexed"
    MANUAL_SCAN = "manual_scan"
    FALLBACK = "fallback"
    NONE = "none"


class EmbeddingInputType(str, Enum):
    """Role of the text being embedded."""

    QUERY = "query"
    DOCUMENT = "document"
