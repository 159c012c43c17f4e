"""Typed views over the loaded configuration dict."""

from typing import Any

from pydantic import Field, field_validator

from ..exceptions import InvalidDomainCategory
from ..models.base import CLRAGBaseModel
from ..models.enums import KnowledgeCategory

_CATEGORIES = [c.value for c in KnowledgeCategory]


def _per_category(values: dict[str, Any]) -> dict[str, Any]:
    missing = [c for c in _CATEGORIES if c not in values]
    if missing:
        raise ValueError(f"missing categories: {', '.join(missing)}")
    return values


class FallbackSettings(CLRAGBaseModel):
    """Recency fallback used when semantic search finds nothing at all."""

    sentinel: float = Field(0.05, description="Similarity tagged on fallback records")
    limits: dict[str, int] = Field(
        default_factory=lambda: {"cover_letters": 2, "projects": 2, "skills": 4},
        description="Most-recent records per category",
    )

    @field_validator("limits")
    @classmethod
    def check_limits(cls, value: dict[str, int]) -> dict[str, int]:
        return _per_category(value)


class RetrievalSettings(CLRAGBaseModel):
    """Tables, thresholds and limits for the three category searches."""

    rerank_projects: bool = Field(True, description="Apply domain reranking to projects")
    projects_pool_limit: int = Field(20, ge=1, description="Projects fetched before reranking")
    domain_categories: list[str] = Field(
        default_factory=lambda: ["mobile", "web", "ai"], description="Allowed domain categories"
    )
    tables: dict[str, str] = Field(
        default_factory=lambda: {
            "cover_letters": "r1_job_examples",
            "projects": "r2_past_projects",
            "skills": "r3_skills",
        },
        description="Global tables per category",
    )
    domain_tables: dict[str, str] = Field(
        default_factory=lambda: {
            "cover_letters": "{domain}_r1_job_examples",
            "projects": "{domain}_r2_projects",
            "skills": "{domain}_r3_skills",
        },
        description="Domain category table patterns per category",
    )
    thresholds: dict[str, list[float]] = Field(
        default_factory=lambda: {
            "cover_letters": [0.3, 0.2, 0.1, 0.05],
            "projects": [0.3, 0.2, 0.1, 0.05],
            "skills": [0.2, 0.15, 0.1, 0.05],
        },
        description="Cascading thresholds, strictest first",
    )
    limits: dict[str, int] = Field(
        default_factory=lambda: {"cover_letters": 4, "projects": 3, "skills": 8},
        description="Candidates returned per category",
    )
    manual_scan_limits: dict[str, int] = Field(
        default_factory=lambda: {"cover_letters": 20, "projects": 20, "skills": 50},
        description="Rows scanned when every threshold returns nothing",
    )
    fallback: FallbackSettings = Field(default_factory=FallbackSettings)

    @field_validator("tables", "domain_tables", "thresholds", "limits", "manual_scan_limits")
    @classmethod
    def check_categories(cls, value: dict[str, Any]) -> dict[str, Any]:
        return _per_category(value)

    @field_validator("thresholds")
    @classmethod
    def check_thresholds(cls, value: dict[str, list[float]]) -> dict[str, list[float]]:
        for category, thresholds in value.items():
            if not thresholds:
                raise ValueError(f"{category}: at least one threshold is required")
        return value

    def normalize_domain(self, domain_category: str | None) -> str | None:
        """Lower-case and validate a domain category; None means global tables."""
        if domain_category is None or not domain_category.strip():
            return None
        domain = domain_category.strip().lower()
        if domain not in self.domain_categories:
            raise InvalidDomainCategory(domain_category, self.domain_categories)
        return domain

    def table_for(self, category: KnowledgeCategory | str, domain_category: str | None = None) -> str:
        key = KnowledgeCategory(category).value
        domain = self.normalize_domain(domain_category)
        if domain is None:
            return self.tables[key]
        return self.domain_tables[key].format(domain=domain)

    @classmethod
    def from_config(cls, config: dict[str, Any]) -> "RetrievalSettings":
        return cls.model_validate(config.get("retrieval", {}) or {})


class OpenAISettings(CLRAGBaseModel):
    """OpenAI models and transport settings."""

    api_key: str | None = Field(None, description="Falls back to OPENAI_API_KEY")
    embedding_model: str = Field("text-embedding-3-small")
    embedding_dimensions: int | None = Field(None, ge=1)
    completion_model: str = Field("gpt-4o-mini")
    timeout: float = Field(60, gt=0)
    max_retries: int = Field(3, ge=0)

    @classmethod
    def from_config(cls, config: dict[str, Any]) -> "OpenAISettings":
        return cls.model_validate(config.get("openai", {}) or {})


class TimeoutSettings(CLRAGBaseModel):
    """Per-call timeouts wrapped around every external request."""

    embedding_seconds: float = Field(30, gt=0)
    search_seconds: float = Field(15, gt=0)
    generation_seconds: float = Field(120, gt=0)

    @classmethod
    def from_config(cls, config: dict[str, Any]) -> "TimeoutSettings":
        return cls.model_validate(config.get("timeouts", {}) or {})


class GenerationSettings(CLRAGBaseModel):
    """Completion parameters and prompt text."""

    max_tokens: int = Field(1500, ge=1)
    temperature: float = Field(0.6, ge=0.0, le=2.0)
    strong_match_threshold: float = Field(0.2)
    system_prompt: str = Field("You are an expert cover letter writer.")
    knowledge_base_note: str = Field("")
    no_knowledge_base_note: str = Field("")

    @classmethod
    def from_config(cls, config: dict[str, Any]) -> "GenerationSettings":
        return cls.model_validate(config.get("generation", {}) or {})
