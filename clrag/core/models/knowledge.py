"""Knowledge base record models: past cover letters, projects and skills.

Rows come back from the vector store as loosely shaped dicts. Each category
gets an explicit variant here with a defined-defaults policy, so missing
metadata never propagates as None into ranking or prompt building.
"""

import json
from typing import Any, ClassVar

from pydantic import AliasChoices, Field, field_validator

from .base import CLRAGBaseModel, TimestampSchema
from .enums import KnowledgeCategory


def _none_to_empty_str(value: Any) -> Any:
    return "" if value is None else value


class KnowledgeRecord(TimestampSchema):
    """Fields shared by every knowledge record."""

    category: ClassVar[KnowledgeCategory]
    primary_text_field: ClassVar[str]

    id: int = Field(..., description="Primary key in the source table")
    stored_embedding: list[float] | None = Field(
        None,
        validation_alias=AliasChoices("stored_embedding", "combined_embedding", "embedding"),
        description="Embedding computed at write time",
    )

    @field_validator("stored_embedding", mode="before")
    @classmethod
    def parse_embedding(cls, value: Any) -> Any:
        """Accept lists, array-likes and JSON strings; anything else is missing."""
        if value is None:
            return None
        if isinstance(value, str):
            try:
                value = json.loads(value)
            except ValueError:
                return None
        if hasattr(value, "tolist"):
            value = value.tolist()
        if not isinstance(value, (list, tuple)) or not value:
            return None
        if not all(isinstance(v, (int, float)) and not isinstance(v, bool) for v in value):
            return None
        return [float(v) for v in value]

    @property
    def primary_text(self) -> str:
        """The text field that must be non-empty for the record to be usable."""
        return getattr(self, self.primary_text_field)

    @property
    def has_embedding(self) -> bool:
        return bool(self.stored_embedding)


class CoverLetterExample(KnowledgeRecord):
    """A previously written cover letter and the job it answered."""

    category: ClassVar[KnowledgeCategory] = KnowledgeCategory.COVER_LETTERS
    primary_text_field: ClassVar[str] = "cover_letter"

    job_title: str = Field("", description="Job title the letter was written for")
    job_description: str = Field("", description="Job description the letter was written for")
    cover_letter: str = Field(
        "",
        validation_alias=AliasChoices("cover_letter", "cover_letter_text"),
        description="Letter text, returned verbatim",
    )
    metadata: dict[str, Any] = Field(default_factory=dict, description="Free-form metadata")

    @field_validator("job_title", "job_description", "cover_letter", mode="before")
    @classmethod
    def coerce_text(cls, value: Any) -> Any:
        return _none_to_empty_str(value)

    @field_validator("metadata", mode="before")
    @classmethod
    def coerce_metadata(cls, value: Any) -> Any:
        return value if isinstance(value, dict) else {}


class ProjectMetadata(CLRAGBaseModel):
    """Metadata attached to a project at ingestion time."""

    project_type: str = Field(
        "",
        validation_alias=AliasChoices("project_type", "projectType"),
        description="Domain label, e.g. 'AI/ML' or 'Web Development'",
    )
    technologies: list[str] = Field(default_factory=list, description="Technology keywords")

    @field_validator("project_type", mode="before")
    @classmethod
    def coerce_project_type(cls, value: Any) -> Any:
        return _none_to_empty_str(value)

    @field_validator("technologies", mode="before")
    @classmethod
    def coerce_technologies(cls, value: Any) -> Any:
        if value is None:
            return []
        if isinstance(value, str):
            return [t.strip() for t in value.split(",") if t.strip()]
        return value


class ProjectExample(KnowledgeRecord):
    """A past project that can be cited as evidence."""

    category: ClassVar[KnowledgeCategory] = KnowledgeCategory.PROJECTS
    primary_text_field: ClassVar[str] = "project_description"

    project_title: str = Field("", description="Project title")
    project_description: str = Field("", description="Project description")
    metadata: ProjectMetadata = Field(default_factory=ProjectMetadata, description="Project metadata")

    @field_validator("project_title", "project_description", mode="before")
    @classmethod
    def coerce_text(cls, value: Any) -> Any:
        return _none_to_empty_str(value)

    @field_validator("metadata", mode="before")
    @classmethod
    def coerce_metadata(cls, value: Any) -> Any:
        return value if value is not None else {}


class SkillMetadata(CLRAGBaseModel):
    """Metadata attached to a skill at ingestion time."""

    skill_category: str = Field(
        "",
        validation_alias=AliasChoices("skill_category", "skillCategory"),
        description="Skill grouping",
    )
    proficiency_level: str = Field(
        "",
        validation_alias=AliasChoices("proficiency_level", "proficiencyLevel"),
        description="Self-assessed proficiency",
    )

    @field_validator("skill_category", "proficiency_level", mode="before")
    @classmethod
    def coerce_text(cls, value: Any) -> Any:
        return _none_to_empty_str(value)


class SkillExample(KnowledgeRecord):
    """A skill with a short narrative description."""

    category: ClassVar[KnowledgeCategory] = KnowledgeCategory.SKILLS
    primary_text_field: ClassVar[str] = "skill_description"

    skill_name: str = Field("", description="Skill name")
    skill_description: str = Field("", description="Skill description")
    metadata: SkillMetadata = Field(default_factory=SkillMetadata, description="Skill metadata")

    @field_validator("skill_name", "skill_description", mode="before")
    @classmethod
    def coerce_text(cls, value: Any) -> Any:
        return _none_to_empty_str(value)

    @field_validator("metadata", mode="before")
    @classmethod
    def coerce_metadata(cls, value: Any) -> Any:
        return value if value is not None else {}


RECORD_TYPES: dict[str, type[KnowledgeRecord]] = {
    KnowledgeCategory.COVER_LETTERS.value: CoverLetterExample,
    KnowledgeCategory.PROJECTS.value: ProjectExample,
    KnowledgeCategory.SKILLS.value: SkillExample,
}


def record_from_row(category: KnowledgeCategory | str, row: dict[str, Any]) -> KnowledgeRecord:
    """Parse a raw store row into the record variant for its category."""
    record_cls = RECORD_TYPES[KnowledgeCategory(category).value]
    return record_cls.model_validate(row)
