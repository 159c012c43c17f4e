"""Shared pydantic base class and id/time helpers for clrag models."""

import uuid
from datetime import datetime, timezone

from pydantic import BaseModel, ConfigDict, Field


class CLRAGBaseModel(BaseModel):
    """Common model configuration.

    Text is never whitespace-stripped on the way in: cover letters must reach
    the prompt exactly as stored. Enum fields hold their string values, and
    store column aliases are accepted alongside field names.
    """

    model_config = ConfigDict(
        from_attributes=True,
        validate_assignment=True,
        use_enum_values=True,
        populate_by_name=True,
    )


class TimestampSchema(CLRAGBaseModel):
    created_at: datetime | None = Field(None, description="Row creation time")


def generate_id(prefix: str = "") -> str:
    """Random UUID4 string, optionally prefixed (e.g. "req_")."""
    return f"{prefix}{uuid.uuid4()}"


def utc_now() -> datetime:
    return datetime.now(timezone.utc)
