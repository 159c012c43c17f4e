"""Shared fakes for the embedding provider, vector store and generation provider."""

import asyncio
from collections.abc import AsyncIterator
from types import SimpleNamespace
from typing import Any

import pytest

from clrag.core.models.enums import EmbeddingInputType
from clrag.core.storage.base import (
    EmbeddingProvider,
    Row,
    TextGenerationProvider,
    VectorStore,
    project_columns,
    sort_key_recent,
)
from clrag.kb.vector_math import cosine_similarity


class FakeEmbeddingProvider(EmbeddingProvider):
    def __init__(self, vector: list[float] | None = None, error: Exception | None = None, delay: float = 0):
        self.vector = vector if vector is not None else [1.0, 0.0]
        self.error = error
        self.delay = delay
        self.calls: list[tuple[str, str]] = []

    async def embed(self, text: str, input_type: EmbeddingInputType | str = EmbeddingInputType.QUERY) -> list[float]:
        self.calls.append((text, getattr(input_type, "value", input_type)))
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        return list(self.vector)


class RecordingStore(VectorStore):
    """In-memory VectorStore that records every call.

    `scripted[table][threshold]` pins what a similarity query returns at one
    threshold; unscripted tables are scored with real cosine similarity.
    `failures[(operation, table)]` raises on that operation, and
    `delays[table]` sleeps before answering.
    """

    def __init__(self, tables: dict[str, list[Row]] | None = None):
        self.tables: dict[str, list[Row]] = tables or {}
        self.scripted: dict[str, dict[float, list[Row]]] = {}
        self.failures: dict[tuple[str, str], Exception] = {}
        self.delays: dict[str, float] = {}
        self.calls: list[tuple[Any, ...]] = []

    def calls_for(self, operation: str, table: str | None = None) -> list[tuple[Any, ...]]:
        return [c for c in self.calls if c[0] == operation and (table is None or c[1] == table)]

    async def _enter(self, operation: str, table: str) -> None:
        if table in self.delays:
            await asyncio.sleep(self.delays[table])
        error = self.failures.get((operation, table))
        if error is not None:
            raise error

    async def similarity_search(self, table, query_vector, threshold, limit):
        self.calls.append(("similarity_search", table, threshold, limit))
        await self._enter("similarity_search", table)
        if table in self.scripted:
            return [dict(r) for r in self.scripted[table].get(threshold, [])][:limit]
        scored = []
        for row in self.tables.get(table, []):
            embedding = row.get("combined_embedding")
            if not embedding:
                continue
            similarity = cosine_similarity(query_vector, embedding)
            if similarity >= threshold:
                scored.append({**row, "similarity": similarity})
        scored.sort(key=lambda r: r["similarity"], reverse=True)
        return scored[:limit]

    async def select_by_ids(self, table, ids, columns=None):
        self.calls.append(("select_by_ids", table, list(ids), columns))
        await self._enter("select_by_ids", table)
        wanted = set(ids)
        return [project_columns(r, columns) for r in self.tables.get(table, []) if r.get("id") in wanted]

    async def select_recent(self, table, limit, order_column="created_at"):
        self.calls.append(("select_recent", table, limit))
        await self._enter("select_recent", table)
        rows = sorted(self.tables.get(table, []), key=lambda r: sort_key_recent(r, order_column), reverse=True)
        return [dict(r) for r in rows[:limit]]


class FakeGenerationProvider(TextGenerationProvider):
    def __init__(
        self,
        chunks: list[str] | None = None,
        error: Exception | None = None,
        is_configured: bool = True,
    ):
        self.chunks = chunks if chunks is not None else ["Dear Hiring Manager,\n\n", "Thanks."]
        self.error = error
        self.is_configured = is_configured
        self.calls: list[dict[str, Any]] = []

    async def complete_stream(
        self,
        system_prompt: str,
        user_prompt: str,
        max_tokens: int = 1500,
        temperature: float = 0.6,
    ) -> AsyncIterator[str]:
        self.calls.append(
            {
                "system_prompt": system_prompt,
                "user_prompt": user_prompt,
                "max_tokens": max_tokens,
                "temperature": temperature,
            }
        )
        for chunk in self.chunks:
            yield chunk
        if self.error is not None:
            raise self.error


def cover_letter_row(record_id: int, text: str, embedding=None, created_at="2024-01-01T00:00:00+00:00", **extra) -> Row:
    return {
        "id": record_id,
        "job_title": extra.pop("job_title", f"Job {record_id}"),
        "job_description": extra.pop("job_description", "desc"),
        "cover_letter": text,
        "combined_embedding": embedding,
        "metadata": {},
        "created_at": created_at,
        **extra,
    }


def project_row(record_id: int, description: str, embedding=None, project_type="", technologies=None,
                created_at="2024-01-01T00:00:00+00:00", **extra) -> Row:
    return {
        "id": record_id,
        "project_title": extra.pop("project_title", f"Project {record_id}"),
        "project_description": description,
        "combined_embedding": embedding,
        "metadata": {"projectType": project_type, "technologies": technologies or []},
        "created_at": created_at,
        **extra,
    }


def skill_row(record_id: int, description: str, embedding=None, created_at="2024-01-01T00:00:00+00:00", **extra) -> Row:
    return {
        "id": record_id,
        "skill_name": extra.pop("skill_name", f"Skill {record_id}"),
        "skill_description": description,
        "combined_embedding": embedding,
        "metadata": {"skillCategory": "Technical", "proficiencyLevel": "Expert"},
        "created_at": created_at,
        **extra,
    }


@pytest.fixture
def store():
    return RecordingStore()


@pytest.fixture
def embedding_provider():
    return FakeEmbeddingProvider()


@pytest.fixture
def generation_provider():
    return FakeGenerationProvider()


@pytest.fixture
def rows():
    """Row builders for the three knowledge categories."""
    return {"cover_letters": cover_letter_row, "projects": project_row, "skills": skill_row}


@pytest.fixture
def fakes():
    return SimpleNamespace(
        EmbeddingProvider=FakeEmbeddingProvider,
        Store=RecordingStore,
        GenerationProvider=FakeGenerationProvider,
    )


@pytest.fixture(autouse=True)
def _isolated_env(monkeypatch):
    for name in ("CLRAG_ENV", "CLRAG_TEST_MODE", "CLRAG_MOCK_OPENAI", "CLRAG_CONFIG_DIR", "OPENAI_API_KEY"):
        monkeypatch.delenv(name, raising=False)
