"""Abstract storage and provider interfaces used by the retrieval core."""

from abc import ABC, abstractmethod
from collections.abc import AsyncIterator
from typing import Any

from ..models.enums import EmbeddingInputType

Row = dict[str, Any]


class VectorStore(ABC):
    """Relational store with vector similarity queries.

    Retrieval only reads through this interface. Rows are plain dicts keyed by
    column name; similarity search rows carry an extra `similarity` key.
    """

    @abstractmethod
    async def similarity_search(
        self,
        table: str,
        query_vector: list[float],
        threshold: float,
        limit: int,
    ) -> list[Row]:
        """Rows with cosine similarity >= threshold, most similar first.

        Returns an empty list, not an error, when nothing clears the threshold.
        """

    @abstractmethod
    async def select_by_ids(
        self,
        table: str,
        ids: list[int],
        columns: list[str] | None = None,
    ) -> list[Row]:
        """Exact rows for the given primary keys, in no particular order."""

    @abstractmethod
    async def select_recent(
        self,
        table: str,
        limit: int,
        order_column: str = "created_at",
    ) -> list[Row]:
        """Up to `limit` rows, newest first by `order_column`."""


class EmbeddingProvider(ABC):
    """External embedding model."""

    @abstractmethod
    async def embed(
        self,
        text: str,
        input_type: EmbeddingInputType | str = EmbeddingInputType.QUERY,
    ) -> list[float]:
        """Embedding vector for one text."""


class TextGenerationProvider(ABC):
    """External text generation model."""

    @abstractmethod
    def complete_stream(
        self,
        system_prompt: str,
        user_prompt: str,
        max_tokens: int = 1500,
        temperature: float = 0.6,
    ) -> AsyncIterator[str]:
        """Stream of generated text chunks."""


def project_columns(row: Row, columns: list[str] | None) -> Row:
    """Keep only the requested columns (all when `columns` is None); `id` is always kept."""
    if columns is None:
        return dict(row)
    keep = set(columns) | {"id"}
    return {k: v for k, v in row.items() if k in keep}


def sort_key_recent(row: Row, order_column: str) -> str:
    value = row.get(order_column)
    return "" if value is None else str(value)
