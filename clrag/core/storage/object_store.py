"""File-based knowledge store with brute-force vector search.

One directory per table and one JSON file per row. Similarity search scores
every row with an embedding client-side, which is fine for the few hundred
examples a personal knowledge base holds and keeps local runs and tests free
of a database.
"""

from __future__ import annotations

import json
from datetime import datetime
from pathlib import Path
from typing import Any

from ...kb.vector_math import cosine_similarity
from ..models.base import utc_now
from ..models.knowledge import KnowledgeRecord
from .base import Row, VectorStore, project_columns, sort_key_recent

# Same aliases KnowledgeRecord.stored_embedding validates from
EMBEDDING_COLUMNS = ("stored_embedding", "combined_embedding", "embedding")


class KnowledgeStore(VectorStore):
    """Simple JSON-backed vector store."""

    def __init__(self, base_dir: str | Path | None = None):
        self.base_dir = Path(base_dir) if base_dir else Path("data/knowledge")
        self.base_dir.mkdir(parents=True, exist_ok=True)

    # ------------------------------------------------------------------
    # Generic helpers
    # ------------------------------------------------------------------
    def _table_dir(self, table: str) -> Path:
        return self.base_dir / table

    def _dump(self, path: Path, data: dict[str, Any]) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(data, indent=2, default=_json_default), encoding="utf-8")

    def _load(self, path: Path) -> dict[str, Any] | None:
        if not path.exists():
            return None
        return json.loads(path.read_text(encoding="utf-8"))

    def _rows(self, table: str) -> list[Row]:
        table_dir = self._table_dir(table)
        if not table_dir.exists():
            return []
        rows: list[Row] = []
        for path in sorted(table_dir.glob("*.json"), key=lambda p: _id_sort_key(p.stem)):
            data = self._load(path)
            if data:
                rows.append(data)
        return rows

    # ------------------------------------------------------------------
    # Writes (seeding and local tooling; retrieval never writes)
    # ------------------------------------------------------------------
    def save_record(self, table: str, row: Row) -> Row:
        """Insert or replace a row. Assigns `id` and `created_at` when missing."""
        row = dict(row)
        if row.get("id") is None:
            existing = [r.get("id") for r in self._rows(table)]
            row["id"] = max((i for i in existing if isinstance(i, int)), default=0) + 1
        row.setdefault("created_at", utc_now().isoformat())
        self._dump(self._table_dir(table) / f"{row['id']}.json", row)
        return row

    # ------------------------------------------------------------------
    # VectorStore
    # ------------------------------------------------------------------
    async def similarity_search(
        self,
        table: str,
        query_vector: list[float],
        threshold: float,
        limit: int,
    ) -> list[Row]:
        scored: list[Row] = []
        for row in self._rows(table):
            embedding = _row_embedding(row)
            if not embedding:
                continue
            similarity = cosine_similarity(query_vector, embedding)
            if similarity >= threshold:
                scored.append({**row, "similarity": similarity})

        scored.sort(key=lambda r: r["similarity"], reverse=True)
        return scored[:limit]

    async def select_by_ids(
        self,
        table: str,
        ids: list[int],
        columns: list[str] | None = None,
    ) -> list[Row]:
        rows: list[Row] = []
        for record_id in ids:
            data = self._load(self._table_dir(table) / f"{record_id}.json")
            if data:
                rows.append(project_columns(data, columns))
        return rows

    async def select_recent(
        self,
        table: str,
        limit: int,
        order_column: str = "created_at",
    ) -> list[Row]:
        rows = self._rows(table)
        rows.sort(key=lambda r: sort_key_recent(r, order_column), reverse=True)
        return rows[:limit]


def _row_embedding(row: Row) -> list[float] | None:
    """First parseable embedding under any column name a record accepts."""
    for column in EMBEDDING_COLUMNS:
        embedding = KnowledgeRecord.parse_embedding(row.get(column))
        if embedding:
            return embedding
    return None


def _json_default(value: Any) -> Any:
    if isinstance(value, datetime):
        return value.isoformat()
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def _id_sort_key(stem: str) -> tuple[int, str]:
    return (int(stem), "") if stem.isdigit() else (0, stem)
