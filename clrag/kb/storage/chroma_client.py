"""ChromaDB-backed vector store.

One collection per knowledge table, cosine space. The full row (minus its
embedding) is kept as JSON in the collection metadata so reads by id return
the exact stored field values.
"""

import asyncio
import json
from typing import Any

try:
    import chromadb
    CHROMADB_AVAILABLE = True
except ImportError:
    CHROMADB_AVAILABLE = False

from ...core.models.base import utc_now
from ...core.storage.base import Row, VectorStore, project_columns, sort_key_recent
from ...observability.logger import get_logger

logger = get_logger(__name__)

ROW_KEY = "row_json"
EMBEDDING_COLUMN = "combined_embedding"


class ChromaKnowledgeStore(VectorStore):
    """VectorStore over ChromaDB collections."""

    def __init__(
        self,
        mode: str = "memory",
        persist_directory: str | None = None,
    ):
        """Initialize ChromaDB client.

        Args:
            mode: "memory" for in-memory or "persistent" for disk storage
            persist_directory: Directory for persistent storage
        """
        if not CHROMADB_AVAILABLE:
            raise ImportError(
                "ChromaDB not installed. Install with: pip install chromadb"
            )

        self.mode = mode
        self.persist_directory = persist_directory
        self.logger = get_logger(f"{__name__}.{self.__class__.__name__}")

        if mode == "memory":
            self.client = chromadb.EphemeralClient()
            self.logger.info("chroma_client_initialized", mode="in-memory")
        else:
            if not persist_directory:
                raise ValueError("persist_directory required for persistent mode")
            self.client = chromadb.PersistentClient(path=persist_directory)
            self.logger.info(
                "chroma_client_initialized",
                mode="persistent",
                directory=persist_directory,
            )

        self._collections: dict[str, Any] = {}

    def _collection(self, table: str) -> Any:
        if table not in self._collections:
            self._collections[table] = self.client.get_or_create_collection(
                name=table,
                metadata={"hnsw:space": "cosine"},  # Use cosine similarity
            )
        return self._collections[table]

    # ------------------------------------------------------------------
    # Writes (seeding and local tooling; retrieval never writes)
    # ------------------------------------------------------------------
    def save_record(self, table: str, row: Row) -> Row:
        """Upsert a row; it must carry an `id` and a `combined_embedding`."""
        row = dict(row)
        embedding = row.get(EMBEDDING_COLUMN)
        if row.get("id") is None or not embedding:
            raise ValueError("row requires id and combined_embedding")
        row.setdefault("created_at", utc_now().isoformat())

        stored = {k: v for k, v in row.items() if k != EMBEDDING_COLUMN}
        try:
            self._collection(table).upsert(
                ids=[str(row["id"])],
                embeddings=[list(embedding)],
                metadatas=[{"created_at": str(row["created_at"]), ROW_KEY: json.dumps(stored, default=str)}],
            )
        except Exception as e:
            self.logger.error("save_record_failed", table=table, error=str(e), exc_info=True)
            raise
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
        return await asyncio.to_thread(self._similarity_search, table, query_vector, threshold, limit)

    def _similarity_search(
        self,
        table: str,
        query_vector: list[float],
        threshold: float,
        limit: int,
    ) -> list[Row]:
        collection = self._collection(table)
        available = collection.count()
        if available == 0:
            return []

        try:
            results = collection.query(
                query_embeddings=[list(query_vector)],
                n_results=min(limit, available),
                include=["metadatas", "distances", "embeddings"],
            )
        except Exception as e:
            self.logger.error("query_failed", table=table, error=str(e), exc_info=True)
            raise

        ids = (results.get("ids") or [[]])[0]
        metadatas = (results.get("metadatas") or [[]])[0]
        distances = (results.get("distances") or [[]])[0]
        embeddings = _first_or_empty(results.get("embeddings"))

        rows: list[Row] = []
        for i, (metadata, distance) in enumerate(zip(metadatas, distances)):
            if distance is None:
                continue
            similarity = 1.0 - float(distance)
            if similarity < threshold:
                continue
            row = _decode_row(ids[i], metadata, embeddings[i] if i < len(embeddings) else None)
            row["similarity"] = similarity
            rows.append(row)

        rows.sort(key=lambda r: r["similarity"], reverse=True)
        self.logger.debug("query_complete", table=table, threshold=threshold, results_count=len(rows))
        return rows

    async def select_by_ids(
        self,
        table: str,
        ids: list[int],
        columns: list[str] | None = None,
    ) -> list[Row]:
        if not ids:
            return []
        results = await asyncio.to_thread(
            self._collection(table).get,
            ids=[str(i) for i in ids],
            include=["metadatas", "embeddings"],
        )
        return [project_columns(row, columns) for row in _decode_get(results)]

    async def select_recent(
        self,
        table: str,
        limit: int,
        order_column: str = "created_at",
    ) -> list[Row]:
        results = await asyncio.to_thread(
            self._collection(table).get,
            include=["metadatas", "embeddings"],
        )
        rows = _decode_get(results)
        rows.sort(key=lambda r: sort_key_recent(r, order_column), reverse=True)
        return rows[:limit]


def _first_or_empty(nested: Any) -> list[Any]:
    if nested is None or len(nested) == 0:
        return []
    return list(nested[0]) if nested[0] is not None else []


def _decode_row(record_id: str, metadata: dict[str, Any] | None, embedding: Any) -> Row:
    row: Row = json.loads((metadata or {}).get(ROW_KEY) or "{}")
    row.setdefault("id", int(record_id) if str(record_id).isdigit() else record_id)
    if embedding is not None:
        row[EMBEDDING_COLUMN] = [float(x) for x in embedding]
    return row


def _decode_get(results: dict[str, Any]) -> list[Row]:
    ids = results.get("ids") or []
    metadatas = results.get("metadatas") or []
    embeddings = results.get("embeddings")
    if embeddings is None:
        embeddings = []
    rows: list[Row] = []
    for i, record_id in enumerate(ids):
        metadata = metadatas[i] if i < len(metadatas) else None
        embedding = embeddings[i] if i < len(embeddings) else None
        rows.append(_decode_row(record_id, metadata, embedding))
    return rows


def get_chroma_store(
    mode: str = "memory",
    persist_directory: str | None = None,
) -> ChromaKnowledgeStore:
    """Get ChromaDB store instance.

    Args:
        mode: "memory" or "persistent"
        persist_directory: Directory for persistent storage

    Returns:
        ChromaKnowledgeStore instance
    """
    return ChromaKnowledgeStore(mode=mode, persist_directory=persist_directory)
