"""PostgreSQL + pgvector backed VectorStore implementation."""
from __future__ import annotations

import json
import logging
import threading
import uuid
from collections.abc import Mapping, Sequence
from functools import partial
from typing import Any

import numpy as np
from pydantic import ValidationError as SettingsValidationError
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

from chunkstore.config import Settings
from chunkstore.domain.exceptions import (
    CodecError,
    ConstructionError,
    MutationError,
    QueryError,
    ValidationError,
)
from chunkstore.domain.filters import FilterNode, MetadataFilter, MetadataFilters
from chunkstore.domain.models import (
    Chunk,
    DenseEmbedding,
    Embedding,
    EmbeddingType,
    Entry,
    Match,
    SimilarityMetric,
    SparseEmbedding,
    as_embedding,
)
from chunkstore.infra.db.engine import create_store_engine
from chunkstore.infra.db.schema import RAW_SQL, ensure_schema
from chunkstore.infra.search.codec import (
    deserialize_dense,
    deserialize_sparse,
    serialize_dense,
    serialize_sparse,
)
from chunkstore.infra.search.filter_compiler import compile_filters
from chunkstore.infra.search.statements import (
    InsertRow,
    build_count,
    build_delete,
    build_get,
    build_insert,
    build_query,
    build_reindex,
    column_type,
)
from chunkstore.infra.search.vector_store import VectorStore, VectorStoreQuery

logger = logging.getLogger(__name__)


class PgVectorStore(VectorStore):
    """VectorStore bound to one table in PostgreSQL with pgvector.

    The table shape (dimension, dense or sparse, similarity metric) is fixed
    at construction. Every public call issues exactly one statement and holds
    the instance lock while building and executing it; separate instances
    on the same table are only serialized by the database itself.

    Construction runs the schema bootstrap once. A failed bootstrap is logged
    and the store is still returned (the table may be provisioned elsewhere).
    """

    def __init__(
        self,
        settings: Settings | None = None,
        *,
        engine: Engine | None = None,
        bootstrap: bool = True,
        **overrides: Any,
    ) -> None:
        try:
            if settings is None:
                settings = Settings(**overrides)
            elif overrides:
                settings = Settings(**{**settings.model_dump(), **overrides})
        except SettingsValidationError as exc:
            raise ConstructionError(f"invalid vector store configuration: {exc}") from exc

        self._settings = settings
        self._table_name = settings.table_name
        self._dimension = settings.vector_dimension
        self._kind = EmbeddingType(settings.embedding_type)
        self._metric = SimilarityMetric(settings.similarity_metric)
        self._top_k = settings.top_k
        self._vector_type = column_type(self._kind, self._dimension)
        self._lock = threading.Lock()

        if self._kind is EmbeddingType.SPARSE:
            self._encode = partial(serialize_sparse, dimension=self._dimension)
            self._decode = partial(deserialize_sparse, dimension=self._dimension)
        else:
            self._encode = serialize_dense
            self._decode = deserialize_dense

        self._owns_engine = engine is None
        if engine is None:
            try:
                engine = create_store_engine(settings)
            except (SQLAlchemyError, ImportError) as exc:
                raise ConstructionError(f"failed to connect the vector store: {exc}") from exc
        self._engine = engine

        logger.info(
            "Vector store on table %s (%s, dim=%d, metric=%s, top_k=%d)",
            self._table_name, self._kind.value, self._dimension, self._metric.value, self._top_k,
        )
        self.schema_ready = (
            ensure_schema(engine, self._table_name, self._kind, self._dimension, self._metric)
            if bootstrap
            else False
        )

    # ------------------------------------------------------------------
    # Read-only configuration
    # ------------------------------------------------------------------

    @property
    def table_name(self) -> str:
        return self._table_name

    @property
    def vector_dimension(self) -> int:
        return self._dimension

    @property
    def embedding_type(self) -> EmbeddingType:
        return self._kind

    @property
    def similarity_metric(self) -> SimilarityMetric:
        return self._metric

    @property
    def top_k(self) -> int:
        return self._top_k

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _check_embedding(self, raw: Embedding | Sequence[float]) -> Embedding:
        embedding = as_embedding(raw)
        if embedding.kind is not self._kind:
            raise ValidationError(
                f"Store holds {self._kind.value} embeddings, got {embedding.kind.value}."
            )
        if not np.isfinite(np.asarray(embedding.values, dtype=np.float64)).all():
            raise ValidationError("Embedding values must be finite.")
        if isinstance(embedding, DenseEmbedding):
            if len(embedding) != self._dimension:
                raise ValidationError(
                    f"Embedding has dimension {len(embedding)}, store expects {self._dimension}."
                )
            return embedding
        if embedding.dimension not in (None, self._dimension):
            raise ValidationError(
                f"Sparse embedding has dimension {embedding.dimension}, "
                f"store expects {self._dimension}."
            )
        if any(not 0 <= i < self._dimension for i in embedding.indices):
            raise ValidationError(f"Sparse indices must lie in [0, {self._dimension}).")
        if len(set(embedding.indices)) != len(embedding.indices):
            raise ValidationError("Sparse indices must be unique.")
        return embedding

    def _row(self, entry: Entry) -> InsertRow:
        embedding = self._check_embedding(entry.embedding)
        metadata = {**dict(entry.chunk.metadata or {}), "type": entry.chunk.type}
        try:
            metadata_json = json.dumps(metadata, default=str, allow_nan=False)
        except ValueError as exc:
            raise ValidationError(f"Metadata is not valid JSON: {exc}") from exc
        return InsertRow(
            id=entry.id or str(uuid.uuid4()),
            content=entry.chunk.content or "",
            embedding=self._encode(embedding),
            metadata=metadata_json,
        )

    def _to_match(self, row: Mapping[str, Any], scored: bool) -> Match:
        metadata = row.get("metadata")
        if metadata is None:
            metadata = {}
        elif isinstance(metadata, (str, bytes)):
            metadata = json.loads(metadata)
        if not isinstance(metadata, Mapping):
            raise ValueError(f"metadata column holds {type(metadata).__name__}, expected a JSON object")
        raw_embedding = row.get("embedding")
        if raw_embedding is None:
            embedding: Embedding = (
                SparseEmbedding(indices=(), values=(), dimension=self._dimension)
                if self._kind is EmbeddingType.SPARSE
                else DenseEmbedding(values=())
            )
        else:
            embedding = self._decode(raw_embedding)
        similarity = row.get("similarity") if scored else None
        return Match(
            id=str(row["id"]),
            embedding=embedding,
            chunk=Chunk(
                type=str(metadata.get("type", "")),
                content=row.get("content") or "",
                metadata=metadata,
            ),
            similarity_score=float(similarity) if similarity is not None else 0.0,
        )

    def _fetch(self, sql: str, scored: bool, action: str) -> list[Match]:
        with self._lock:
            try:
                with self._engine.connect() as conn:
                    rows = conn.exec_driver_sql(sql, execution_options=RAW_SQL).mappings().all()
            except SQLAlchemyError as exc:
                logger.error("Read from %s failed: %s", self._table_name, exc)
                raise QueryError(f"failed to {action} the vector store: {exc}") from exc
        try:
            matches = [self._to_match(row, scored) for row in rows]
        except (CodecError, ValueError, TypeError, KeyError) as exc:
            logger.error("Could not decode rows from %s: %s", self._table_name, exc)
            raise QueryError(f"failed to {action} the vector store: {exc}") from exc
        logger.debug("Read %d row(s) from %s", len(matches), self._table_name)
        return matches

    @staticmethod
    def _as_filter(filters: FilterNode | Mapping[str, Any] | None) -> FilterNode | None:
        if filters is None or isinstance(filters, (MetadataFilter, MetadataFilters)):
            return filters
        if isinstance(filters, Mapping):
            return MetadataFilters.from_dict(filters)
        raise ValidationError(f"Unsupported filter type: {type(filters).__name__}")

    # ------------------------------------------------------------------
    # VectorStore interface
    # ------------------------------------------------------------------

    def add(self, entries: Sequence[Entry]) -> list[str]:
        entries = list(entries)
        if not entries:
            return []
        rows = [self._row(entry) for entry in entries]
        with self._lock:
            sql = build_insert(self._table_name, rows, self._vector_type)
            try:
                with self._engine.begin() as conn:
                    conn.exec_driver_sql(sql, execution_options=RAW_SQL)
            except SQLAlchemyError as exc:
                logger.error("Insert of %d row(s) into %s failed: %s", len(rows), self._table_name, exc)
                raise MutationError(f"failed to add to the vector store: {exc}") from exc
        logger.debug("Inserted %d row(s) into %s", len(rows), self._table_name)
        return [row.id for row in rows]

    def delete(self, ids: str | Sequence[str]) -> None:
        if not isinstance(ids, str):
            ids = [str(i) for i in ids]
            if not ids:
                return
        with self._lock:
            sql = build_delete(self._table_name, ids)
            try:
                with self._engine.begin() as conn:
                    result = conn.exec_driver_sql(sql, execution_options=RAW_SQL)
            except SQLAlchemyError as exc:
                logger.error("Delete from %s failed: %s", self._table_name, exc)
                raise MutationError(f"failed to delete from the vector store: {exc}") from exc
        logger.debug("Deleted %s row(s) from %s", result.rowcount, self._table_name)

    def query(
        self,
        query: VectorStoreQuery | None = None,
        *,
        embedding: Embedding | Sequence[float] | None = None,
        filters: FilterNode | Mapping[str, Any] | None = None,
        top_k: int | None = None,
    ) -> list[Match]:
        if query is not None and (embedding is not None or filters is not None or top_k is not None):
            raise ValidationError("Pass either a VectorStoreQuery or keyword arguments, not both.")
        if query is None:
            query = VectorStoreQuery(embedding=embedding, filters=self._as_filter(filters), top_k=top_k)
        limit = self._top_k if query.top_k is None else query.top_k
        if limit == 0:
            raise ValidationError("top_k must not be 0 (use a negative value for unlimited).")

        embedding_text = None
        if query.embedding is not None:
            embedding_text = self._encode(self._check_embedding(query.embedding))
        predicate = compile_filters(self._as_filter(query.filters))

        sql = build_query(
            self._table_name,
            kind=self._kind,
            vector_type=self._vector_type,
            metric=self._metric,
            embedding=embedding_text,
            predicate=predicate,
            top_k=limit,
        )
        return self._fetch(sql, scored=embedding_text is not None, action="query")

    def get(self, ids: str | Sequence[str]) -> list[Match]:
        """Fetch entries by id (no ranking, score 0.0)."""
        ids = [ids] if isinstance(ids, str) else [str(i) for i in ids]
        if not ids:
            return []
        return self._fetch(build_get(self._table_name, ids), scored=False, action="query")

    def count(self, filters: FilterNode | Mapping[str, Any] | None = None) -> int:
        sql = build_count(self._table_name, compile_filters(self._as_filter(filters)))
        with self._lock:
            try:
                with self._engine.connect() as conn:
                    return int(conn.exec_driver_sql(sql, execution_options=RAW_SQL).scalar_one())
            except SQLAlchemyError as exc:
                logger.error("Count on %s failed: %s", self._table_name, exc)
                raise QueryError(f"failed to query the vector store: {exc}") from exc

    def rebuild_index(self) -> None:
        with self._lock:
            try:
                with self._engine.begin() as conn:
                    conn.exec_driver_sql(build_reindex(self._table_name), execution_options=RAW_SQL)
            except SQLAlchemyError as exc:
                logger.error("Reindex of %s failed: %s", self._table_name, exc)
                raise MutationError(f"failed to reindex the vector store: {exc}") from exc

    def close(self) -> None:
        """Dispose the connection pool if this store created it."""
        if self._owns_engine:
            self._engine.dispose()

    def __enter__(self) -> PgVectorStore:
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()
