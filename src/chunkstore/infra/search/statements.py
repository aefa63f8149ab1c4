"""SQL text builders for the pgvector-backed store.

Pure functions: no connections, no I/O. Every statement is one string that
the store sends with ``exec_driver_sql``.
"""
from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from chunkstore.domain.models import EmbeddingType, SimilarityMetric
from chunkstore.infra.search.sql_text import quote_identifier, quote_literal

SELECT_COLUMNS = "id, content, embedding::text AS embedding, metadata"

# PostgreSQL truncates identifiers longer than this.
_MAX_IDENTIFIER = 63


@dataclass(frozen=True, slots=True)
class InsertRow:
    id: str
    content: str
    embedding: str
    metadata: str


def column_type(kind: EmbeddingType, dimension: int) -> str:
    base = "sparsevec" if kind is EmbeddingType.SPARSE else "vector"
    return f"{base}({int(dimension)})"


def index_name(table_name: str) -> str:
    return f"{table_name}_embedding_idx"[:_MAX_IDENTIFIER]


def _limit_clause(top_k: int | None) -> str:
    # Negative top_k means unlimited.
    if top_k is None or top_k <= -1:
        return ""
    return f" LIMIT {int(top_k)}"


def build_insert(table_name: str, rows: Sequence[InsertRow], vector_type: str) -> str:
    """One multi-row INSERT for the whole batch."""
    if not rows:
        raise ValueError("build_insert needs at least one row.")
    values = ",\n".join(
        f"({quote_literal(row.id)}, {quote_literal(row.content)}, "
        f"{quote_literal(row.embedding)}::{vector_type}, {quote_literal(row.metadata)}::jsonb)"
        for row in rows
    )
    return (
        f"INSERT INTO {quote_identifier(table_name)} (id, content, embedding, metadata)\n"
        f"VALUES\n{values}"
    )


def _id_predicate(ids: str | Sequence[str]) -> str:
    if isinstance(ids, str):
        return f"id = {quote_literal(ids)}"
    return "id IN (" + ", ".join(quote_literal(i) for i in ids) + ")"


def build_delete(table_name: str, ids: str | Sequence[str]) -> str:
    return f"DELETE FROM {quote_identifier(table_name)} WHERE {_id_predicate(ids)}"


def build_get(table_name: str, ids: Sequence[str]) -> str:
    return f"SELECT {SELECT_COLUMNS} FROM {quote_identifier(table_name)} WHERE {_id_predicate(ids)}"


def build_count(table_name: str, predicate: str = "") -> str:
    where = f" WHERE {predicate}" if predicate else ""
    return f"SELECT count(*) FROM {quote_identifier(table_name)}{where}"


def build_query(
    table_name: str,
    *,
    kind: EmbeddingType,
    vector_type: str,
    metric: SimilarityMetric,
    embedding: str | None = None,
    predicate: str = "",
    top_k: int | None = None,
) -> str:
    """Pick one of the query shapes.

    Without an embedding: plain select, optional WHERE, optional LIMIT.
    With a dense embedding: similarity projected, NULL/NaN rows excluded in
    the same WHERE. With a sparse embedding: similarity projected in an inner
    select and NULL/NaN excluded by the outer one.
    """
    table = quote_identifier(table_name)
    limit = _limit_clause(top_k)

    if embedding is None:
        where = f" WHERE {predicate}" if predicate else ""
        return f"SELECT {SELECT_COLUMNS} FROM {table}{where}{limit}"

    similarity = f"1 - (embedding {metric.operator} {quote_literal(embedding)}::{vector_type})"

    if kind is EmbeddingType.SPARSE:
        inner_where = f" WHERE {predicate}" if predicate else ""
        return (
            f"SELECT id, content, embedding, metadata, similarity FROM ("
            f"SELECT {SELECT_COLUMNS}, {similarity} AS similarity FROM {table}{inner_where}"
            f") AS scored"
            f" WHERE similarity IS NOT NULL AND similarity <> 'NaN'::float8"
            f" ORDER BY similarity DESC{limit}"
        )

    conditions = [f"({similarity}) IS NOT NULL", f"({similarity}) <> 'NaN'::float8"]
    if predicate:
        conditions.append(f"({predicate})")
    return (
        f"SELECT {SELECT_COLUMNS}, {similarity} AS similarity FROM {table}"
        f" WHERE {' AND '.join(conditions)}"
        f" ORDER BY similarity DESC{limit}"
    )


def build_bootstrap(
    table_name: str, kind: EmbeddingType, dimension: int, metric: SimilarityMetric,
) -> list[str]:
    """Idempotent DDL: extension, table, HNSW index with a kind/metric opclass."""
    table = quote_identifier(table_name)
    opclass = f"{'sparsevec' if kind is EmbeddingType.SPARSE else 'vector'}_{metric.opclass_suffix}"
    return [
        "CREATE EXTENSION IF NOT EXISTS vector",
        (
            f"CREATE TABLE IF NOT EXISTS {table} ("
            f"id TEXT PRIMARY KEY, "
            f"content TEXT, "
            f"embedding {column_type(kind, dimension)}, "
            f"metadata JSONB)"
        ),
        (
            f"CREATE INDEX IF NOT EXISTS {quote_identifier(index_name(table_name))} "
            f"ON {table} USING hnsw (embedding {opclass})"
        ),
    ]


def build_reindex(table_name: str) -> str:
    return f"REINDEX INDEX {quote_identifier(index_name(table_name))}"
