"""Chunk storage and similarity search on PostgreSQL + pgvector."""

from chunkstore.domain.exceptions import (
    CodecError,
    ConstructionError,
    MutationError,
    ParseError,
    QueryError,
    ValidationError,
    VectorStoreError,
)
from chunkstore.domain.filters import FilterCondition, FilterOperator, MetadataFilter, MetadataFilters
from chunkstore.domain.models import (
    Chunk,
    DenseEmbedding,
    EmbeddingType,
    Entry,
    Match,
    SimilarityMetric,
    SparseEmbedding,
)
from chunkstore.infra.search import PgVectorStore, VectorStore, VectorStoreQuery

__version__ = "0.1.0"

__all__ = [
    "Chunk",
    "CodecError",
    "ConstructionError",
    "DenseEmbedding",
    "EmbeddingType",
    "Entry",
    "FilterCondition",
    "FilterOperator",
    "Match",
    "MetadataFilter",
    "MetadataFilters",
    "MutationError",
    "ParseError",
    "PgVectorStore",
    "QueryError",
    "SimilarityMetric",
    "SparseEmbedding",
    "ValidationError",
    "VectorStore",
    "VectorStoreError",
    "VectorStoreQuery",
]
