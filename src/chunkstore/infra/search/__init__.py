"""Search infrastructure contracts and adapters."""

from chunkstore.infra.search.vector_pg import PgVectorStore
from chunkstore.infra.search.vector_store import VectorStore, VectorStoreQuery

__all__ = [
    "PgVectorStore",
    "VectorStore",
    "VectorStoreQuery",
]
