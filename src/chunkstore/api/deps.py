"""FastAPI dependencies."""
from __future__ import annotations
from functools import lru_cache
from chunkstore.config import settings
from chunkstore.infra.search.vector_store import VectorStore


@lru_cache(maxsize=1)
def get_store() -> VectorStore:
    """One store (and connection pool) per process, built from ``settings`` on first use."""
    from chunkstore.infra.search.vector_pg import PgVectorStore
    return PgVectorStore(settings)
