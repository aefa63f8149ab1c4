"""Store use-case service. Owns DTO→domain mapping; routers never see domain objects."""
from __future__ import annotations
from chunkstore.api.schemas.entries import (
    CountResponse, EmbeddingIn, EmbeddingOut, EntriesCreate, EntriesCreated,
    MatchRead, QueryRequest, QueryResponse,
)
from chunkstore.domain.filters import MetadataFilters
from chunkstore.domain.models import Chunk, DenseEmbedding, Embedding, Entry, SparseEmbedding
from chunkstore.infra.search.vector_store import VectorStore, VectorStoreQuery


def to_embedding(payload: EmbeddingIn) -> Embedding:
    if payload.dense is not None:
        return DenseEmbedding(values=payload.dense)
    return SparseEmbedding(
        indices=payload.indices or [], values=payload.values or [], dimension=payload.dimension,
    )


def from_embedding(embedding: Embedding) -> EmbeddingOut:
    if isinstance(embedding, SparseEmbedding):
        return EmbeddingOut(
            indices=list(embedding.indices),
            values=list(embedding.values),
            dimension=embedding.dimension,
        )
    return EmbeddingOut(dense=list(embedding.values))


class StoreService:
    def __init__(self, store: VectorStore) -> None:
        self._store = store

    def add_entries(self, payload: EntriesCreate) -> EntriesCreated:
        entries = [
            Entry(
                id=item.id,
                embedding=to_embedding(item.embedding),
                chunk=Chunk(type=item.type, content=item.content, metadata=item.metadata),
            )
            for item in payload.entries
        ]
        return EntriesCreated(ids=self._store.add(entries))

    def delete_entries(self, ids: str | list[str]) -> None:
        self._store.delete(ids)

    def count(self, filters: dict | None = None) -> CountResponse:
        return CountResponse(count=self._store.count(filters))

    def query(self, payload: QueryRequest) -> QueryResponse:
        matches = self._store.query(
            VectorStoreQuery(
                embedding=to_embedding(payload.embedding) if payload.embedding else None,
                filters=MetadataFilters.from_dict(payload.filters) if payload.filters else None,
                top_k=payload.top_k,
            )
        )
        results = [
            MatchRead(
                id=m.id,
                embedding=from_embedding(m.embedding),
                type=m.chunk.type,
                content=m.chunk.content,
                metadata=dict(m.chunk.metadata),
                similarity_score=m.similarity_score,
            )
            for m in matches
        ]
        return QueryResponse(matches=results, total=len(results))
