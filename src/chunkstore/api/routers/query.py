"""Similarity query endpoint."""
from fastapi import APIRouter, Depends
from chunkstore.api.deps import get_store
from chunkstore.api.schemas.entries import QueryRequest, QueryResponse
from chunkstore.infra.search.vector_store import VectorStore
from chunkstore.services.store_service import StoreService

router = APIRouter(tags=["query"])


@router.post("/query", response_model=QueryResponse)
def query(payload: QueryRequest, store: VectorStore = Depends(get_store)) -> QueryResponse:
    return StoreService(store).query(payload)
