"""Entries router."""
from fastapi import APIRouter, Depends, Response
from chunkstore.api.deps import get_store
from chunkstore.api.schemas.entries import CountResponse, EntriesCreate, EntriesCreated, EntriesDelete
from chunkstore.infra.search.vector_store import VectorStore
from chunkstore.services.store_service import StoreService

router = APIRouter(prefix="/entries", tags=["entries"])


@router.post("", response_model=EntriesCreated, status_code=201)
def add_entries(payload: EntriesCreate, store: VectorStore = Depends(get_store)) -> EntriesCreated:
    return StoreService(store).add_entries(payload)


@router.get("/count", response_model=CountResponse)
def count_entries(store: VectorStore = Depends(get_store)) -> CountResponse:
    return StoreService(store).count()


@router.post("/delete", status_code=204)
def delete_entries(payload: EntriesDelete, store: VectorStore = Depends(get_store)) -> Response:
    StoreService(store).delete_entries(payload.ids)
    return Response(status_code=204)


@router.delete("/{entry_id}", status_code=204)
def delete_entry(entry_id: str, store: VectorStore = Depends(get_store)) -> Response:
    StoreService(store).delete_entries(entry_id)
    return Response(status_code=204)
