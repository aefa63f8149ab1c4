"""FastAPI application factory."""
from __future__ import annotations
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from chunkstore.domain.exceptions import (
    CodecError, MutationError, QueryError, ValidationError, VectorStoreError,
)
from chunkstore.infra.search.vector_store import VectorStore

_STATUS_BY_ERROR: list[tuple[type[VectorStoreError], int]] = [
    (ValidationError, 422),
    (CodecError, 400),
    (MutationError, 502),
    (QueryError, 502),
]


def create_app(store: VectorStore | None = None) -> FastAPI:
    """Build the app; pass ``store`` to serve an existing store instead of one from settings."""
    from chunkstore.api.deps import get_store

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        yield
        if store is None and get_store.cache_info().currsize:
            get_store().close()
            get_store.cache_clear()

    app = FastAPI(
        title="chunkstore",
        version="0.1.0",
        lifespan=lifespan,
    )

    # Import routers inside create_app() to avoid circular imports at module load time
    from chunkstore.api.routers.entries import router as entries_router
    from chunkstore.api.routers.query import router as query_router

    app.include_router(entries_router)
    app.include_router(query_router)

    if store is not None:
        app.dependency_overrides[get_store] = lambda: store

    @app.exception_handler(VectorStoreError)
    def _store_error(request: Request, exc: VectorStoreError) -> JSONResponse:
        status = next((code for cls, code in _STATUS_BY_ERROR if isinstance(exc, cls)), 500)
        return JSONResponse(status_code=status, content={"detail": exc.message})

    @app.get("/health", tags=["ops"])
    def health() -> dict:
        return {"status": "ok"}

    return app
