"""Entry and query DTOs — pure Pydantic, zero SQLAlchemy imports."""
from __future__ import annotations
from typing import Any
from pydantic import BaseModel, Field, model_validator


class EmbeddingIn(BaseModel):
    """Either ``dense`` or ``indices`` + ``values`` (sparse), never both."""

    dense: list[float] | None = None
    indices: list[int] | None = None
    values: list[float] | None = None
    dimension: int | None = None

    @model_validator(mode="after")
    def one_kind(self) -> "EmbeddingIn":
        sparse = self.indices is not None or self.values is not None
        if (self.dense is None) == (not sparse):
            raise ValueError("give either 'dense' or 'indices' + 'values'")
        if sparse and (self.indices is None or self.values is None):
            raise ValueError("sparse embeddings need both 'indices' and 'values'")
        return self


class EmbeddingOut(BaseModel):
    dense: list[float] | None = None
    indices: list[int] | None = None
    values: list[float] | None = None
    dimension: int | None = None


class EntryCreate(BaseModel):
    id: str | None = None
    embedding: EmbeddingIn
    type: str = ""
    content: str = ""
    metadata: dict[str, Any] = Field(default_factory=dict)


class EntriesCreate(BaseModel):
    entries: list[EntryCreate]


class EntriesCreated(BaseModel):
    ids: list[str]


class EntriesDelete(BaseModel):
    ids: list[str]


class CountResponse(BaseModel):
    count: int


class QueryRequest(BaseModel):
    embedding: EmbeddingIn | None = None
    filters: dict[str, Any] | None = None
    top_k: int | None = None


class MatchRead(BaseModel):
    id: str
    embedding: EmbeddingOut
    type: str
    content: str
    metadata: dict[str, Any]
    similarity_score: float


class QueryResponse(BaseModel):
    matches: list[MatchRead]
    total: int
