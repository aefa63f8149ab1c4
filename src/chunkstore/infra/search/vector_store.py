"""VectorStore contract implemented by the storage backends."""
from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Sequence

from chunkstore.domain.filters import FilterNode
from chunkstore.domain.models import Embedding, Entry, Match


@dataclass(frozen=True, slots=True)
class VectorStoreQuery:
    """What to look for.

    No embedding means a plain (unranked) read; no filters means every row.
    ``top_k=None`` falls back to the store's default.
    """

    embedding: Embedding | Sequence[float] | None = None
    filters: FilterNode | None = None
    top_k: int | None = None


class VectorStore(ABC):
    """Abstract interface for chunk storage and similarity retrieval."""

    @abstractmethod
    def add(self, entries: Sequence[Entry]) -> list[str]:
        """Insert entries in one statement and return their ids in input order."""

    @abstractmethod
    def delete(self, ids: str | Sequence[str]) -> None:
        """Delete one id or a batch of ids; unknown ids are not an error."""

    @abstractmethod
    def query(self, query: VectorStoreQuery) -> list[Match]:
        """Return matches ranked by similarity when an embedding is given."""

    @abstractmethod
    def count(self, filters: FilterNode | None = None) -> int:
        """Number of stored entries matching ``filters``."""

    @abstractmethod
    def rebuild_index(self) -> None:
        """Rebuild the backend similarity index."""

    @abstractmethod
    def close(self) -> None:
        """Release backend resources."""
