"""Domain types shared by the codecs, the statement builders and the store.

Pure dataclasses, zero SQLAlchemy imports.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Mapping, Sequence, Union

import numpy as np

from chunkstore.domain.exceptions import ValidationError


class EmbeddingType(str, Enum):
    DENSE = "dense"
    SPARSE = "sparse"


class SimilarityMetric(str, Enum):
    COSINE = "cosine"
    EUCLIDEAN = "euclidean"
    MANHATTAN = "manhattan"

    @property
    def operator(self) -> str:
        """pgvector distance operator for this metric."""
        return _DISTANCE_OPERATORS[self]

    @property
    def opclass_suffix(self) -> str:
        """Suffix of the HNSW operator class matching :attr:`operator`."""
        return _OPCLASS_SUFFIXES[self]


_DISTANCE_OPERATORS = {
    SimilarityMetric.COSINE: "<=>",
    SimilarityMetric.EUCLIDEAN: "<->",
    SimilarityMetric.MANHATTAN: "<#>",
}

_OPCLASS_SUFFIXES = {
    SimilarityMetric.COSINE: "cosine_ops",
    SimilarityMetric.EUCLIDEAN: "l2_ops",
    SimilarityMetric.MANHATTAN: "ip_ops",
}


@dataclass(frozen=True, slots=True)
class DenseEmbedding:
    """One float per dimension, in order."""

    values: tuple[float, ...]

    def __post_init__(self) -> None:
        object.__setattr__(self, "values", tuple(float(v) for v in self.values))

    @property
    def kind(self) -> EmbeddingType:
        return EmbeddingType.DENSE

    def __len__(self) -> int:
        return len(self.values)


@dataclass(frozen=True, slots=True)
class SparseEmbedding:
    """Explicit positions of a sparse vector.

    ``indices`` are zero-based and pair positionally with ``values``.
    ``dimension`` is the full width; ``None`` means "use the store's".
    """

    indices: tuple[int, ...]
    values: tuple[float, ...]
    dimension: int | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "indices", tuple(int(i) for i in self.indices))
        object.__setattr__(self, "values", tuple(float(v) for v in self.values))
        if len(self.indices) != len(self.values):
            raise ValidationError(
                f"Sparse embedding has {len(self.indices)} indices "
                f"but {len(self.values)} values."
            )

    @property
    def kind(self) -> EmbeddingType:
        return EmbeddingType.SPARSE

    def items(self) -> list[tuple[int, float]]:
        return list(zip(self.indices, self.values))


Embedding = Union[DenseEmbedding, SparseEmbedding]


def as_embedding(value: Embedding | Sequence[float] | Any) -> Embedding:
    """Coerce plain sequences (lists, tuples, numpy arrays) into a DenseEmbedding."""
    if isinstance(value, (DenseEmbedding, SparseEmbedding)):
        return value
    if isinstance(value, (str, bytes)):
        raise ValidationError("Embedding must be a numeric sequence, not text.")
    try:
        array = np.asarray(value, dtype=np.float64)
    except (TypeError, ValueError) as exc:
        raise ValidationError(f"Cannot interpret {type(value).__name__} as an embedding.") from exc
    if array.ndim != 1:
        raise ValidationError(f"Dense embedding must be one-dimensional, got shape {array.shape}.")
    return DenseEmbedding(values=tuple(array.tolist()))


@dataclass(frozen=True, slots=True)
class Chunk:
    """Stored content plus a flat metadata map."""

    type: str = ""
    content: str = ""
    metadata: Mapping[str, Any] = field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class Entry:
    """Unit of storage; ``id`` is generated on add when missing."""

    embedding: Embedding
    chunk: Chunk
    id: str | None = None


@dataclass(frozen=True, slots=True)
class Match:
    """One result row.

    ``similarity_score`` is ``1 - distance`` for similarity queries and 0.0
    otherwise.
    """

    id: str
    embedding: Embedding
    chunk: Chunk
    similarity_score: float = 0.0
