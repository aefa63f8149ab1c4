"""pgvector text codecs for dense (``vector``) and sparse (``sparsevec``) embeddings.

Dense text form: ``[0.1,0.2,0.3]``.
Sparse text form: ``{1:0.3,5:1.2}/200`` -- one-based ``index:value`` pairs in
the order given, followed by the full dimension.
"""
from __future__ import annotations

from collections.abc import Sequence

from chunkstore.domain.exceptions import ParseError
from chunkstore.domain.models import DenseEmbedding, SparseEmbedding


def _format_float(value: float) -> str:
    return repr(float(value))


def _parse_float(token: str, text: str) -> float:
    try:
        return float(token)
    except ValueError:
        raise ParseError(f"Malformed numeric token {token!r} in {text!r}") from None


def serialize_dense(values: DenseEmbedding | Sequence[float]) -> str:
    if isinstance(values, DenseEmbedding):
        values = values.values
    return "[" + ",".join(_format_float(v) for v in values) + "]"


def deserialize_dense(text: str) -> DenseEmbedding:
    body = text.strip()
    if not (body.startswith("[") and body.endswith("]")):
        raise ParseError(f"Dense vector text must be bracketed: {text!r}")
    body = body[1:-1].strip()
    if not body:
        return DenseEmbedding(values=())
    return DenseEmbedding(values=tuple(_parse_float(tok.strip(), text) for tok in body.split(",")))


def serialize_sparse(sparse: SparseEmbedding, dimension: int) -> str:
    pairs = ",".join(f"{index + 1}:{_format_float(value)}" for index, value in sparse.items())
    return f"{{{pairs}}}/{dimension}"


def deserialize_sparse(text: str, dimension: int | None = None) -> SparseEmbedding:
    """Parse sparsevec text back into explicit zero-based positions.

    ``indices`` holds the positions listed in the text, paired with
    ``values``; the unlisted (implicit zero) positions are not returned here,
    use :func:`implicit_zero_indices` for that complement.

    ``dimension`` wins over the ``/N`` suffix when both are present; an
    index outside ``[1, dimension]`` in the text is a :class:`ParseError`.
    """
    body = text.strip()
    head, sep, tail = body.rpartition("/")
    if sep:
        if not tail.strip().isdigit():
            raise ParseError(f"Malformed sparse dimension {tail!r} in {text!r}")
        suffix_dim = int(tail)
        body = head.strip()
    else:
        suffix_dim = None
    width = dimension if dimension is not None else suffix_dim
    if width is None:
        raise ParseError(f"Sparse vector text has no dimension: {text!r}")
    if not (body.startswith("{") and body.endswith("}")):
        raise ParseError(f"Sparse vector text must be braced: {text!r}")

    indices: list[int] = []
    values: list[float] = []
    inner = body[1:-1].strip()
    for pair in inner.split(",") if inner else ():
        index_token, colon, value_token = pair.partition(":")
        if not colon:
            raise ParseError(f"Malformed sparse pair {pair!r} in {text!r}")
        index_token = index_token.strip()
        if not index_token.isdigit():
            raise ParseError(f"Malformed sparse index {index_token!r} in {text!r}")
        position = int(index_token)
        if not 1 <= position <= width:
            raise ParseError(f"Sparse index {position} outside 1..{width} in {text!r}")
        indices.append(position - 1)
        values.append(_parse_float(value_token.strip(), text))
    return SparseEmbedding(indices=tuple(indices), values=tuple(values), dimension=width)


def implicit_zero_indices(sparse: SparseEmbedding, dimension: int) -> list[int]:
    """Positions in ``[0, dimension)`` not listed explicitly by ``sparse``."""
    listed = set(sparse.indices)
    return [i for i in range(dimension) if i not in listed]
