"""Tests for the pgvector text codecs."""
from __future__ import annotations

import pytest

from chunkstore.domain.exceptions import CodecError, ParseError
from chunkstore.domain.models import DenseEmbedding, SparseEmbedding
from chunkstore.infra.search.codec import (
    deserialize_dense,
    deserialize_sparse,
    implicit_zero_indices,
    serialize_dense,
    serialize_sparse,
)


def test_serialize_sparse_uses_one_based_indices_and_dimension_suffix():
    sparse = SparseEmbedding(indices=[0, 4], values=[0.3, 1.2])
    assert serialize_sparse(sparse, 200) == "{1:0.3,5:1.2}/200"


def test_serialize_sparse_keeps_given_order():
    sparse = SparseEmbedding(indices=[4, 0], values=[1.2, 0.3])
    assert serialize_sparse(sparse, 200) == "{5:1.2,1:0.3}/200"


def test_serialize_empty_sparse():
    assert serialize_sparse(SparseEmbedding(indices=[], values=[]), 10) == "{}/10"


def test_deserialize_sparse_returns_listed_positions_zero_based():
    sparse = deserialize_sparse("{1:0.3,5:1.2}/200", 200)
    assert sparse.indices == (0, 4)
    assert sparse.values == (0.3, 1.2)
    assert sparse.dimension == 200


def test_sparse_round_trip_keeps_listed_pairs():
    original = SparseEmbedding(indices=[0, 2, 199], values=[1.0, -0.5, 2.25])
    decoded = deserialize_sparse(serialize_sparse(original, 200), 200)
    assert decoded.items() == original.items()


def test_deserialize_sparse_dimension_argument_wins_over_suffix():
    assert deserialize_sparse("{1:1.0}/5", 10).dimension == 10


def test_deserialize_sparse_without_argument_uses_suffix():
    assert deserialize_sparse("{2:1.5}/7").dimension == 7


def test_deserialize_sparse_tolerates_whitespace():
    sparse = deserialize_sparse(" { 1:0.5 , 3:2 }/4 ")
    assert sparse.indices == (0, 2)
    assert sparse.values == (0.5, 2.0)


def test_implicit_zero_indices_is_the_complement_of_listed_positions():
    sparse = deserialize_sparse("{1:1.0,3:1.0}/4", 4)
    assert implicit_zero_indices(sparse, 4) == [1, 3]


@pytest.mark.parametrize(
    "text",
    [
        "{1:abc}/10",
        "{x:1.0}/10",
        "{1}/10",
        "1:2/10",
        "{1:2}/abc",
        "{11:1.0}/10",
        "{0:1.0}/10",
        "{1:1.0}",
    ],
)
def test_deserialize_sparse_rejects_malformed_text(text: str):
    with pytest.raises(ParseError):
        deserialize_sparse(text)


def test_parse_error_is_a_codec_error():
    with pytest.raises(CodecError):
        deserialize_sparse("{1:nope}/3")


def test_serialize_dense():
    assert serialize_dense([0, 0.5, 0.25]) == "[0.0,0.5,0.25]"
    assert serialize_dense(DenseEmbedding(values=[1, 2])) == "[1.0,2.0]"


def test_deserialize_dense():
    assert deserialize_dense("[0,0.5,0.25]").values == (0.0, 0.5, 0.25)
    assert deserialize_dense("[ 1, 2 ]").values == (1.0, 2.0)
    assert deserialize_dense("[]").values == ()


@pytest.mark.parametrize("text", ["0,1", "[1,a]", "[1,,2]"])
def test_deserialize_dense_rejects_malformed_text(text: str):
    with pytest.raises(ParseError):
        deserialize_dense(text)
