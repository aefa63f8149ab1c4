from __future__ import annotations

import pytest
from pydantic import ValidationError

from chunkstore.config import Settings
from chunkstore.domain.models import EmbeddingType, SimilarityMetric


def test_defaults():
    s = Settings(_env_file=None)
    assert s.table_name == "chunks"
    assert s.embedding_type is EmbeddingType.DENSE
    assert s.similarity_metric is SimilarityMetric.COSINE
    assert s.top_k == 10


def test_environment_prefix(monkeypatch):
    monkeypatch.setenv("CHUNKSTORE_TABLE_NAME", "docs")
    monkeypatch.setenv("CHUNKSTORE_VECTOR_DIMENSION", "768")
    monkeypatch.setenv("CHUNKSTORE_EMBEDDING_TYPE", "sparse")
    monkeypatch.setenv("CHUNKSTORE_SIMILARITY_METRIC", "euclidean")

    s = Settings(_env_file=None)

    assert s.table_name == "docs"
    assert s.vector_dimension == 768
    assert s.embedding_type is EmbeddingType.SPARSE
    assert s.similarity_metric is SimilarityMetric.EUCLIDEAN


@pytest.mark.parametrize(
    "overrides",
    [
        {"table_name": "bad name"},
        {"table_name": 'chunks"; DROP TABLE x'},
        {"table_name": "t" * 64},
        {"top_k": 0},
        {"vector_dimension": 0},
        {"embedding_type": "binary"},
    ],
)
def test_invalid_values_are_rejected(overrides):
    with pytest.raises(ValidationError):
        Settings(_env_file=None, **overrides)


def test_negative_top_k_is_allowed():
    assert Settings(_env_file=None, top_k=-1).top_k == -1


def test_url_hides_password():
    s = Settings(_env_file=None, user="app", password="s3cret", host="db", port=6543, database="rag")
    url = s.sqlalchemy_url()
    assert url.drivername == "postgresql+psycopg"
    assert url.password == "s3cret"
    assert url.render_as_string(hide_password=True) == "postgresql+psycopg://app:***@db:6543/rag"
    assert "s3cret" not in repr(s)


def test_connect_args_only_carry_set_options():
    s = Settings(_env_file=None, sslmode="require", connect_timeout=5)
    assert s.connect_args() == {
        "sslmode": "require",
        "connect_timeout": 5,
        "application_name": "chunkstore",
    }


def test_settings_are_frozen():
    s = Settings(_env_file=None)
    with pytest.raises(ValidationError):
        s.top_k = 3
