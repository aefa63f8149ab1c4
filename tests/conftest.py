"""Shared test fixtures.

Unit tests never touch PostgreSQL: the store is given a ``FakeEngine`` that
records every statement and replays canned results.

  fake_engine   — recording stand-in for a SQLAlchemy Engine.
  make_settings — builds Settings without reading .env or the environment.
  dense_store   — PgVectorStore (dense, dim=3, cosine) on fake_engine.
  sparse_store  — PgVectorStore (sparse, dim=200, cosine) on fake_engine.
  client        — FastAPI TestClient serving dense_store.
"""
import threading
import time
from contextlib import contextmanager

import pytest

from chunkstore.config import Settings
from chunkstore.infra.search.vector_pg import PgVectorStore


class FakeResult:
    def __init__(self, rows=None, rowcount=0, scalar=None):
        self._rows = list(rows or [])
        self.rowcount = rowcount
        self._scalar = scalar

    def mappings(self):
        return self

    def all(self):
        return list(self._rows)

    def scalar_one(self):
        return self._scalar

    def scalar(self):
        return self._scalar


class FakeConnection:
    def __init__(self, engine):
        self._engine = engine

    def exec_driver_sql(self, statement, parameters=None, execution_options=None):
        engine = self._engine
        with engine.guard:
            engine.active += 1
            engine.max_active = max(engine.max_active, engine.active)
        try:
            if engine.delay:
                time.sleep(engine.delay)
            engine.statements.append(statement)
            engine.execution_options.append(execution_options)
            if engine.error is not None:
                raise engine.error
            return engine.results.pop(0) if engine.results else FakeResult()
        finally:
            with engine.guard:
                engine.active -= 1

    def execute(self, statement, parameters=None):
        return self.exec_driver_sql(str(statement))


class FakeEngine:
    def __init__(self):
        self.statements: list[str] = []
        self.execution_options: list[dict | None] = []
        self.results: list[FakeResult] = []
        self.error: Exception | None = None
        self.disposed = False
        self.delay = 0.0
        self.active = 0
        self.max_active = 0
        self.guard = threading.Lock()

    @contextmanager
    def begin(self):
        yield FakeConnection(self)

    @contextmanager
    def connect(self):
        yield FakeConnection(self)

    def dispose(self):
        self.disposed = True

    def reset(self):
        self.statements.clear()
        self.execution_options.clear()


@pytest.fixture
def fake_engine() -> FakeEngine:
    return FakeEngine()


@pytest.fixture
def make_settings():
    def _make(**overrides) -> Settings:
        values = {"table_name": "chunks", "vector_dimension": 3, "_env_file": None}
        values.update(overrides)
        return Settings(**values)

    return _make


@pytest.fixture
def dense_store(fake_engine, make_settings) -> PgVectorStore:
    store = PgVectorStore(make_settings(), engine=fake_engine)
    fake_engine.reset()
    yield store
    store.close()


@pytest.fixture
def sparse_store(fake_engine, make_settings) -> PgVectorStore:
    store = PgVectorStore(
        make_settings(vector_dimension=200, embedding_type="sparse"), engine=fake_engine
    )
    fake_engine.reset()
    yield store
    store.close()


@pytest.fixture
def result():
    """Factory for canned FakeResult objects."""
    return FakeResult


@pytest.fixture
def client(dense_store):
    """TestClient serving dense_store."""
    from fastapi.testclient import TestClient

    from chunkstore.api.app import create_app

    return TestClient(create_app(store=dense_store))
