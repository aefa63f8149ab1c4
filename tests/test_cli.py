from __future__ import annotations

import pytest
from sqlalchemy.exc import SQLAlchemyError
from typer.testing import CliRunner

from chunkstore.cli import app

runner = CliRunner()


@pytest.fixture
def cli_engine(monkeypatch, fake_engine):
    """Route every engine the CLI builds to fake_engine."""
    monkeypatch.setattr("chunkstore.cli.create_store_engine", lambda settings: fake_engine)
    monkeypatch.setattr("chunkstore.infra.search.vector_pg.create_store_engine", lambda settings: fake_engine)
    return fake_engine


def test_doctor_reports_pgvector_version(cli_engine, result):
    cli_engine.results.append(result(scalar="0.7.4"))

    outcome = runner.invoke(app, ["doctor"])

    assert outcome.exit_code == 0, outcome.output
    assert "0.7.4" in outcome.output
    assert "pg_extension" in cli_engine.statements[0]
    assert cli_engine.disposed is True


def test_doctor_fails_when_database_is_unreachable(cli_engine):
    cli_engine.error = SQLAlchemyError("could not connect to server")

    outcome = runner.invoke(app, ["doctor"])

    assert outcome.exit_code == 1
    assert "could not connect" in outcome.output


def test_bootstrap_runs_schema_statements(cli_engine):
    outcome = runner.invoke(app, ["bootstrap"])

    assert outcome.exit_code == 0, outcome.output
    assert "is ready" in outcome.output
    assert cli_engine.statements[0] == "CREATE EXTENSION IF NOT EXISTS vector"
    assert len(cli_engine.statements) == 3


def test_bootstrap_failure_exits_non_zero(cli_engine):
    cli_engine.error = SQLAlchemyError("permission denied")
    outcome = runner.invoke(app, ["bootstrap"])
    assert outcome.exit_code == 1


def test_count_prints_number_of_entries(cli_engine, result):
    cli_engine.results.append(result(scalar=12))

    outcome = runner.invoke(app, ["count"])

    assert outcome.exit_code == 0, outcome.output
    assert "12" in outcome.output.splitlines()
    assert cli_engine.statements[0].startswith("SELECT count(*) FROM")
    assert cli_engine.disposed is True


def test_count_failure_exits_non_zero(cli_engine):
    cli_engine.error = SQLAlchemyError('relation "chunks" does not exist')
    outcome = runner.invoke(app, ["count"])
    assert outcome.exit_code == 1
