"""Tests for the query and ping commands."""

import json
from pathlib import Path
from unittest.mock import MagicMock, patch

import psycopg
import pytest

from pg_tool.cli.main import app
from pg_tool.core.exceptions import InputError, InvalidArgumentError, NetworkError, QueryError
from pg_tool.core.models import ColumnMeta, QueryResult
from tests.integration_config import connection_args

FIXTURE_SQL = str(Path(__file__).parent.parent / "fixtures" / "select_42.sql")

_PG_ENV = ("PGHOST", "PGPORT", "PGDATABASE", "PGUSER", "PGPASSWORD", "PGSSLMODE")


@pytest.fixture(autouse=True)
def _isolated_config(monkeypatch, temp_dir):
    for var in (*_PG_ENV, "PG_TOOL_PROFILE"):
        monkeypatch.delenv(var, raising=False)
    monkeypatch.setattr("pg_tool.core.config.DEFAULT_CONFIG_PATH", temp_dir / "none.toml")


@pytest.fixture
def fake_db():
    db = MagicMock()
    db.__enter__.return_value = db
    db.__exit__.return_value = False
    db.fetch.return_value = QueryResult(
        columns=[ColumnMeta(name="answer", type_oid=23, type_name="int4")],
        rows=[(42,)],
        row_count=1,
        status_message="SELECT 1",
    )
    with patch("pg_tool.cli.commands.query.get_database", return_value=db):
        yield db


# -- Help --


@pytest.mark.unit
def test_query_help(runner):
    result = runner.invoke(app, ["query", "--help"])
    assert result.exit_code == 0
    assert "Execute a SQL query" in result.stdout
    assert "--execute" in result.stdout


# -- Mocked database --


@pytest.mark.unit
def test_query_inline_mocked(runner, fake_db):
    result = runner.invoke(app, ["--format", "json", "query", "-e", "SELECT 42 AS answer"])
    assert result.exit_code == 0, result.stdout
    assert json.loads(result.stdout) == [{"answer": 42}]
    fake_db.open.assert_called_once()
    fake_db.fetch.assert_called_once_with("SELECT 42 AS answer")


@pytest.mark.unit
def test_query_from_file_mocked(runner, fake_db):
    result = runner.invoke(app, ["--format", "json", "query", FIXTURE_SQL])
    assert result.exit_code == 0
    fake_db.fetch.assert_called_once_with("SELECT 42 AS answer\n")


@pytest.mark.unit
def test_query_error_propagates(runner, fake_db):
    fake_db.fetch.side_effect = QueryError("unable to query db: syntax error")
    result = runner.invoke(app, ["query", "-e", "SELECTT 1"])
    assert result.exit_code != 0
    assert isinstance(result.exception, QueryError)


@pytest.mark.unit
def test_query_file_not_found(runner):
    result = runner.invoke(app, ["--password", "x", "query", "/nonexistent/file.sql"])
    assert result.exit_code != 0
    assert isinstance(result.exception, InputError)


@pytest.mark.unit
def test_query_without_password(runner):
    result = runner.invoke(app, ["query", "-e", "SELECT 1"])
    assert result.exit_code != 0
    assert isinstance(result.exception, InvalidArgumentError)


@pytest.mark.unit
def test_ping_mocked(runner):
    with patch("pg_tool.core.database.psycopg.connect") as connect:
        connect.return_value.closed = False
        result = runner.invoke(app, ["--user", "app", "--password", "secret", "--database", "app", "ping"])
    assert result.exit_code == 0, result.stdout
    assert "OK localhost:5432/app" in result.stdout
    connect.return_value.execute.assert_called_once_with("SELECT 1")


@pytest.mark.unit
def test_ping_unreachable(runner):
    with patch(
        "pg_tool.core.database.psycopg.connect",
        side_effect=psycopg.OperationalError("connection refused"),
    ):
        result = runner.invoke(
            app, ["--host", "192.0.2.1", "--port", "9999", "--user", "u", "--password", "x", "ping"]
        )
    assert result.exit_code != 0
    assert isinstance(result.exception, NetworkError)


# -- Live database --


@pytest.mark.integration
def test_query_inline_live(runner, test_db):
    result = runner.invoke(
        app, [*connection_args(test_db), "--format", "json", "query", "-e", "SELECT 1 AS num"]
    )
    assert result.exit_code == 0, result.stdout
    assert json.loads(result.stdout) == [{"num": 1}]


@pytest.mark.integration
def test_query_file_live(runner, test_db):
    result = runner.invoke(app, [*connection_args(test_db), "--format", "json", "query", FIXTURE_SQL])
    assert result.exit_code == 0
    assert json.loads(result.stdout) == [{"answer": 42}]


@pytest.mark.integration
def test_ping_live(runner, test_db):
    result = runner.invoke(app, [*connection_args(test_db), "ping"])
    assert result.exit_code == 0
    assert result.stdout.startswith("OK ")
