"""Shared test fixtures for pg-tool."""

from pathlib import Path
from tempfile import TemporaryDirectory

import pytest
from typer.testing import CliRunner

from pg_tool.cli.main import app
from tests.integration_config import TEST_IMAGE, TEST_OPTIONS


@pytest.fixture
def runner():
    """Typer CLI test runner."""
    return CliRunner()


@pytest.fixture
def cli_runner(runner):
    """Invoke the CLI app with the given arguments."""

    def invoke(*args: str, **kwargs):
        return runner.invoke(app, list(args), **kwargs)

    return invoke


@pytest.fixture
def temp_dir():
    """Temporary directory for test files."""
    with TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture(scope="module")
def test_db():
    """An open Database against a throwaway PostgreSQL container.

    Skips when testcontainers is not installed or no container runtime
    is reachable.
    """
    pytest.importorskip("testcontainers.community.postgres")
    from pg_tool.core.exceptions import NetworkError
    from pg_tool.testing import new_test_db

    try:
        db, teardown = new_test_db(TEST_OPTIONS, image=TEST_IMAGE)
    except NetworkError as e:
        pytest.skip(f"container runtime unavailable: {e}")
    yield db
    teardown()
