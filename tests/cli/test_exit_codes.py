"""Tests for exit code mapping through run()."""

from unittest.mock import patch

import pytest

from pg_tool.cli.main import run
from pg_tool.core.exceptions import (
    ConfigError,
    EmptyFileError,
    InvalidArgumentError,
    NetworkError,
    NotImplementedOperationError,
    PgIOError,
    QueryError,
    TimeoutError,
)
from pg_tool.core.exit_codes import ExitCode


@pytest.mark.unit
@pytest.mark.parametrize(
    ("error", "code"),
    [
        (NetworkError("fail"), ExitCode.NETWORK_ERROR),
        (TimeoutError("timed out"), ExitCode.TIMEOUT),
        (InvalidArgumentError("password required"), ExitCode.INPUT_ERROR),
        (EmptyFileError("empty file '0001.up.sql'"), ExitCode.INPUT_ERROR),
        (ConfigError("bad config"), ExitCode.CONFIG_ERROR),
        (PgIOError("unable to read directory"), ExitCode.IO_ERROR),
        (QueryError("unable to query db"), ExitCode.QUERY_ERROR),
        (NotImplementedOperationError("use query"), ExitCode.NOT_IMPLEMENTED),
    ],
)
def test_run_maps_error_to_exit_code(error, code, capsys):
    with patch("pg_tool.cli.main.app", side_effect=error), pytest.raises(SystemExit) as exc_info:
        run()
    assert exc_info.value.code == code
    assert f"Error: {error.message}" in capsys.readouterr().err


@pytest.mark.unit
def test_run_keyboard_interrupt_maps_to_130():
    with patch("pg_tool.cli.main.app", side_effect=KeyboardInterrupt), pytest.raises(SystemExit) as exc_info:
        run()
    assert exc_info.value.code == 130


@pytest.mark.unit
def test_run_unexpected_exception_maps_to_1():
    with patch("pg_tool.cli.main.app", side_effect=RuntimeError("boom")), pytest.raises(SystemExit) as exc_info:
        run()
    assert exc_info.value.code == 1


@pytest.mark.unit
def test_run_system_exit_passes_through():
    with patch("pg_tool.cli.main.app", side_effect=SystemExit(42)), pytest.raises(SystemExit) as exc_info:
        run()
    assert exc_info.value.code == 42
