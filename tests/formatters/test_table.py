"""Tests for TableFormatter."""

import pytest

from pg_tool.core.models import ColumnMeta, QueryResult
from pg_tool.formatters.base import Formatter
from pg_tool.formatters.table import TableFormatter


def _make_result(rows=None, columns=None):
    if columns is None:
        columns = [
            ColumnMeta(name="id", type_oid=23, type_name="int4"),
            ColumnMeta(name="name", type_oid=25, type_name="text"),
        ]
    if rows is None:
        rows = [(1, "alice"), (2, "bob")]
    return QueryResult(
        columns=columns,
        rows=rows,
        row_count=len(rows),
        status_message=f"SELECT {len(rows)}",
    )


@pytest.mark.unit
def test_table_formatter_implements_protocol():
    assert isinstance(TableFormatter(), Formatter)


@pytest.mark.unit
def test_headers_and_values():
    output = "\n".join(TableFormatter().format(_make_result()))
    for text in ("id", "name", "alice", "bob"):
        assert text in output


@pytest.mark.unit
def test_empty_result_shows_no_results():
    assert list(TableFormatter().format(_make_result(rows=[]))) == ["No results"]


@pytest.mark.unit
def test_long_values_truncated():
    output = "\n".join(TableFormatter(width=5).format(_make_result(rows=[(1, "abcdefghij")])))
    assert "abcd…" in output
    assert "abcdefghij" not in output


@pytest.mark.unit
def test_bytes_rendered_as_hex():
    columns = [ColumnMeta(name="raw", type_oid=17, type_name="bytea")]
    output = "\n".join(TableFormatter().format(_make_result(rows=[(b"\xca\xfe",)], columns=columns)))
    assert "cafe" in output
