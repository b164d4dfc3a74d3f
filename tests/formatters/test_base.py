"""Tests for the Formatter protocol and registry."""

import pytest

from pg_tool.formatters import registry
from pg_tool.formatters.base import Formatter, FormatterRegistry


class _StubFormatter:
    def format(self, result):
        for row in result.rows:
            yield str(row)


class _BadFormatter:
    pass


@pytest.mark.unit
def test_stub_formatter_implements_protocol():
    assert isinstance(_StubFormatter(), Formatter)


@pytest.mark.unit
def test_bad_formatter_does_not_implement_protocol():
    assert not isinstance(_BadFormatter(), Formatter)


@pytest.mark.unit
def test_registry_register_and_get():
    reg = FormatterRegistry()
    reg.register("stub", _StubFormatter)
    assert isinstance(reg.get("stub"), _StubFormatter)


@pytest.mark.unit
def test_registry_get_unknown_lists_available():
    reg = FormatterRegistry()
    reg.register("table", _StubFormatter)
    reg.register("json", _StubFormatter)
    with pytest.raises(KeyError, match="Unknown format 'nope'. Available: json, table"):
        reg.get("nope")


@pytest.mark.unit
def test_global_registry_populated():
    assert registry.available == ["json", "table"]
