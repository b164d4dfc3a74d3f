"""Output formatters for pg-tool."""

from pg_tool.formatters.base import Formatter, FormatterRegistry, registry
from pg_tool.formatters.json import JSONFormatter
from pg_tool.formatters.table import TableFormatter

__all__ = [
    "Formatter",
    "FormatterRegistry",
    "JSONFormatter",
    "TableFormatter",
    "registry",
]
