"""Rich table formatter."""

from __future__ import annotations

import shutil
from io import StringIO
from typing import TYPE_CHECKING, Any

from rich.console import Console
from rich.table import Table

from pg_tool.formatters.base import registry

if TYPE_CHECKING:
    from collections.abc import Iterator

    from pg_tool.core.models import QueryResult

_NO_RESULTS = "No results"


def _cell(value: Any, width: int) -> str:
    if value is None:
        return ""
    text = bytes(value).hex() if isinstance(value, (bytes, memoryview)) else str(value)
    if len(text) <= width:
        return text
    return text[: width - 1] + "…"


class TableFormatter:
    def __init__(self, width: int = 40) -> None:
        self.width = width

    def format(self, result: QueryResult) -> Iterator[str]:
        if not result.rows:
            yield _NO_RESULTS
            return

        table = Table(show_edge=True, pad_edge=True)
        for col in result.columns:
            table.add_column(col.name, no_wrap=True)
        for row in result.rows:
            table.add_row(*(_cell(v, self.width) for v in row))

        buf = StringIO()
        term_width = shutil.get_terminal_size((120, 24)).columns
        Console(file=buf, force_terminal=True, width=term_width).print(table)
        yield buf.getvalue().rstrip("\n")


registry.register("table", TableFormatter)
