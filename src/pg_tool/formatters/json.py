"""JSON formatter: one object per row, keyed by column name."""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, Any

from pg_tool.core.database import decode_rows
from pg_tool.formatters.base import registry

if TYPE_CHECKING:
    from collections.abc import Iterator

    from pg_tool.core.models import QueryResult


def _serialize_value(val: Any) -> Any:
    if isinstance(val, (int, float, str, bool, type(None), dict, list)):
        return val
    if isinstance(val, (bytes, bytearray, memoryview)):
        return bytes(val).hex()
    return str(val)


class JSONFormatter:
    def __init__(self, compact: bool = False) -> None:
        self.compact = compact

    def format(self, result: QueryResult) -> Iterator[str]:
        rows = [
            {name: _serialize_value(val) for name, val in row.items()}
            for row in decode_rows(result)
        ]
        if self.compact:
            yield json.dumps(rows, default=str)
        else:
            yield json.dumps(rows, indent=2, default=str)


registry.register("json", JSONFormatter)
