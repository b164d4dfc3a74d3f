"""Value models for pg-tool.

Pydantic models for migration records, column metadata and query
results, plus the value types a decoded row can carry.
"""

from __future__ import annotations

from datetime import date, datetime, time, timedelta
from decimal import Decimal
from enum import StrEnum
from typing import Any, TypeAlias
from uuid import UUID

from pydantic import BaseModel, ConfigDict

# Values psycopg surfaces for a single column with its default loaders.
# json/jsonb arrive decoded, arrays arrive as lists.
ColumnValue: TypeAlias = (
    None
    | bool
    | int
    | float
    | Decimal
    | str
    | bytes
    | date
    | time
    | datetime
    | timedelta
    | UUID
    | dict[str, Any]
    | list[Any]
)

RowMap: TypeAlias = dict[str, ColumnValue]


class MigrationDirection(StrEnum):
    UP = "up"
    DOWN = "down"


class Migration(BaseModel):
    """A single SQL migration file for one direction."""

    model_config = ConfigDict(frozen=True)

    direction: MigrationDirection
    filename: str
    content: str


class ColumnMeta(BaseModel):
    """Metadata for a single result column."""

    name: str
    type_oid: int
    type_name: str


class QueryResult(BaseModel):
    """Result of a SQL query execution."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    columns: list[ColumnMeta]
    rows: list[tuple[Any, ...]]
    row_count: int
    status_message: str
