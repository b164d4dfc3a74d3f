"""PostgreSQL connection handle for pg-tool.

Wraps psycopg v3 synchronous connections: connection string formatting,
open/ping/query/close, and exception mapping to the PgToolError hierarchy.
"""

from __future__ import annotations

import time
from typing import TYPE_CHECKING, Any

import psycopg
import psycopg.errors
import sentry_sdk
import structlog
from psycopg.conninfo import conninfo_to_dict
from psycopg_pool import ConnectionPool, PoolTimeout

from pg_tool.core.config import ConnectionOptions, format_connection_string
from pg_tool.core.exceptions import (
    ConfigError,
    DecodeError,
    NetworkError,
    NotImplementedOperationError,
    PgIOError,
    QueryError,
    TimeoutError,
)
from pg_tool.core.models import ColumnMeta, QueryResult, RowMap

if TYPE_CHECKING:
    from collections.abc import Sequence

# Mapping from psycopg type OIDs to human-readable names.
# Covers the most common PostgreSQL types; unknown OIDs fall back to "unknown".
_TYPE_NAMES: dict[int, str] = {
    16: "bool",
    17: "bytea",
    19: "name",
    20: "int8",
    21: "int2",
    23: "int4",
    25: "text",
    26: "oid",
    114: "json",
    700: "float4",
    701: "float8",
    1042: "bpchar",
    1043: "varchar",
    1082: "date",
    1083: "time",
    1114: "timestamp",
    1184: "timestamptz",
    1186: "interval",
    1700: "numeric",
    2950: "uuid",
    3802: "jsonb",
}


def decode_rows(result: QueryResult) -> list[RowMap]:
    """Turn positional rows into column-name to value mappings.

    Values are passed through as psycopg loaded them. A repeated column
    name keeps the value of its last occurrence.
    """
    names = [col.name for col in result.columns]
    decoded: list[RowMap] = []
    for index, row in enumerate(result.rows):
        try:
            decoded.append(dict(zip(names, row, strict=True)))
        except ValueError as e:
            msg = f"row {index} has {len(row)} values for {len(names)} columns"
            raise DecodeError(msg) from e
    return decoded


class Database:
    """A PostgreSQL database handle: connection options plus a live connection.

    Not safe for concurrent use; use one handle per thread or a pool().
    """

    def __init__(
        self,
        options: ConnectionOptions,
        *,
        statement_timeout: float | None = None,
        connect_timeout: int = 10,
        application_name: str = "pg-tool",
    ) -> None:
        self.options = options
        self.statement_timeout = statement_timeout
        self.connect_timeout = connect_timeout
        self.application_name = application_name
        self._connection: psycopg.Connection[Any] | None = None

    def __enter__(self) -> Database:
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()

    def __repr__(self) -> str:
        state = "open" if self.is_open else "closed"
        return (
            f"<Database {self.options.user}@{self.options.host or 'localhost'}:"
            f"{self.options.port or '5432'}/{self.options.name} ({state})>"
        )

    @property
    def is_open(self) -> bool:
        return self._connection is not None and not self._connection.closed

    def connection_string(self, uri_format: bool = True) -> str:
        return format_connection_string(self.options, uri_format=uri_format)

    def _conninfo(self) -> str:
        conninfo = self.connection_string(uri_format=True)
        try:
            conninfo_to_dict(conninfo)
        except psycopg.ProgrammingError as e:
            raise ConfigError(f"unable to parse connection string: {e}") from e
        return conninfo

    def open(self) -> None:
        """Establish the connection using the URI connection string."""
        conninfo = self._conninfo()
        try:
            self._connection = psycopg.connect(
                conninfo,
                connect_timeout=self.connect_timeout,
                application_name=self.application_name,
                autocommit=True,
            )
        except psycopg.ProgrammingError as e:
            raise ConfigError(f"invalid connection string: {e}") from e
        except psycopg.OperationalError as e:
            msg = (
                f"Connection failed to {self.options.host}:{self.options.port} "
                f"database '{self.options.name}': {e}"
            )
            raise NetworkError(msg) from e
        structlog.get_logger().debug(
            "connection opened",
            host=self.options.host,
            port=self.options.port,
            dbname=self.options.name,
        )

    def _require_connection(self) -> psycopg.Connection[Any]:
        if self._connection is None or self._connection.closed:
            raise NetworkError("database connection is not open")
        return self._connection

    def ping(self) -> None:
        """Verify the connection with a server round trip."""
        conn = self._require_connection()
        try:
            conn.execute("SELECT 1")
        except psycopg.Error as e:
            raise NetworkError(f"unable to ping db: {e}") from e

    def fetch(self, sql: str, *params: Any) -> QueryResult:
        """Execute SQL and return column metadata with the raw rows."""
        log = structlog.get_logger()
        conn = self._require_connection()
        args: Sequence[Any] | None = params or None

        sql_normalized = " ".join(sql.split())
        log.debug("executing query", sql=sql_normalized, params=len(params))
        with sentry_sdk.start_span(op="db.query", description=sql_normalized[:100]) as span:
            start_time = time.monotonic()
            with conn.cursor() as cur:
                try:
                    if self.statement_timeout is not None:
                        timeout_ms = int(self.statement_timeout * 1000)
                        cur.execute(f"SET statement_timeout = {timeout_ms}")
                    cur.execute(sql, args)
                except psycopg.errors.QueryCanceled as e:
                    span.set_status("deadline_exceeded")
                    log.error("query timeout", sql=sql_normalized)
                    msg = f"Query timed out after {self.statement_timeout}s: {e}"
                    raise TimeoutError(msg) from e
                except psycopg.OperationalError as e:
                    span.set_status("unavailable")
                    log.error("database error", sql=sql_normalized, error=str(e))
                    raise NetworkError(f"Database error: {e}") from e
                except psycopg.Error as e:
                    span.set_status("invalid_argument")
                    log.error("query failed", sql=sql_normalized, error=str(e))
                    raise QueryError(f"unable to query db: {e}") from e

                try:
                    columns = [
                        ColumnMeta(
                            name=desc.name,
                            type_oid=desc.type_code,
                            type_name=_TYPE_NAMES.get(desc.type_code, "unknown"),
                        )
                        for desc in cur.description or []
                    ]
                    rows = cur.fetchall() if cur.description else []
                except psycopg.Error as e:
                    span.set_status("data_loss")
                    log.error("unable to read rows", sql=sql_normalized, error=str(e))
                    raise DecodeError(f"unable to scan rows: {e}") from e

                duration_ms = (time.monotonic() - start_time) * 1000
                span.set_data("row_count", len(rows))
                span.set_data("duration_ms", duration_ms)
                log.debug(
                    "query complete",
                    duration_ms=f"{duration_ms:.1f}",
                    row_count=len(rows),
                )
                return QueryResult(
                    columns=columns,
                    rows=rows,
                    row_count=len(rows),
                    status_message=cur.statusmessage or "",
                )

    def query(self, sql: str, *params: Any) -> list[RowMap]:
        """Execute a parameterized query and return one mapping per row.

        Parameters use psycopg placeholders (``%s``). Returns an empty list
        when the statement produces no rows.
        """
        return decode_rows(self.fetch(sql, *params))

    def execute(self, sql: str, *params: Any) -> tuple[int, int]:
        raise NotImplementedOperationError("not implemented, use query instead")

    def pool(self, min_size: int = 1, max_size: int | None = None, timeout: float = 30.0) -> ConnectionPool:
        """Open a psycopg_pool ConnectionPool over the same connection settings."""
        conninfo = self._conninfo()
        try:
            pool = ConnectionPool(
                conninfo,
                min_size=min_size,
                max_size=max_size,
                kwargs={
                    "autocommit": True,
                    "application_name": self.application_name,
                    "connect_timeout": self.connect_timeout,
                },
                timeout=timeout,
                open=False,
            )
        except (psycopg.ProgrammingError, ValueError) as e:
            raise ConfigError(f"unable to create connection pool: {e}") from e
        try:
            pool.open(wait=True, timeout=timeout)
        except PoolTimeout as e:
            pool.close()
            raise NetworkError(f"unable to create connection pool: {e}") from e
        return pool

    def close(self) -> None:
        """Close the database connection."""
        if self._connection is None:
            return
        try:
            self._connection.close()
        except psycopg.Error as e:
            raise PgIOError(f"problem when closing db connection: {e}") from e
        finally:
            self._connection = None


def new_db(options: ConnectionOptions, **kwargs: Any) -> Database:
    """Create a Database handle and open it."""
    db = Database(options, **kwargs)
    db.open()
    return db
