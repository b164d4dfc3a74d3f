"""Migration file commands."""

from __future__ import annotations

from pathlib import Path  # noqa: TC003
from typing import Annotated

import typer

from pg_tool.cli.commands._shared import output_result
from pg_tool.core.migrations import load_migrations
from pg_tool.core.models import ColumnMeta, MigrationDirection, QueryResult

migrations_app = typer.Typer(help="Inspect migration files")


@migrations_app.callback(invoke_without_command=True)
def migrations_callback(ctx: typer.Context) -> None:
    if not ctx.invoked_subcommand:
        typer.echo(ctx.get_help())
        raise typer.Exit()


@migrations_app.command("list")
def list_command(
    ctx: typer.Context,
    directory: Annotated[
        Path,
        typer.Argument(help="Directory holding *.up.sql / *.down.sql files"),
    ],
    direction: Annotated[
        MigrationDirection,
        typer.Option("--direction", "-D", help="Migration direction: up|down"),
    ] = MigrationDirection.UP,
) -> None:
    """List the migration files for one direction, ordered by filename."""
    migrations = load_migrations(directory, direction)

    rows = [
        (m.filename, m.direction.value, len(m.content.encode("utf-8")))
        for m in migrations
    ]
    result = QueryResult(
        columns=[
            ColumnMeta(name="filename", type_oid=25, type_name="text"),
            ColumnMeta(name="direction", type_oid=25, type_name="text"),
            ColumnMeta(name="bytes", type_oid=20, type_name="int8"),
        ],
        rows=rows,
        row_count=len(rows),
        status_message=f"SELECT {len(rows)}",
    )
    output_result(ctx, result)
