"""Connection and query commands."""

from __future__ import annotations

import sys
from typing import Annotated

import typer

from pg_tool.cli.commands._shared import get_database, output_result
from pg_tool.core.query_source import resolve_query_source


def query_command(
    ctx: typer.Context,
    file: Annotated[
        str | None,
        typer.Argument(help="SQL file to execute"),
    ] = None,
    execute: Annotated[
        str | None,
        typer.Option("--execute", "-e", help="Execute inline SQL query"),
    ] = None,
    timeout: Annotated[
        float | None,
        typer.Option("--timeout", "-t", help="Statement timeout in seconds"),
    ] = None,
) -> None:
    """Execute a SQL query from file, inline (-e), or stdin."""
    try:
        is_tty = sys.stdin.isatty()
    except (ValueError, AttributeError):
        is_tty = False
    if execute is None and file is None and is_tty:
        typer.echo(ctx.get_help())
        raise typer.Exit()

    sql = resolve_query_source(inline=execute, file_path=file)

    with get_database(ctx, timeout=timeout) as db:
        db.open()
        result = db.fetch(sql)

    output_result(ctx, result)


def ping_command(ctx: typer.Context) -> None:
    """Connect to the database and check that it responds."""
    with get_database(ctx) as db:
        db.open()
        db.ping()
        opts = db.options
        typer.echo(f"OK {opts.host}:{opts.port}/{opts.name}")
