"""pg-tool main entry point and command registration."""

from __future__ import annotations

import atexit
from pathlib import Path  # noqa: TC003
from typing import Annotated

import sentry_sdk
import typer

from pg_tool.__about__ import __version__
from pg_tool.cli.commands.migrations import migrations_app
from pg_tool.cli.commands.query import ping_command, query_command
from pg_tool.cli.output import OutputFormat  # noqa: TC001
from pg_tool.core.exceptions import PgToolError
from pg_tool.core.logging import setup_logging
from pg_tool.core.monitoring import setup_sentry

app = typer.Typer(
    help="pg-tool - PostgreSQL migration files and connection checks",
    no_args_is_help=True,
)

app.add_typer(migrations_app, name="migrations")
app.command("query")(query_command)
app.command("ping")(ping_command)


def version_callback(value: bool) -> None:
    if value:
        typer.echo(f"pg-tool {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    ctx: typer.Context,
    version: Annotated[
        bool,
        typer.Option(
            "--version",
            "-V",
            help="Show version and exit",
            callback=version_callback,
            is_eager=True,
        ),
    ] = False,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", help="Enable verbose logging"),
    ] = False,
    profile: Annotated[
        str | None,
        typer.Option("--profile", "-P", help="Named connection profile"),
    ] = None,
    host: Annotated[
        str | None,
        typer.Option("--host", "-H", help="PostgreSQL host"),
    ] = None,
    port: Annotated[
        int | None,
        typer.Option("--port", "-p", help="PostgreSQL port"),
    ] = None,
    database: Annotated[
        str | None,
        typer.Option("--database", "-d", help="Database name"),
    ] = None,
    user: Annotated[
        str | None,
        typer.Option("--user", "-U", help="User name"),
    ] = None,
    password: Annotated[
        str | None,
        typer.Option("--password", "-W", help="Password"),
    ] = None,
    sslmode: Annotated[
        str | None,
        typer.Option("--sslmode", help="SSL mode (disable, require, verify-full, ...)"),
    ] = None,
    dsn: Annotated[
        str | None,
        typer.Option("--dsn", help="Connection DSN"),
    ] = None,
    config_file: Annotated[
        Path | None,
        typer.Option("--config", help="Path to config file"),
    ] = None,
    format: Annotated[
        OutputFormat | None,
        typer.Option("--format", "-f", help="Output format: table|json"),
    ] = None,
    compact: Annotated[
        bool,
        typer.Option("--compact", help="Compact JSON output (no indentation)"),
    ] = False,
    width: Annotated[
        int,
        typer.Option("--width", help="Column width for table format"),
    ] = 40,
) -> None:
    """pg-tool - PostgreSQL migration files and connection checks."""
    setup_logging(verbose)
    if setup_sentry():
        transaction = sentry_sdk.start_transaction(
            op="cli", name=ctx.invoked_subcommand or "pg-tool"
        )
        transaction.__enter__()

        def cleanup() -> None:
            transaction.__exit__(None, None, None)
            sentry_sdk.flush(timeout=2)

        atexit.register(cleanup)

    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["profile"] = profile
    ctx.obj["host"] = host
    ctx.obj["port"] = port
    ctx.obj["database"] = database
    ctx.obj["user"] = user
    ctx.obj["password"] = password
    ctx.obj["sslmode"] = sslmode
    ctx.obj["dsn"] = dsn
    ctx.obj["config_file"] = config_file
    ctx.obj["format"] = format.value if format else None
    ctx.obj["compact"] = compact
    ctx.obj["width"] = width


def run() -> None:
    """Entry point with global error handling."""
    try:
        app()
    except PgToolError as e:
        sentry_sdk.capture_exception(e)
        typer.echo(f"Error: {e.message}", err=True)
        raise SystemExit(e.exit_code) from None
    except SystemExit:
        raise
    except KeyboardInterrupt:
        raise SystemExit(130) from None
    except Exception as e:
        sentry_sdk.capture_exception(e)
        typer.echo(f"Error: {e}", err=True)
        raise SystemExit(1) from None
