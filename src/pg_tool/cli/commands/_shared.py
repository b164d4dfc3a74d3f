"""Shared CLI plumbing for command modules: handle creation and output."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from pg_tool.cli.output import get_formatter, write_output
from pg_tool.core.config import load_config, resolve_config
from pg_tool.core.database import Database

if TYPE_CHECKING:
    import typer

    from pg_tool.core.models import QueryResult


def get_database(ctx: typer.Context, timeout: float | None = None) -> Database:
    """Build an unopened Database from the global options in ctx.obj."""
    obj = ctx.ensure_object(dict)
    config = load_config(obj.get("config_file"))

    cli_overrides: dict[str, Any] = {}
    for key in ("host", "port", "database", "user", "password", "sslmode"):
        val = obj.get(key)
        if val is not None:
            cli_overrides[key] = val
    if timeout is not None:
        cli_overrides["timeout"] = timeout

    resolved = resolve_config(
        config,
        profile_name=obj.get("profile"),
        dsn=obj.get("dsn"),
        **cli_overrides,
    )
    if obj.get("format") is None and resolved.default_format:
        obj["format"] = resolved.default_format
    return Database(resolved.options, statement_timeout=resolved.statement_timeout)


def output_result(ctx: typer.Context, result: QueryResult) -> None:
    obj = ctx.ensure_object(dict)
    formatter = get_formatter(
        obj.get("format"),
        compact=obj.get("compact", False),
        width=obj.get("width", 40),
    )
    write_output(formatter, result)
