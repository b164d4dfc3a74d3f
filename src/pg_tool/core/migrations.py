"""Migration file loading.

Reads a migrations directory and returns the SQL files for one
direction. The load is all-or-nothing: any unreadable or empty matching
file fails the whole batch.
"""

from __future__ import annotations

from pathlib import Path

from pg_tool.core.exceptions import (
    EmptyDirectoryError,
    EmptyFileError,
    InputError,
    InvalidArgumentError,
    NoMatchingMigrationsError,
    PgIOError,
)
from pg_tool.core.logging import get_logger
from pg_tool.core.models import Migration, MigrationDirection


def _parse_direction(direction: str | MigrationDirection) -> MigrationDirection:
    try:
        return MigrationDirection(direction)
    except ValueError:
        msg = f"invalid direction '{direction}', must be 'up' or 'down'"
        raise InvalidArgumentError(msg) from None


def load_migrations(
    migrations_dir: str | Path, direction: str | MigrationDirection
) -> list[Migration]:
    """Load every file in ``migrations_dir`` whose name contains ``<direction>.sql``.

    The match is a substring match, so ``0001.up.sql.bak`` counts as an
    up migration. Results are ordered by filename; sub-directories are
    skipped.

    Raises:
        InvalidArgumentError: direction is not "up" or "down".
        PgIOError: the directory or a matching file cannot be read.
        EmptyDirectoryError: the directory has no entries.
        EmptyFileError: a matching file is empty.
        NoMatchingMigrationsError: no file matches the direction.
    """
    log = get_logger("migrations")
    parsed = _parse_direction(direction)
    path = Path(migrations_dir)
    log.debug(f"fetching {parsed.value} migrations", dir=str(path))

    try:
        entries = sorted(path.iterdir(), key=lambda p: p.name)
    except OSError as e:
        raise PgIOError(f"unable to read directory '{path}': {e}") from e
    if not entries:
        raise EmptyDirectoryError(f"no files found in directory '{path}'")

    expected = f"{parsed.value}.sql"
    migrations: list[Migration] = []
    for entry in entries:
        if entry.is_dir():
            log.warning("skipping directory", name=entry.name)
            continue
        if expected not in entry.name:
            continue
        try:
            data = entry.read_bytes()
        except OSError as e:
            raise PgIOError(f"unable to read file '{entry.name}': {e}") from e
        if not data:
            raise EmptyFileError(f"empty file '{entry.name}'")
        try:
            content = data.decode("utf-8")
        except UnicodeDecodeError as e:
            raise InputError(f"file '{entry.name}' is not valid UTF-8: {e}") from e
        migrations.append(
            Migration(direction=parsed, filename=entry.name, content=content)
        )

    if not migrations:
        raise NoMatchingMigrationsError(f"no files found with ending '{expected}'")

    log.debug("loaded migrations", count=len(migrations), direction=parsed.value)
    return migrations
