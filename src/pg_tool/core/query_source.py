"""Resolve SQL text for the query command.

Sources in order of precedence: inline (-e), file path, stdin.
"""

from __future__ import annotations

import sys
from pathlib import Path

from pg_tool.core.exceptions import InputError


def resolve_query_source(inline: str | None, file_path: str | None) -> str:
    """Raises InputError when the file is missing or no source is available."""
    if inline is not None:
        return inline

    if file_path is not None:
        p = Path(file_path)
        if not p.is_file():
            raise InputError(f"Query file not found: {file_path}")
        return p.read_text()

    if not sys.stdin.isatty():
        return sys.stdin.read()

    raise InputError("No query provided. Use -e, file path, or pipe to stdin.")
