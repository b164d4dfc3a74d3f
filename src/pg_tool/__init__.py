"""pg-tool: PostgreSQL migration loading and connection handling."""

from pg_tool.__about__ import __version__

__all__ = ["__version__"]
