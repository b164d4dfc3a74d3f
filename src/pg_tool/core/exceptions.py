"""Exception hierarchy for pg-tool.

All exceptions carry an exit_code for CLI return value mapping.
Exit codes are defined in exit_codes.py.
"""

from pg_tool.core.exit_codes import ExitCode


class PgToolError(Exception):
    """Base exception for all pg-tool errors."""

    exit_code: int = ExitCode.GENERAL_ERROR

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class NetworkError(PgToolError):
    """Connection failures, unreachable host, failed ping."""

    exit_code: int = ExitCode.NETWORK_ERROR


class TimeoutError(NetworkError):
    """Statement timeout, container startup timeout."""

    exit_code: int = ExitCode.TIMEOUT


class InputError(PgToolError):
    """File not found, invalid parameters."""

    exit_code: int = ExitCode.INPUT_ERROR


class InvalidArgumentError(InputError):
    """Bad migration direction, missing password."""


class MigrationNotFoundError(InputError):
    """No migrations could be found in a directory."""


class EmptyDirectoryError(MigrationNotFoundError):
    """The migrations directory has no entries at all."""


class NoMatchingMigrationsError(MigrationNotFoundError):
    """The migrations directory has entries, but none match the direction."""


class EmptyFileError(InputError):
    """A matching migration file has no content."""


class ConfigError(PgToolError):
    """Malformed config, missing profile, unparsable connection string."""

    exit_code: int = ExitCode.CONFIG_ERROR


class PgIOError(PgToolError):
    """Filesystem read failures, connection close failures."""

    exit_code: int = ExitCode.IO_ERROR


class QueryError(PgToolError):
    """The server rejected or failed to execute a query."""

    exit_code: int = ExitCode.QUERY_ERROR


class DecodeError(QueryError):
    """Column metadata or row values could not be read back."""


class NotImplementedOperationError(PgToolError, NotImplementedError):
    """An operation that is deliberately left unimplemented."""

    exit_code: int = ExitCode.NOT_IMPLEMENTED
