"""Process exit codes returned by ``pg-tool``.

Each ``PgToolError`` subclass carries one of these; ``run()`` exits with it.
"""

from enum import IntEnum


class ExitCode(IntEnum):
    SUCCESS = 0
    GENERAL_ERROR = 1
    USAGE_ERROR = 2  # raised by typer/click for bad arguments
    INPUT_ERROR = 3
    NETWORK_ERROR = 5
    TIMEOUT = 6
    CONFIG_ERROR = 7
    IO_ERROR = 8
    QUERY_ERROR = 9
    NOT_IMPLEMENTED = 10
