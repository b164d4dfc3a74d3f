"""structlog setup for pg-tool. Logs go to stderr; stdout carries results."""

import logging
import sys
from typing import Any

import structlog


def _stderr_logger(*args: Any) -> structlog.PrintLogger:
    # Looked up per logger so a redirected sys.stderr is honoured.
    return structlog.PrintLogger(file=sys.stderr)


def setup_logging(verbose: bool = False) -> None:
    """Install the console renderer; DEBUG when ``verbose``, else INFO."""
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty()),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(
            logging.DEBUG if verbose else logging.INFO
        ),
        context_class=dict,
        logger_factory=_stderr_logger,
        cache_logger_on_first_use=False,
    )


def get_logger(name: str | None = None) -> Any:
    """Return a logger bound to ``logger=name`` when a name is given."""
    logger = structlog.get_logger()
    if name:
        logger = logger.bind(logger=name)
    return logger
