"""Disposable PostgreSQL containers for integration tests.

Requires the ``test`` extra (testcontainers) and a reachable container
runtime.
"""

from __future__ import annotations

import builtins
from typing import TYPE_CHECKING

import structlog
from testcontainers.community.postgres import PostgresContainer
from testcontainers.core.waiting_utils import wait_for_logs

from pg_tool.core.database import Database
from pg_tool.core.exceptions import NetworkError, TimeoutError

if TYPE_CHECKING:
    from collections.abc import Callable

    from pg_tool.core.config import ConnectionOptions

DEFAULT_IMAGE = "docker.io/postgres:16-alpine"
READY_LOG_LINE = "database system is ready to accept connections"


def new_test_db(
    options: ConnectionOptions,
    *,
    image: str = DEFAULT_IMAGE,
    occurrences: int = 2,
    startup_timeout: float = 30.0,
) -> tuple[Database, Callable[[], None]]:
    """Start a throwaway PostgreSQL container and open a handle against it.

    The container gets the user, password and database name from
    ``options``. Readiness means the server's ready log line has shown up
    ``occurrences`` times: the image logs it once for the init server and
    once for the real one. Empty user or database names take the
    container's defaults, and the returned handle uses the same values.

    ``startup_timeout`` bounds only the log wait that runs after
    ``PostgresContainer.start()``; the container's own readiness check in
    ``start()`` uses the testcontainers timeout (``TC_MAX_TRIES``).

    Returns the open handle and a teardown callback that closes the handle
    and stops the container.
    """
    log = structlog.get_logger()
    db = Database(options.model_copy())
    container = PostgresContainer(
        image,
        port=5432,
        username=options.user or None,
        password=options.password or None,
        dbname=options.name or None,
    )
    db.options.user = container.username
    db.options.name = container.dbname

    def teardown() -> None:
        try:
            db.close()
        finally:
            try:
                container.stop()
            except Exception as e:
                log.error("failed to terminate container", error=str(e))
                raise

    try:
        container.start()
    except Exception as e:
        try:
            container.stop()
        except Exception as stop_error:
            log.error("failed to terminate container", error=str(stop_error))
        raise NetworkError(f"run failed: {e}") from e

    try:
        wait_for_logs(
            container,
            lambda logs: logs.count(READY_LOG_LINE) >= occurrences,
            timeout=startup_timeout,
        )
        db.options.host = container.get_container_host_ip()
        db.options.port = str(container.get_exposed_port(5432))
    except builtins.TimeoutError as e:
        teardown()
        raise TimeoutError(f"container not ready after {startup_timeout}s: {e}") from e
    except Exception as e:
        teardown()
        raise NetworkError(f"unable to get container address: {e}") from e

    try:
        db.open()
    except Exception:
        teardown()
        raise

    log.info("test database running", host=db.options.host, port=db.options.port)
    return db, teardown
