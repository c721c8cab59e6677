"""
Pool factory: backend tag plus connection string to a ready pool.

Every pool is capped at ``MAX_CONNECTIONS``. Postgres and MySQL wait at most
``NETWORK_ACQUIRE_TIMEOUT`` seconds for a free connection; SQLite keeps its
own default. The factory never retries: a failed open is reported once, with
the driver's message, as a ``FactoryError``.
"""

from __future__ import annotations

from typing import Awaitable, Callable, Dict

from querydesk.backends.abstract import (
    MAX_CONNECTIONS,
    NETWORK_ACQUIRE_TIMEOUT,
    SQLITE_ACQUIRE_TIMEOUT,
    BackendPool,
)
from querydesk.backends.mysql import MySQLPool
from querydesk.backends.postgres import PostgresPool
from querydesk.backends.sqlite import SQLitePool
from querydesk.domain.models import BackendKind
from querydesk.errors import UnsupportedBackendError

PoolOpener = Callable[[str], Awaitable[BackendPool]]


async def _open_postgres(conn_string: str) -> BackendPool:
    return await PostgresPool.open(
        conn_string, max_connections=MAX_CONNECTIONS, acquire_timeout=NETWORK_ACQUIRE_TIMEOUT
    )


async def _open_mysql(conn_string: str) -> BackendPool:
    return await MySQLPool.open(
        conn_string, max_connections=MAX_CONNECTIONS, acquire_timeout=NETWORK_ACQUIRE_TIMEOUT
    )


async def _open_sqlite(conn_string: str) -> BackendPool:
    return await SQLitePool.open(
        conn_string, max_connections=MAX_CONNECTIONS, acquire_timeout=SQLITE_ACQUIRE_TIMEOUT
    )


def _openers() -> Dict[BackendKind, PoolOpener]:
    """Registry of pool openers per backend."""
    return {
        BackendKind.POSTGRES: _open_postgres,
        BackendKind.MYSQL: _open_mysql,
        BackendKind.SQLITE: _open_sqlite,
    }


async def make_pool(kind: BackendKind, conn_string: str) -> BackendPool:
    """
    Construct a configured pool for ``kind``.

    Raises
    ------
    UnsupportedBackendError
        If ``kind`` is ``BackendKind.UNKNOWN``.
    FactoryError
        If the backend cannot be reached or the connection string is invalid.
    """
    opener = _openers().get(kind)
    if opener is None:
        raise UnsupportedBackendError()
    return await opener(conn_string)


__all__ = ["make_pool"]
