"""
The four core operations: connect, disconnect, execute and get_tables.

Every operation takes the registry explicitly. Registry access never spans an
await: pools are opened before they are inserted, looked up and then used
outside the lock, and closed only after they have been removed.

Usage:
    registry = ConnectionRegistry()
    handle = await connect(registry, "sqlite::memory:")
    rows = await execute(registry, handle, "SELECT 1 AS n")
    await disconnect(registry, handle)
"""

from __future__ import annotations

from typing import List, Optional

from querydesk.backends.abstract import BackendPool
from querydesk.dispatcher import run_query
from querydesk.domain.classifier import detect_kind
from querydesk.domain.models import BackendKind, ConnectionInfo, Row
from querydesk.errors import NotFoundError, UnsupportedBackendError
from querydesk.infrastructure.pool_factory import make_pool
from querydesk.infrastructure.registry import ConnectionRegistry
from querydesk.introspection import list_tables
from querydesk.utils.logging import get_logger

log = get_logger(__name__)


def _resolve(registry: ConnectionRegistry, handle: str) -> BackendPool:
    pool = registry.lookup(handle)
    if pool is None:
        raise NotFoundError()
    return pool


async def connect(
    registry: ConnectionRegistry, conn_string: str, name: Optional[str] = None
) -> str:
    """
    Classify ``conn_string``, open a pool for it and register the pool.

    Parameters
    ----------
    registry : ConnectionRegistry
        Registry that will own the new pool.
    conn_string : str
        Postgres/MySQL URL, SQLite URL or path.
    name : str | None
        Optional label shown by ``list_connections``.

    Returns
    -------
    str
        The new handle.

    Raises
    ------
    UnsupportedBackendError
        If the string does not classify as a supported backend.
    FactoryError
        If the pool cannot be opened.
    """
    kind = detect_kind(conn_string)
    if kind is BackendKind.UNKNOWN:
        raise UnsupportedBackendError()

    pool = await make_pool(kind, conn_string)
    handle = registry.mint_handle()
    registry.insert(handle, pool, conn_string=conn_string, name=name)
    log.info("Connected", extra={"handle": handle, "backend": kind.value})
    return handle


async def disconnect(registry: ConnectionRegistry, handle: str) -> bool:
    """
    Unregister ``handle`` and close its pool.

    Raises
    ------
    NotFoundError
        If ``handle`` is not registered (including a second disconnect).
    """
    pool = registry.remove(handle)
    if pool is None:
        raise NotFoundError()
    await pool.close()
    log.info("Disconnected", extra={"handle": handle, "backend": pool.kind.value})
    return True


async def execute(registry: ConnectionRegistry, handle: str, sql: str) -> List[Row]:
    """
    Run raw ``sql`` on the pool behind ``handle`` and return normalized rows.

    The SQL is trusted as-is; there are no bind parameters.

    Raises
    ------
    NotFoundError
        If ``handle`` is not registered.
    ExecError
        If the backend rejects the SQL or the transport fails.
    """
    return await run_query(_resolve(registry, handle), sql)


async def get_tables(registry: ConnectionRegistry, handle: str) -> List[str]:
    """
    List user tables for the backend behind ``handle``.

    Raises
    ------
    NotFoundError
        If ``handle`` is not registered.
    ExecError
        If the introspection query fails.
    """
    return await list_tables(_resolve(registry, handle))


def list_connections(registry: ConnectionRegistry) -> List[ConnectionInfo]:
    """Summaries of every live connection."""
    return registry.entries()


__all__ = ["connect", "disconnect", "execute", "get_tables", "list_connections"]
