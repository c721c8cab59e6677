"""
PostgreSQL pool arm built on psycopg 3 and psycopg_pool.

The pool is opened eagerly: a probe connection surfaces the driver's own
handshake or authentication error, then the pool waits until its first
connection is ready. Connections run in autocommit mode; the core holds no
session or transaction state.
"""

from __future__ import annotations

from typing import Optional

import psycopg
from psycopg_pool import AsyncConnectionPool, PoolTimeout

from querydesk.backends.abstract import MAX_CONNECTIONS, NETWORK_ACQUIRE_TIMEOUT, FetchedRows
from querydesk.domain.classifier import redact_conn_string
from querydesk.domain.models import BackendKind
from querydesk.errors import ExecError, FactoryError
from querydesk.utils.logging import get_logger

log = get_logger(__name__)


class PostgresPool:
    """
    Bounded psycopg connection pool for one PostgreSQL server.
    """

    kind = BackendKind.POSTGRES

    def __init__(
        self,
        pool: AsyncConnectionPool,
        max_connections: int = MAX_CONNECTIONS,
        acquire_timeout: Optional[float] = NETWORK_ACQUIRE_TIMEOUT,
    ) -> None:
        self._pool = pool
        self.max_connections = max_connections
        self.acquire_timeout = acquire_timeout

    @classmethod
    async def open(
        cls,
        conn_string: str,
        max_connections: int = MAX_CONNECTIONS,
        acquire_timeout: float = NETWORK_ACQUIRE_TIMEOUT,
    ) -> "PostgresPool":
        """
        Connect to the server and return a ready pool.

        Raises
        ------
        FactoryError
            If the connection string is malformed or the server cannot be
            reached or refuses the credentials.
        """
        try:
            probe = await psycopg.AsyncConnection.connect(
                conn_string, connect_timeout=int(acquire_timeout)
            )
            await probe.close()

            pool = AsyncConnectionPool(
                conninfo=conn_string,
                min_size=1,
                max_size=max_connections,
                timeout=acquire_timeout,
                kwargs={"autocommit": True},
                open=False,
            )
            await pool.open(wait=True, timeout=acquire_timeout)
        except (psycopg.Error, PoolTimeout) as exc:
            raise FactoryError(str(exc)) from exc

        log.info(
            "Postgres pool opened",
            extra={
                "backend": cls.kind.value,
                "conn": redact_conn_string(conn_string),
                "max_connections": max_connections,
            },
        )
        return cls(pool, max_connections=max_connections, acquire_timeout=acquire_timeout)

    async def fetch_all(self, sql: str) -> FetchedRows:
        try:
            async with self._pool.connection() as conn:
                async with conn.cursor() as cur:
                    await cur.execute(sql)
                    if cur.description is None:
                        return FetchedRows()
                    rows = await cur.fetchall()
                    return FetchedRows.from_description(cur.description, rows)
        except PoolTimeout as exc:
            raise ExecError(f"Timed out acquiring a connection: {exc}") from exc
        except psycopg.Error as exc:
            raise ExecError(str(exc)) from exc

    async def close(self) -> None:
        await self._pool.close()
        log.info("Postgres pool closed", extra={"backend": self.kind.value})


__all__ = ["PostgresPool"]
