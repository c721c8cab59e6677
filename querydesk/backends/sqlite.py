"""
SQLite pool arm built on aiosqlite.

aiosqlite wraps a single connection, so this module carries a small bounded
pool around it: a semaphore caps the number of connections checked out at
once and idle connections are kept for reuse.

Accepted connection strings:

- ``sqlite::memory:`` or ``sqlite://:memory:``: a private in-memory database
- ``sqlite://path``, ``sqlite:path`` or a bare path (``/tmp/x.db``)
- ``file:`` URIs, passed to SQLite as-is

``?mode=ro|rw|rwc|memory`` and ``?cache=shared|private`` are honoured. A file
that does not exist is an error unless ``mode=rwc`` is given. In-memory
databases use a named shared-cache database so every connection of the pool
sees the same data; the pool keeps at least one connection open for the
database's lifetime.
"""

from __future__ import annotations

import asyncio
import itertools
import sqlite3
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import Any, AsyncIterator, List, Optional, Union
from urllib.parse import parse_qsl, quote, urlencode

import aiosqlite

from querydesk.backends.abstract import MAX_CONNECTIONS, SQLITE_ACQUIRE_TIMEOUT, FetchedRows
from querydesk.domain.models import BackendKind
from querydesk.errors import ExecError, FactoryError
from querydesk.utils.logging import get_logger

log = get_logger(__name__)

_MEMORY = ":memory:"
_memory_ids = itertools.count(1)


@dataclass(frozen=True)
class SQLiteTarget:
    """Resolved ``sqlite3.connect`` target (always a URI)."""

    uri: str
    in_memory: bool


def _strip_scheme(conn_string: str) -> str:
    lowered = conn_string.lower()
    for prefix in ("sqlite://", "sqlite:"):
        if lowered.startswith(prefix):
            return conn_string[len(prefix):]
    return conn_string


def _shared_memory_uri() -> str:
    return f"file:querydesk-mem-{next(_memory_ids)}?mode=memory&cache=shared"


def _decode_text(raw: bytes) -> Union[str, bytes]:
    # Undecodable TEXT stays bytes so only that cell normalizes to None.
    try:
        return raw.decode("utf-8")
    except UnicodeDecodeError:
        return raw


def split_statements(sql: str) -> List[str]:
    """
    Split a script into complete SQL statements.

    Semicolons inside literals, comments and trigger bodies do not split.
    Trailing text without a semicolon is kept as the last statement.
    """
    statements: List[str] = []
    buffer = ""
    for piece in sql.split(";"):
        buffer = f"{buffer};{piece}" if buffer else piece
        if sqlite3.complete_statement(buffer + ";"):
            if buffer.strip():
                statements.append(buffer.strip())
            buffer = ""
    if buffer.strip():
        statements.append(buffer.strip())
    return statements


def resolve_sqlite_target(conn_string: str) -> SQLiteTarget:
    """
    Turn any accepted SQLite connection string into a ``file:`` URI.
    """
    rest = _strip_scheme(conn_string.strip())
    path, _, query = rest.partition("?")
    options = dict(parse_qsl(query, keep_blank_values=True))

    if path in ("", _MEMORY):
        return SQLiteTarget(uri=_shared_memory_uri(), in_memory=True)

    in_memory = options.get("mode") == "memory"
    if in_memory:
        options.setdefault("cache", "shared")
    else:
        options.setdefault("mode", "rw")

    if path.lower().startswith("file:"):
        base = path
    else:
        base = "file:" + quote(path)
    return SQLiteTarget(uri=f"{base}?{urlencode(options)}", in_memory=in_memory)


class SQLitePool:
    """
    Bounded pool of aiosqlite connections to one database.
    """

    kind = BackendKind.SQLITE

    def __init__(
        self,
        target: SQLiteTarget,
        max_connections: int = MAX_CONNECTIONS,
        acquire_timeout: Optional[float] = SQLITE_ACQUIRE_TIMEOUT,
    ) -> None:
        self.target = target
        self.max_connections = max_connections
        self.acquire_timeout = acquire_timeout
        self._slots = asyncio.Semaphore(max_connections)
        self._idle: List[aiosqlite.Connection] = []
        self._closed = False

    @classmethod
    async def open(
        cls,
        conn_string: str,
        max_connections: int = MAX_CONNECTIONS,
        acquire_timeout: Optional[float] = SQLITE_ACQUIRE_TIMEOUT,
    ) -> "SQLitePool":
        """
        Open the database and return a pool holding one ready connection.

        Raises
        ------
        FactoryError
            If the database file cannot be opened.
        """
        pool = cls(
            resolve_sqlite_target(conn_string),
            max_connections=max_connections,
            acquire_timeout=acquire_timeout,
        )
        try:
            pool._idle.append(await pool._connect())
        except aiosqlite.Error as exc:
            raise FactoryError(str(exc)) from exc

        log.info(
            "SQLite pool opened",
            extra={
                "backend": cls.kind.value,
                "uri": pool.target.uri,
                "max_connections": max_connections,
            },
        )
        return pool

    async def _connect(self) -> aiosqlite.Connection:
        conn = await aiosqlite.connect(self.target.uri, uri=True, isolation_level=None)
        conn.text_factory = _decode_text
        return conn

    @asynccontextmanager
    async def connection(self) -> AsyncIterator[aiosqlite.Connection]:
        """
        Borrow a connection, waiting at most ``acquire_timeout`` for a free slot.
        """
        if self._closed:
            raise ExecError("Pool is closed")
        try:
            await asyncio.wait_for(self._slots.acquire(), timeout=self.acquire_timeout)
        except asyncio.TimeoutError as exc:
            raise ExecError(
                f"Timed out acquiring a connection after {self.acquire_timeout}s"
            ) from exc

        try:
            if self._closed:
                raise ExecError("Pool is closed")
            conn = self._idle.pop() if self._idle else await self._connect()
            try:
                yield conn
            finally:
                self._idle.append(conn)
        finally:
            self._slots.release()

    async def fetch_all(self, sql: str) -> FetchedRows:
        """
        Run every statement of ``sql`` in order on one connection.

        Returns the rows of the last statement that produced a result set.
        """
        fetched = FetchedRows()
        try:
            async with self.connection() as conn:
                for statement in split_statements(sql):
                    async with conn.execute(statement) as cursor:
                        rows: List[Any] = await cursor.fetchall()
                        if cursor.description:
                            fetched = FetchedRows.from_description(cursor.description, rows)
        except aiosqlite.Error as exc:
            raise ExecError(str(exc)) from exc
        return fetched

    async def close(self) -> None:
        """
        Refuse new borrowers, wait for borrowed connections to come back, then
        close every connection.
        """
        if self._closed:
            return
        self._closed = True
        for _ in range(self.max_connections):
            await self._slots.acquire()
        idle, self._idle = self._idle, []
        for conn in idle:
            await conn.close()
        log.info("SQLite pool closed", extra={"backend": self.kind.value, "uri": self.target.uri})

    @property
    def idle_connections(self) -> int:
        return len(self._idle)


__all__ = ["SQLitePool", "SQLiteTarget", "resolve_sqlite_target", "split_statements"]
