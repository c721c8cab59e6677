from __future__ import annotations

from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Dict, List, Optional

import psycopg
import pytest
from psycopg_pool import PoolTimeout

from querydesk.backends import postgres
from querydesk.backends.postgres import PostgresPool
from querydesk.errors import ExecError, FactoryError

DSN = "postgresql://app:secret@db:5432/shop"


class _FakeProbe:
    def __init__(self) -> None:
        self.closed = False

    async def close(self) -> None:
        self.closed = True


class _FakeCursor:
    def __init__(self, description, rows, error: Optional[Exception]) -> None:
        self._description = description
        self._rows = rows
        self._error = error
        self.description = None
        self.executed: List[str] = []

    async def __aenter__(self) -> "_FakeCursor":
        return self

    async def __aexit__(self, *exc: Any) -> None:
        return None

    async def execute(self, sql: str) -> None:
        self.executed.append(sql)
        if self._error is not None:
            raise self._error
        self.description = self._description

    async def fetchall(self) -> List[tuple]:
        return list(self._rows)


class _FakeConnection:
    def __init__(self, cursor: _FakeCursor) -> None:
        self._cursor = cursor

    def cursor(self) -> _FakeCursor:
        return self._cursor


class _FakeConnectionPool:
    """Stands in for psycopg_pool.AsyncConnectionPool."""

    instances: List["_FakeConnectionPool"] = []

    def __init__(self, conninfo: str = "", **kwargs: Any) -> None:
        self.conninfo = conninfo
        self.kwargs = kwargs
        self.open_args: Dict[str, Any] = {}
        self.closed = False
        self.cursor: Optional[_FakeCursor] = None
        self.acquire_error: Optional[Exception] = None
        _FakeConnectionPool.instances.append(self)

    async def open(self, wait: bool = False, timeout: float = 30.0) -> None:
        self.open_args = {"wait": wait, "timeout": timeout}

    @asynccontextmanager
    async def connection(self) -> AsyncIterator[_FakeConnection]:
        if self.acquire_error is not None:
            raise self.acquire_error
        assert self.cursor is not None
        yield _FakeConnection(self.cursor)

    async def close(self) -> None:
        self.closed = True


@pytest.fixture
def fake_pool_class(monkeypatch):
    _FakeConnectionPool.instances = []
    monkeypatch.setattr(postgres, "AsyncConnectionPool", _FakeConnectionPool)
    return _FakeConnectionPool


@pytest.fixture
def probe(monkeypatch) -> _FakeProbe:
    probe = _FakeProbe()

    async def connect(conninfo: str, **kwargs: Any) -> _FakeProbe:
        probe.conninfo = conninfo
        probe.kwargs = kwargs
        return probe

    monkeypatch.setattr(psycopg.AsyncConnection, "connect", staticmethod(connect))
    return probe


def _pool_with(cursor: _FakeCursor) -> PostgresPool:
    fake = _FakeConnectionPool(DSN)
    fake.cursor = cursor
    return PostgresPool(fake)


async def test_open_probes_then_waits_for_the_pool(fake_pool_class, probe) -> None:
    pool = await PostgresPool.open(DSN)

    assert probe.closed
    assert probe.conninfo == DSN
    assert probe.kwargs == {"connect_timeout": 5}
    (fake,) = fake_pool_class.instances
    assert fake.conninfo == DSN
    assert fake.kwargs["max_size"] == 5
    assert fake.kwargs["timeout"] == 5.0
    assert fake.kwargs["kwargs"] == {"autocommit": True}
    assert fake.kwargs["open"] is False
    assert fake.open_args == {"wait": True, "timeout": 5.0}

    await pool.close()
    assert fake.closed


async def test_connect_failure_is_a_factory_error(monkeypatch, fake_pool_class) -> None:
    async def connect(conninfo: str, **kwargs: Any) -> _FakeProbe:
        raise psycopg.OperationalError('password authentication failed for user "app"')

    monkeypatch.setattr(psycopg.AsyncConnection, "connect", staticmethod(connect))
    with pytest.raises(FactoryError, match="password authentication failed"):
        await PostgresPool.open(DSN)
    assert fake_pool_class.instances == []


async def test_fetch_all_returns_columns_and_rows() -> None:
    cursor = _FakeCursor([("id",), ("active",)], [(1, True), (2, False)], None)
    fetched = await _pool_with(cursor).fetch_all("SELECT id, active FROM users")

    assert cursor.executed == ["SELECT id, active FROM users"]
    assert fetched.columns == ["id", "active"]
    assert fetched.rows == [(1, True), (2, False)]


async def test_statement_without_result_set() -> None:
    cursor = _FakeCursor(None, [], None)
    fetched = await _pool_with(cursor).fetch_all("CREATE TABLE t (a int)")
    assert fetched.columns == []


async def test_server_error_is_an_exec_error() -> None:
    cursor = _FakeCursor(None, [], psycopg.errors.SyntaxError('syntax error at or near "SELEC"'))
    with pytest.raises(ExecError, match="syntax error"):
        await _pool_with(cursor).fetch_all("SELEC 1")


async def test_pool_timeout_is_an_exec_error() -> None:
    fake = _FakeConnectionPool(DSN)
    fake.acquire_error = PoolTimeout("couldn't get a connection after 5.00 sec")
    with pytest.raises(ExecError, match="Timed out acquiring a connection"):
        await PostgresPool(fake).fetch_all("SELECT 1")
