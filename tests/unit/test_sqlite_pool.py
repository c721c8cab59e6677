from __future__ import annotations

import asyncio
from pathlib import Path

import pytest

from querydesk.backends.sqlite import SQLitePool, resolve_sqlite_target, split_statements
from querydesk.errors import ExecError, FactoryError

SHORT_TIMEOUT = 0.05


@pytest.mark.parametrize(
    "conn_string",
    ["sqlite::memory:", "sqlite://:memory:", "sqlite://", ":memory:"],
)
def test_memory_targets_use_a_named_shared_cache(conn_string: str) -> None:
    target = resolve_sqlite_target(conn_string)
    assert target.in_memory
    assert target.uri.startswith("file:querydesk-mem-")
    assert target.uri.endswith("?mode=memory&cache=shared")


def test_each_memory_target_is_a_separate_database() -> None:
    first = resolve_sqlite_target("sqlite::memory:")
    second = resolve_sqlite_target("sqlite::memory:")
    assert first.uri != second.uri


@pytest.mark.parametrize(
    ("conn_string", "expected"),
    [
        ("sqlite:///tmp/app.db", "file:/tmp/app.db?mode=rw"),
        ("sqlite:data/app.db", "file:data/app.db?mode=rw"),
        ("/tmp/my data.sqlite", "file:/tmp/my%20data.sqlite?mode=rw"),
        ("sqlite:///tmp/app.db?mode=rwc", "file:/tmp/app.db?mode=rwc"),
        ("file:app.db?mode=ro", "file:app.db?mode=ro"),
    ],
)
def test_file_targets(conn_string: str, expected: str) -> None:
    target = resolve_sqlite_target(conn_string)
    assert not target.in_memory
    assert target.uri == expected


def test_file_uri_in_memory_mode_gets_shared_cache() -> None:
    target = resolve_sqlite_target("file:scratch?mode=memory")
    assert target.in_memory
    assert target.uri == "file:scratch?mode=memory&cache=shared"


async def test_missing_file_is_a_factory_error(tmp_path: Path) -> None:
    missing = tmp_path / "missing.db"
    with pytest.raises(FactoryError):
        await SQLitePool.open(str(missing))
    assert not missing.exists()


async def test_mode_rwc_creates_the_file(tmp_path: Path) -> None:
    path = tmp_path / "fresh.db"
    pool = await SQLitePool.open(f"sqlite://{path}?mode=rwc")
    try:
        assert path.exists()
        assert pool.idle_connections == 1
    finally:
        await pool.close()


async def test_memory_database_is_shared_between_connections() -> None:
    pool = await SQLitePool.open("sqlite::memory:")
    try:
        async with pool.connection() as writer:
            await writer.execute("CREATE TABLE notes (body TEXT)")
            await writer.execute("INSERT INTO notes VALUES ('hello')")
            async with pool.connection() as reader:
                assert reader is not writer
                async with reader.execute("SELECT body FROM notes") as cursor:
                    assert await cursor.fetchall() == [("hello",)]
        assert pool.idle_connections == 2
    finally:
        await pool.close()


async def test_fetch_all_reports_columns_and_rows(sqlite_path: Path) -> None:
    pool = await SQLitePool.open(str(sqlite_path))
    try:
        fetched = await pool.fetch_all("SELECT id, name FROM people ORDER BY id")
    finally:
        await pool.close()
    assert fetched.columns == ["id", "name"]
    assert [tuple(r) for r in fetched.rows] == [(1, "ada"), (2, "grace"), (3, "linus")]


async def test_statement_without_result_set_returns_nothing() -> None:
    pool = await SQLitePool.open("sqlite::memory:")
    try:
        fetched = await pool.fetch_all("CREATE TABLE t (a INT)")
    finally:
        await pool.close()
    assert fetched.columns == []
    assert len(fetched) == 0


async def test_acquire_timeout_is_an_exec_error() -> None:
    pool = await SQLitePool.open(
        "sqlite::memory:", max_connections=1, acquire_timeout=SHORT_TIMEOUT
    )
    try:
        async with pool.connection():
            with pytest.raises(ExecError, match="Timed out acquiring a connection"):
                await pool.fetch_all("SELECT 1")
        fetched = await pool.fetch_all("SELECT 1 AS n")
        assert [tuple(r) for r in fetched.rows] == [(1,)]
    finally:
        await pool.close()


async def test_close_waits_for_borrowed_connections() -> None:
    pool = await SQLitePool.open("sqlite::memory:")
    async with pool.connection() as conn:
        closing = asyncio.create_task(pool.close())
        await asyncio.sleep(SHORT_TIMEOUT)
        assert not closing.done()
        async with conn.execute("SELECT 1") as cursor:
            assert await cursor.fetchone() == (1,)
    await closing
    assert pool.idle_connections == 0


async def test_closed_pool_refuses_work_and_close_is_idempotent() -> None:
    pool = await SQLitePool.open("sqlite::memory:")
    await pool.close()
    await pool.close()
    with pytest.raises(ExecError, match="Pool is closed"):
        await pool.fetch_all("SELECT 1")


@pytest.mark.parametrize(
    ("sql", "expected"),
    [
        ("SELECT 1", ["SELECT 1"]),
        ("SELECT 1;", ["SELECT 1"]),
        (
            "CREATE TABLE a (x INT); CREATE TABLE b (y INT)",
            ["CREATE TABLE a (x INT)", "CREATE TABLE b (y INT)"],
        ),
        ("SELECT 'a;b'; SELECT 2", ["SELECT 'a;b'", "SELECT 2"]),
        (";; SELECT 1 ;;", ["SELECT 1"]),
        ("", []),
        (
            "CREATE TRIGGER tr AFTER INSERT ON a BEGIN DELETE FROM b; END; SELECT 3",
            ["CREATE TRIGGER tr AFTER INSERT ON a BEGIN DELETE FROM b; END", "SELECT 3"],
        ),
    ],
)
def test_split_statements(sql: str, expected: list) -> None:
    assert split_statements(sql) == expected


async def test_undecodable_text_is_returned_as_bytes() -> None:
    pool = await SQLitePool.open("sqlite::memory:")
    try:
        fetched = await pool.fetch_all("SELECT CAST(x'ff' AS TEXT) AS bad, 'ok' AS good")
    finally:
        await pool.close()
    assert [tuple(r) for r in fetched.rows] == [(b"\xff", "ok")]
