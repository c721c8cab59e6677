"""
Schema introspection: list user tables of the connected database.

Each backend has one canned query. Postgres lists only the ``public`` schema,
MySQL the database selected in the connection string, and SQLite everything
except its internal ``sqlite_`` tables. Names come back in backend order.
"""

from __future__ import annotations

from typing import Dict, List

from querydesk.backends.abstract import BackendPool
from querydesk.domain.models import BackendKind
from querydesk.normalizer import DecodeError, ValueKind

TABLES_QUERIES: Dict[BackendKind, str] = {
    BackendKind.POSTGRES: (
        "SELECT table_name FROM information_schema.tables WHERE table_schema='public'"
    ),
    BackendKind.MYSQL: "SHOW TABLES",
    BackendKind.SQLITE: (
        "SELECT name FROM sqlite_master WHERE type='table' AND name NOT LIKE 'sqlite_%'"
    ),
}


async def list_tables(pool: BackendPool) -> List[str]:
    """
    Return the table names visible through ``pool``.

    A row whose first column is not a string contributes ``""``.
    """
    fetched = await pool.fetch_all(TABLES_QUERIES[pool.kind])
    names: List[str] = []
    for cursor in fetched.cursors():
        try:
            names.append(cursor.try_decode_at(0, ValueKind.STRING))
        except DecodeError:
            names.append("")
    return names


__all__ = ["TABLES_QUERIES", "list_tables"]
