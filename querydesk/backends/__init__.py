"""
Backends package for querydesk.

Re-exports the pool interface and the three concrete pool arms so downstream
code can import from `querydesk.backends` directly.
"""

from querydesk.backends.abstract import (
    MAX_CONNECTIONS,
    NETWORK_ACQUIRE_TIMEOUT,
    SQLITE_ACQUIRE_TIMEOUT,
    BackendPool,
    FetchedRows,
)
from querydesk.backends.mysql import MySQLPool
from querydesk.backends.postgres import PostgresPool
from querydesk.backends.sqlite import SQLitePool

__all__ = [
    # Interface
    "BackendPool",
    "FetchedRows",
    "MAX_CONNECTIONS",
    "NETWORK_ACQUIRE_TIMEOUT",
    "SQLITE_ACQUIRE_TIMEOUT",
    # Pool arms
    "MySQLPool",
    "PostgresPool",
    "SQLitePool",
]
