"""
querydesk - database-access core of a desktop SQL client.

Accepts connection strings for PostgreSQL, MySQL or SQLite, keeps a registry
of live connection pools keyed by opaque handles, runs ad-hoc SQL against a
handle and returns rows in a backend-neutral value model:

- Connection-string classification
- Pooled-connection lifecycle
- Uniform query execution with row normalization
- Per-backend table listing
"""

from __future__ import annotations

__version__ = "0.1.0"
__license__ = "MIT"

# Public API exports
from querydesk.commands import CommandRouter
from querydesk.config import Settings, get_settings
from querydesk.domain import BackendKind, ConnectionInfo, Row, Value, detect_kind
from querydesk.errors import (
    ExecError,
    FactoryError,
    NotFoundError,
    QueryDeskError,
    UnsupportedBackendError,
)
from querydesk.infrastructure import ConnectionRegistry
from querydesk.operations import connect, disconnect, execute, get_tables, list_connections
from querydesk.utils.logging import configure_logging, get_logger

__all__ = [
    # Version info
    "__version__",
    "__license__",
    # Configuration
    "Settings",
    "get_settings",
    # Domain
    "BackendKind",
    "ConnectionInfo",
    "Row",
    "Value",
    "detect_kind",
    # Core operations
    "ConnectionRegistry",
    "connect",
    "disconnect",
    "execute",
    "get_tables",
    "list_connections",
    # Command boundary
    "CommandRouter",
    # Errors
    "QueryDeskError",
    "UnsupportedBackendError",
    "FactoryError",
    "NotFoundError",
    "ExecError",
    # Logging
    "configure_logging",
    "get_logger",
]
