"""
Error kinds raised by the querydesk core.

Every error carries a human-readable message; ``str(exc)`` is exactly the
payload that crosses the command boundary, so callers never need to inspect
the exception type to show something useful to the operator.
"""

from __future__ import annotations


class QueryDeskError(Exception):
    """Base class for every error the core surfaces to its callers."""


class UnsupportedBackendError(QueryDeskError):
    """The connection string did not classify as a supported backend."""

    def __init__(self, message: str = "Unsupported database type") -> None:
        super().__init__(message)


class FactoryError(QueryDeskError):
    """Pool construction failed (network, auth, filesystem or URL parsing)."""


class NotFoundError(QueryDeskError):
    """The handle is not present in the registry."""

    def __init__(self, message: str = "Connection not found") -> None:
        super().__init__(message)


class ExecError(QueryDeskError):
    """The backend rejected the SQL or the transport failed mid-query."""


__all__ = [
    "QueryDeskError",
    "UnsupportedBackendError",
    "FactoryError",
    "NotFoundError",
    "ExecError",
]
