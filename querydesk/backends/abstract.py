"""
Pool interface and fetched-result contract shared by the backend arms.

Each backend (Postgres, MySQL, SQLite) provides one concrete pool class tagged
with its ``BackendKind``. The arms differ only in the driver they wrap; all of
them return a ``FetchedRows`` so that row normalization is written once.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, List, Optional, Protocol, Sequence, runtime_checkable

from querydesk.domain.models import BackendKind
from querydesk.normalizer import BufferedRow

# Pool policy shared by every backend.
MAX_CONNECTIONS = 5
# Acquisition timeout for networked backends (seconds).
NETWORK_ACQUIRE_TIMEOUT = 5.0
# SQLite keeps its pool's own default.
SQLITE_ACQUIRE_TIMEOUT = 30.0


@dataclass(frozen=True)
class FetchedRows:
    """
    A fully materialized result set.

    ``columns`` is empty for statements that return no result set (DDL, DML).
    """

    columns: List[str] = field(default_factory=list)
    rows: List[Sequence[Any]] = field(default_factory=list)

    @classmethod
    def from_description(cls, description: Any, rows: Sequence[Sequence[Any]]) -> "FetchedRows":
        """Build from a DB-API ``cursor.description`` (name is the first item)."""
        if not description:
            return cls()
        return cls(columns=[col[0] for col in description], rows=list(rows))

    def cursors(self) -> List[BufferedRow]:
        return [BufferedRow(self.columns, row) for row in self.rows]

    def __len__(self) -> int:
        return len(self.rows)


@runtime_checkable
class BackendPool(Protocol):
    """
    Common interface of the three pool arms.

    Attributes
    ----------
    kind : BackendKind
        Tag naming the backend this pool talks to.
    max_connections : int
        Upper bound on physical connections.
    acquire_timeout : float | None
        Seconds to wait for a free connection before failing.
    """

    kind: BackendKind
    max_connections: int
    acquire_timeout: Optional[float]

    async def fetch_all(self, sql: str) -> FetchedRows:
        """
        Run ``sql`` verbatim on a pooled connection and fetch every row.

        Raises
        ------
        ExecError
            If the backend rejects the statement, the transport fails, or no
            connection becomes free within the acquire timeout.
        """
        ...

    async def close(self) -> None:
        """Close the pool, letting connections that are in use drain first."""
        ...


__all__ = [
    "BackendPool",
    "FetchedRows",
    "MAX_CONNECTIONS",
    "NETWORK_ACQUIRE_TIMEOUT",
    "SQLITE_ACQUIRE_TIMEOUT",
]
