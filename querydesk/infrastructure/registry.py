"""
Process-wide registry of live connection pools.

The registry maps opaque handles to pools. A single ``threading.Lock`` guards
the mapping and is held only for dictionary reads and writes: pools are built
before ``insert`` and closed after ``remove``, never under the lock. Callers
get the pool object itself back from ``lookup``, so a lookup stays usable even
if another task removes the handle a moment later.
"""

from __future__ import annotations

import itertools
import threading
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Dict, Iterator, List, Optional

from querydesk.backends.abstract import BackendPool
from querydesk.domain.classifier import redact_conn_string
from querydesk.domain.models import ConnectionInfo
from querydesk.utils.logging import get_logger

log = get_logger(__name__)


@dataclass(frozen=True)
class RegistryEntry:
    pool: BackendPool
    info: ConnectionInfo


class ConnectionRegistry:
    """
    Thread-safe handle -> pool mapping.

    Handles look like ``conn_<epoch-millis>_<sequence>``; the sequence is
    per-registry and strictly increasing, so handles minted in the same
    millisecond still differ and are never reused.
    """

    def __init__(self) -> None:
        self._entries: Dict[str, RegistryEntry] = {}
        self._lock = threading.Lock()
        self._sequence = itertools.count(1)

    def mint_handle(self) -> str:
        """Return a fresh handle that has never been issued by this registry."""
        millis = time.time_ns() // 1_000_000
        with self._lock:
            seq = next(self._sequence)
        return f"conn_{millis}_{seq}"

    def insert(
        self,
        handle: str,
        pool: BackendPool,
        conn_string: str = "",
        name: Optional[str] = None,
    ) -> ConnectionInfo:
        """
        Register ``pool`` under ``handle``.

        Raises
        ------
        ValueError
            If ``handle`` is already registered.
        """
        info = ConnectionInfo(
            handle=handle,
            kind=pool.kind,
            display_name=pool.kind.display_name,
            name=name,
            conn_string=redact_conn_string(conn_string),
            created_at=datetime.now(timezone.utc),
        )
        with self._lock:
            if handle in self._entries:
                raise ValueError(f"Handle '{handle}' is already registered")
            self._entries[handle] = RegistryEntry(pool=pool, info=info)
            size = len(self._entries)
        log.debug(
            "Connection registered",
            extra={"handle": handle, "backend": pool.kind.value, "registry_size": size},
        )
        return info

    def lookup(self, handle: str) -> Optional[BackendPool]:
        with self._lock:
            entry = self._entries.get(handle)
        return entry.pool if entry is not None else None

    def remove(self, handle: str) -> Optional[BackendPool]:
        """Unregister ``handle`` and hand its pool back for closing."""
        with self._lock:
            entry = self._entries.pop(handle, None)
        if entry is None:
            return None
        log.debug("Connection unregistered", extra={"handle": handle})
        return entry.pool

    def entries(self) -> List[ConnectionInfo]:
        """Snapshot of every live connection, oldest first."""
        with self._lock:
            return [entry.info for entry in self._entries.values()]

    def drain(self) -> List[BackendPool]:
        """Remove every entry and return the pools that were registered."""
        with self._lock:
            pools = [entry.pool for entry in self._entries.values()]
            self._entries.clear()
        return pools

    async def close_all(self) -> int:
        """
        Empty the registry and close every pool that was in it.

        Returns the number of pools closed.
        """
        pools = self.drain()
        for pool in pools:
            await pool.close()
        if pools:
            log.info("Registry closed", extra={"pools_closed": len(pools)})
        return len(pools)

    def __contains__(self, handle: object) -> bool:
        with self._lock:
            return handle in self._entries

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __iter__(self) -> Iterator[str]:
        with self._lock:
            return iter(list(self._entries))


__all__ = ["ConnectionRegistry", "RegistryEntry"]
