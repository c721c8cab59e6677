"""
Query dispatch: run SQL on a pool and normalize the result set.
"""

from __future__ import annotations

from typing import List

from querydesk.backends.abstract import BackendPool
from querydesk.domain.models import Row
from querydesk.normalizer import normalize_rows
from querydesk.utils.logging import get_logger

log = get_logger(__name__)


async def run_query(pool: BackendPool, sql: str) -> List[Row]:
    """
    Submit ``sql`` verbatim, fetch every row and convert it to the value model.

    The same normalization applies to every backend; only the pool's
    ``fetch_all`` differs.
    """
    fetched = await pool.fetch_all(sql)
    rows = normalize_rows(fetched.cursors())
    log.debug(
        "Query executed",
        extra={"backend": pool.kind.value, "rows": len(rows), "columns": len(fetched.columns)},
    )
    return rows


__all__ = ["run_query"]
