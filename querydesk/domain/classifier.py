"""
Connection-string classification.

``detect_kind`` maps a free-form URI or filesystem path to a backend tag
without performing any I/O. Matching is case-insensitive and ordered: the
first rule that matches wins, so ``mysql_on_postgres_host`` still reads as
Postgres. Substring rules also match mistyped schemes.
"""
from __future__ import annotations

import re

from querydesk.domain.models import BackendKind

_POSTGRES_PREFIXES = ("postgres://", "postgresql://")
_SQLITE_PREFIXES = ("sqlite://", "sqlite:", "file:")

_URL_PASSWORD = re.compile(r"(?P<head>://[^:/@\s]*:)(?P<secret>[^@\s]*)(?P<tail>@)")
_KV_PASSWORD = re.compile(r"(?P<head>\bpassword\s*=\s*)(?P<secret>'[^']*'|\S+)", re.IGNORECASE)


def detect_kind(conn_string: str) -> BackendKind:
    """
    Classify a connection string.

    Parameters
    ----------
    conn_string : str
        URI (``postgres://...``, ``mysql://...``, ``sqlite::memory:``) or a path.

    Returns
    -------
    BackendKind
        The matching backend, or ``BackendKind.UNKNOWN``.
    """
    s = conn_string.lower()
    if s.startswith(_POSTGRES_PREFIXES) or "postgres" in s:
        return BackendKind.POSTGRES
    if s.startswith("mysql://") or "mysql" in s:
        return BackendKind.MYSQL
    if s.startswith(_SQLITE_PREFIXES) or ".sqlite" in s or s.endswith(".db"):
        return BackendKind.SQLITE
    return BackendKind.UNKNOWN


def redact_conn_string(conn_string: str) -> str:
    """Replace any password in a URL or ``key=value`` connection string with ``***``."""
    redacted = _URL_PASSWORD.sub(r"\g<head>***\g<tail>", conn_string)
    return _KV_PASSWORD.sub(r"\g<head>***", redacted)


__all__ = ["detect_kind", "redact_conn_string"]
