"""
Domain models for querydesk.

Defines the backend tag, the backend-neutral value model returned to callers,
and the read-only summary of a live registry entry. These types are shared by
the pools, the registry, the operations and the command boundary.
"""
from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Dict, Optional, Union

from pydantic import BaseModel, Field


class BackendKind(str, Enum):
    """Backend tag produced by the classifier. UNKNOWN is never stored."""

    POSTGRES = "postgres"
    MYSQL = "mysql"
    SQLITE = "sqlite"
    UNKNOWN = "unknown"

    @property
    def display_name(self) -> str:
        return _DISPLAY_NAMES[self]


_DISPLAY_NAMES = {
    BackendKind.POSTGRES: "PostgreSQL",
    BackendKind.MYSQL: "MySQL",
    BackendKind.SQLITE: "SQLite",
    BackendKind.UNKNOWN: "Database",
}

# Null, Boolean, Integer (64-bit), Number (finite double), String.
Value = Union[None, bool, int, float, str]

# Column name -> value, in the column order reported by the backend.
Row = Dict[str, Value]


class ConnectionInfo(BaseModel):
    """
    Summary of one live connection held by the registry.
    """

    handle: str = Field(..., description="Opaque registry handle.")
    kind: BackendKind = Field(..., description="Backend the pool talks to.")
    display_name: str = Field(..., description="Human name of the backend.")
    name: Optional[str] = Field(None, description="Optional label supplied at connect time.")
    conn_string: str = Field(..., description="Connection string with credentials redacted.")
    created_at: datetime = Field(..., description="When the pool was registered (UTC).")

    model_config = {
        "frozen": True,
        "populate_by_name": True,
    }


__all__ = ["BackendKind", "ConnectionInfo", "Row", "Value"]
