"""
Row normalization: backend values to the JSON-like value model.

Each backend arm hands back its rows as ``RowCursor`` objects. The normalizer
probes every cell in a fixed order (Integer, Double, Boolean, String) and keeps
the first successful decode; a cell that decodes as nothing becomes ``None``.
The probe order is part of the contract: UIs rely on a column keeping the same
type across result sets.
"""

from __future__ import annotations

import math
from decimal import Decimal
from enum import Enum
from typing import Any, Callable, Dict, List, Protocol, Sequence, runtime_checkable

from querydesk.domain.models import Row, Value

I64_MIN = -(2**63)
I64_MAX = 2**63 - 1


class ValueKind(str, Enum):
    INTEGER = "integer"
    DOUBLE = "double"
    BOOLEAN = "boolean"
    STRING = "string"


DECODE_ORDER = (ValueKind.INTEGER, ValueKind.DOUBLE, ValueKind.BOOLEAN, ValueKind.STRING)


class DecodeError(Exception):
    """A cell cannot be read as the requested kind."""


@runtime_checkable
class RowCursor(Protocol):
    """
    Capability set the normalizer needs from one fetched row.
    """

    def columns(self) -> Sequence[str]:
        """Column names in backend order."""
        ...

    def try_decode_at(self, index: int, kind: ValueKind) -> Any:
        """
        Read column ``index`` as ``kind``.

        Raises
        ------
        DecodeError
            If the cell is not representable as ``kind``.
        """
        ...


def _decode_integer(raw: Any) -> int:
    # bool is an int subclass; a real boolean column is not integer-typed.
    if isinstance(raw, bool) or not isinstance(raw, int):
        raise DecodeError("not an integer")
    if not I64_MIN <= raw <= I64_MAX:
        raise DecodeError("integer outside the signed 64-bit range")
    return raw


def _decode_double(raw: Any) -> float:
    if isinstance(raw, float):
        return raw
    if isinstance(raw, Decimal):
        try:
            return float(raw)
        except ValueError as exc:  # signalling NaN
            raise DecodeError(str(exc)) from exc
    raise DecodeError("not a double")


def _decode_boolean(raw: Any) -> bool:
    if isinstance(raw, bool):
        return raw
    raise DecodeError("not a boolean")


def _decode_string(raw: Any) -> str:
    if isinstance(raw, str):
        return raw
    raise DecodeError("not a string")


_DECODERS: Dict[ValueKind, Callable[[Any], Any]] = {
    ValueKind.INTEGER: _decode_integer,
    ValueKind.DOUBLE: _decode_double,
    ValueKind.BOOLEAN: _decode_boolean,
    ValueKind.STRING: _decode_string,
}


def decode_raw(raw: Any, kind: ValueKind) -> Any:
    """Decode a single driver value as ``kind`` or raise DecodeError."""
    return _DECODERS[kind](raw)


class BufferedRow:
    """RowCursor over one row that has already been fetched into memory."""

    __slots__ = ("_columns", "_values")

    def __init__(self, columns: Sequence[str], values: Sequence[Any]) -> None:
        self._columns = columns
        self._values = values

    def columns(self) -> Sequence[str]:
        return self._columns

    def try_decode_at(self, index: int, kind: ValueKind) -> Any:
        try:
            raw = self._values[index]
        except IndexError as exc:
            raise DecodeError(f"no column at index {index}") from exc
        return decode_raw(raw, kind)


def decode_cell(cursor: RowCursor, index: int) -> Value:
    """
    Decode one cell using the fixed precedence; non-finite doubles become None.
    """
    for kind in DECODE_ORDER:
        try:
            value = cursor.try_decode_at(index, kind)
        except DecodeError:
            continue
        if kind is ValueKind.DOUBLE and not math.isfinite(value):
            return None
        return value
    return None


def normalize_row(cursor: RowCursor) -> Row:
    """
    Convert a row into an ordered column-name -> value mapping.

    Duplicate column names keep the value of the last occurrence.
    """
    row: Row = {}
    for index, name in enumerate(cursor.columns()):
        row[name] = decode_cell(cursor, index)
    return row


def normalize_rows(cursors: Sequence[RowCursor]) -> List[Row]:
    return [normalize_row(cursor) for cursor in cursors]


__all__ = [
    "BufferedRow",
    "DECODE_ORDER",
    "DecodeError",
    "RowCursor",
    "ValueKind",
    "decode_cell",
    "decode_raw",
    "normalize_row",
    "normalize_rows",
]
