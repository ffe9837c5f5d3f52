"""Result rows with typed, on-demand element access."""

import base64
import binascii
from collections.abc import Iterator
from dataclasses import dataclass, field
from functools import lru_cache
from typing import Any

from pydantic import TypeAdapter, ValidationError

from rqlite_client.exceptions import RowDecodeError, RowIndexError
from rqlite_client.types import ColumnType


@lru_cache(maxsize=128)
def _adapter(target: Any) -> TypeAdapter:
    return TypeAdapter(target)


def _decode_blob(index: int, value: Any) -> bytes:
    """Blobs travel as base64 text, or as an array of byte values."""
    if isinstance(value, str):
        try:
            return base64.b64decode(value, validate=True)
        except binascii.Error as e:
            raise RowDecodeError(index, bytes, f"invalid base64: {e}") from e
    if isinstance(value, list) and all(
        isinstance(b, int) and not isinstance(b, bool) and 0 <= b <= 255 for b in value
    ):
        return bytes(value)
    raise RowDecodeError(index, bytes, f"unexpected JSON value of type {type(value).__name__}")


def decode_value(index: int, value: Any, target: Any) -> Any:
    """Strictly convert one JSON value to ``target``.

    Integers are accepted where floats are requested; nothing else is
    coerced (a bool is not an int, a numeric string is not a number).
    """
    if target is bytes:
        return _decode_blob(index, value)
    try:
        return _adapter(target).validate_python(value, strict=True)
    except ValidationError as e:
        reason = e.errors()[0]["msg"] if e.errors() else str(e)
        raise RowDecodeError(index, target, reason) from e


@dataclass(frozen=True)
class Row:
    """One result row, positionally aligned with the statement's columns.

    Example:
        for row in cursor:
            user_id = row.get(0, int)
            name = row.get(1)  # decoded using the declared column type
    """

    _values: tuple[Any, ...]
    _columns: tuple[str, ...] = field(default=(), repr=False)
    _types: tuple[ColumnType, ...] = field(default=(), repr=False)

    def get(self, index: int, as_type: Any = None) -> Any:
        """Get the element at ``index``.

        Args:
            index: Position of the element in the row
            as_type: Requested Python type (``int``, ``float``, ``str``,
                ``bytes``, ``bool``, ``int | None``, ...). When omitted, the
                declared column type picks it; NULL values stay ``None``.

        Raises:
            RowIndexError: If index is out of range
            RowDecodeError: If the value cannot be read as the requested type
        """
        if not 0 <= index < len(self._values):
            raise RowIndexError(index)

        value = self._values[index]
        target = as_type
        if target is None:
            if value is None or index >= len(self._types):
                return value
            target = self._types[index].python_type
            if target is None:
                return value
        return decode_value(index, value, target)

    def __getitem__(self, index: int) -> Any:
        """Raw JSON value at ``index``."""
        if not -len(self._values) <= index < len(self._values):
            raise RowIndexError(index)
        return self._values[index]

    def __len__(self) -> int:
        return len(self._values)

    def __iter__(self) -> Iterator[Any]:
        return iter(self._values)

    def keys(self) -> list[str]:
        """Return column names."""
        return list(self._columns)

    def values(self) -> list[Any]:
        """Return raw column values."""
        return list(self._values)

    def to_dict(self) -> dict[str, Any]:
        """Map column names to values decoded by their declared types."""
        return {name: self.get(i) for i, name in enumerate(self._columns)}
