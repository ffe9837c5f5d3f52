"""SQLite storage classes as declared in rqlite responses."""

from collections.abc import Iterable
from enum import Enum
from typing import Any

from rqlite_client.exceptions import UnknownColumnTypeError


class ColumnType(Enum):
    """The five SQLite storage classes."""

    NULL = ""
    INTEGER = "integer"
    REAL = "real"
    TEXT = "text"
    BLOB = "blob"

    @property
    def python_type(self) -> Any:
        """Python type a value of this column decodes to by default.

        ``None`` means the raw JSON value is returned unchanged.
        """
        return _PYTHON_TYPES[self]


_PYTHON_TYPES: dict[ColumnType, Any] = {
    ColumnType.NULL: None,
    ColumnType.INTEGER: int,
    ColumnType.REAL: float,
    ColumnType.TEXT: str,
    ColumnType.BLOB: bytes,
}


def parse_column_type(tag: str) -> ColumnType:
    """Map a lowercase type tag to its ColumnType.

    Unknown tags are rejected rather than guessed at, so a change in the
    wire format shows up as an error instead of misread values.
    """
    try:
        return ColumnType(tag)
    except ValueError:
        raise UnknownColumnTypeError(tag) from None


def parse_types(tags: Iterable[str] | None) -> list[ColumnType]:
    """Parse the ``types`` array of a result. ``None`` yields an empty list."""
    if tags is None:
        return []
    return [parse_column_type(tag) for tag in tags]
