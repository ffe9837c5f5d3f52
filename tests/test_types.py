"""Tests for column type parsing."""

import pytest

from rqlite_client import ColumnType, SerializationError, UnknownColumnTypeError
from rqlite_client.types import parse_column_type, parse_types


class TestParseColumnType:
    """Tests for parse_column_type."""

    @pytest.mark.parametrize(
        ("tag", "expected"),
        [
            ("", ColumnType.NULL),
            ("integer", ColumnType.INTEGER),
            ("real", ColumnType.REAL),
            ("text", ColumnType.TEXT),
            ("blob", ColumnType.BLOB),
        ],
    )
    def test_known_tags(self, tag: str, expected: ColumnType) -> None:
        """Each storage class tag maps to one ColumnType."""
        assert parse_column_type(tag) is expected

    @pytest.mark.parametrize("tag", ["INTEGER", "numeric", "datetime", "varchar", " "])
    def test_unknown_tag(self, tag: str) -> None:
        """Anything else fails and names the tag."""
        with pytest.raises(UnknownColumnTypeError) as exc_info:
            parse_column_type(tag)

        assert exc_info.value.tag == tag
        assert repr(tag) in str(exc_info.value)

    def test_unknown_tag_is_serialization_error(self) -> None:
        """Unknown tags are decode errors."""
        with pytest.raises(SerializationError):
            parse_column_type("bool")


class TestParseTypes:
    """Tests for parse_types."""

    def test_parses_in_order(self) -> None:
        """The result is parallel to the input."""
        assert parse_types(["integer", "", "text"]) == [
            ColumnType.INTEGER,
            ColumnType.NULL,
            ColumnType.TEXT,
        ]

    def test_missing_types(self) -> None:
        """A missing types array yields no types."""
        assert parse_types(None) == []

    def test_fails_on_first_unknown(self) -> None:
        """One bad tag fails the whole array."""
        with pytest.raises(UnknownColumnTypeError, match="float"):
            parse_types(["integer", "float"])


class TestPythonType:
    """Tests for the default decode targets."""

    def test_python_types(self) -> None:
        """Each storage class has a default Python type."""
        assert ColumnType.INTEGER.python_type is int
        assert ColumnType.REAL.python_type is float
        assert ColumnType.TEXT.python_type is str
        assert ColumnType.BLOB.python_type is bytes
        assert ColumnType.NULL.python_type is None
