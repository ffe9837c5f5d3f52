"""Conversion of statement parameters to JSON values.

Values are sent as positional parameters next to the SQL text; nothing is
ever quoted into the statement itself, so always use ``?`` placeholders.
"""

import base64
from typing import Any

from pydantic_core import PydanticSerializationError, to_jsonable_python

from rqlite_client.exceptions import SerializationError


def to_value(obj: Any) -> Any:
    """Convert a Python value to its JSON representation.

    Bytes become standard base64 text, which is how blobs come back from
    the node. Dates, UUIDs, decimals, enums and pydantic models use
    pydantic's JSON rules.

    Raises:
        SerializationError: If the value has no JSON representation
    """
    if isinstance(obj, (bytes, bytearray, memoryview)):
        return base64.b64encode(bytes(obj)).decode("ascii")
    try:
        return to_jsonable_python(obj)
    except PydanticSerializationError as e:
        raise SerializationError(f"Cannot encode parameter {obj!r}: {e}") from e


def params(*values: Any) -> list[Any]:
    """Encode positional parameters.

    Example:
        await conn.execute("SELECT * FROM foo WHERE name = ?", params("fiona"))
    """
    return [to_value(v) for v in values]
