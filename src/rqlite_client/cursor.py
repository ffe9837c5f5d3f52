"""Cursor over the result of one statement."""

from collections.abc import Iterator, Sequence
from typing import TYPE_CHECKING, Any

from pydantic import ValidationError

from rqlite_client.exceptions import SQLError
from rqlite_client.observability import get_logger
from rqlite_client.params import to_value
from rqlite_client.protocol import (
    EXECUTE_PATH,
    QUERY_PATH,
    StatementResponse,
    StatementResult,
    is_read_statement,
    statement_body,
)
from rqlite_client.row import Row
from rqlite_client.types import ColumnType, parse_types

if TYPE_CHECKING:
    from rqlite_client.connection import Connection

logger = get_logger(__name__)

DESERIALIZE_ERROR = "error deserializing response body"


class Cursor:
    """Holds the columns, types and rows of the last executed statement.

    The whole result is buffered, so iterating a cursor more than once
    yields the same rows again.

    Example:
        cursor = conn.cursor()
        await cursor.execute("SELECT id, name FROM foo WHERE id > ?", [10])
        for row in cursor:
            print(row.get(0, int), row.get(1, str))
    """

    def __init__(self, connection: "Connection") -> None:
        self.connection = connection
        self._reset()

    def _reset(self) -> None:
        self.columns: list[str] = []
        self.types: list[ColumnType] = []
        self.rows: list[Row] = []
        self.rows_affected: int = 0
        self.last_insert_id: int | None = None
        self.time: float | None = None
        self._position = 0

    def _path_for(self, statement: str) -> str:
        if not is_read_statement(statement):
            return EXECUTE_PATH
        consistency = self.connection.settings.consistency
        if consistency:
            return f"{QUERY_PATH}?level={consistency}"
        return QUERY_PATH

    async def execute(self, statement: str, params: Sequence[Any] | None = None) -> "Cursor":
        """Run a parameterized statement and buffer its result.

        Args:
            statement: SQL text using ``?`` placeholders
            params: Positional parameter values

        Returns:
            This cursor, for chaining

        Raises:
            SerializationError: If a parameter or the response cannot be (de)serialized
            SQLError: If the node rejects the statement or the response has an unexpected shape
            AuthError: If the node answers 401
            RqliteConnectionError: If the request cannot be sent
        """
        self._reset()
        values = [to_value(p) for p in params or ()]
        path = self._path_for(statement)

        response = await self.connection.request("POST", path, statement_body(statement, values))
        body = await self.connection.read_body(response)
        if response.status_code != 200:
            text = body.decode("utf-8", "replace").strip()
            raise SQLError(f"Node returned HTTP {response.status_code}: {text}")

        payload = self.connection.decode(body)
        if not isinstance(payload, dict):
            raise SQLError(f"{DESERIALIZE_ERROR}: expected a JSON object")
        try:
            parsed = StatementResponse.model_validate(payload)
        except ValidationError as e:
            raise SQLError(f"{DESERIALIZE_ERROR}: {e}") from e

        if parsed.error:
            raise SQLError(parsed.error)
        self._load(parsed.results[0] if parsed.results else StatementResult())
        self.time = parsed.time

        logger.debug(
            "Statement executed",
            context={
                "path": path,
                "rows": len(self.rows),
                "rows_affected": self.rows_affected,
            },
        )
        return self

    def _load(self, result: StatementResult) -> None:
        if result.error:
            raise SQLError(result.error)

        self.columns = list(result.columns or [])
        self.types = parse_types(result.types)
        columns = tuple(self.columns)
        types = tuple(self.types)
        self.rows = [Row(tuple(values), columns, types) for values in result.values or []]
        self.rows_affected = result.rows_affected
        self.last_insert_id = result.last_insert_id

    def fetchone(self) -> Row | None:
        """Return the next row, or None when exhausted."""
        if self._position >= len(self.rows):
            return None
        row = self.rows[self._position]
        self._position += 1
        return row

    def fetchall(self) -> list[Row]:
        """Return all remaining rows."""
        rows = self.rows[self._position:]
        self._position = len(self.rows)
        return rows

    def __iter__(self) -> Iterator[Row]:
        return iter(self.rows)

    def __len__(self) -> int:
        return len(self.rows)
