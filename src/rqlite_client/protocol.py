"""Request bodies and response shapes of the rqlite HTTP API."""

import re
from collections.abc import Iterator, Sequence
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

EXECUTE_PATH = "/db/execute"
QUERY_PATH = "/db/query"
NODES_PATH = "/nodes"
READY_PATH = "/readyz"
REMOVE_PATH = "/remove"

# Statements whose results are rows rather than affected counts
READ_COMMANDS = frozenset({"SELECT", "EXPLAIN", "PRAGMA", "VALUES"})

# Keywords that can follow the common table expressions of a WITH clause
CTE_BODY_COMMANDS = frozenset({"SELECT", "VALUES", "INSERT", "REPLACE", "UPDATE", "DELETE"})

_SQL_TOKEN = re.compile(
    r"""
      (?P<skip>\s+ | --[^\n]* | /\*.*?(?:\*/|\Z))
    | (?P<quoted>'(?:[^']|'')*'? | "(?:[^"]|"")*"? | `[^`]*`? | \[[^\]]*\]?)
    | (?P<open>\()
    | (?P<close>\))
    | (?P<word>\w+)
    | .
    """,
    re.VERBOSE | re.DOTALL,
)


def _keywords(statement: str) -> Iterator[tuple[str, int]]:
    """Yield (uppercased word, paren depth) pairs, ignoring comments and quoted text."""
    depth = 0
    for match in _SQL_TOKEN.finditer(statement):
        kind = match.lastgroup
        if kind == "open":
            depth += 1
        elif kind == "close":
            depth = max(depth - 1, 0)
        elif kind == "word":
            yield match.group().upper(), depth


def statement_command(statement: str) -> str:
    """Leading SQL keyword of a statement, uppercased.

    For ``WITH ...`` the keyword of the statement after the common table
    expressions is returned.
    """
    words = _keywords(statement)
    first = next(words, None)
    if first is None:
        return ""
    command, _ = first
    if command != "WITH":
        return command
    for word, depth in words:
        if depth == 0 and word in CTE_BODY_COMMANDS:
            return word
    return command


def is_read_statement(statement: str) -> bool:
    """True if the statement should go to the query endpoint."""
    return statement_command(statement) in READ_COMMANDS


def statement_body(statement: str, params: Sequence[Any]) -> list[list[Any]]:
    """Body for a single parameterized statement: ``[[sql, p1, p2, ...]]``."""
    return [[statement, *params]]


class StatementResult(BaseModel):
    """One entry of the ``results`` array."""

    model_config = ConfigDict(extra="ignore")

    columns: list[str] | None = None
    types: list[str] | None = None
    values: list[list[Any]] | None = None
    rows_affected: int = 0
    last_insert_id: int | None = None
    time: float | None = None
    error: str | None = None


class StatementResponse(BaseModel):
    """Top-level body returned by the execute and query endpoints."""

    model_config = ConfigDict(extra="ignore")

    results: list[StatementResult] = Field(default_factory=list)
    time: float | None = None
    error: str | None = None
