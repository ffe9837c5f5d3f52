"""rqlite-client - An asynchronous client for rqlite.

There is no transaction support; each call is one HTTP exchange.

Example:
    options = ConnectOptions(host="my.node.local", scheme=Scheme.HTTPS,
                             user="root", password="root")
    async with await connect(options) as conn:
        cursor = await conn.execute("SELECT * FROM foo WHERE id = ?", params(1))
"""

from rqlite_client.cluster import Node
from rqlite_client.config import ConnectOptions, Scheme
from rqlite_client.connection import Connection, ConnectionState, connect
from rqlite_client.cursor import Cursor
from rqlite_client.exceptions import (
    AuthError,
    ConfigError,
    RowDecodeError,
    RowIndexError,
    RqliteConnectionError,
    RqliteError,
    SerializationError,
    SQLError,
    UnknownColumnTypeError,
)
from rqlite_client.observability import (
    LogLevel,
    configure_logging,
    get_logger,
    register_metric_callback,
)
from rqlite_client.params import params, to_value
from rqlite_client.row import Row
from rqlite_client.types import ColumnType

__version__ = "0.1.0"
__all__ = [
    # Connection
    "ConnectOptions",
    "Connection",
    "ConnectionState",
    "Scheme",
    "connect",
    # Statements
    "ColumnType",
    "Cursor",
    "Row",
    "params",
    "to_value",
    # Cluster
    "Node",
    # Errors
    "AuthError",
    "ConfigError",
    "RowDecodeError",
    "RowIndexError",
    "RqliteConnectionError",
    "RqliteError",
    "SerializationError",
    "SQLError",
    "UnknownColumnTypeError",
    # Observability
    "LogLevel",
    "configure_logging",
    "get_logger",
    "register_metric_callback",
]
