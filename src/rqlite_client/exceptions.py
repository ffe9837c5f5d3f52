"""rqlite client exceptions."""


class RqliteError(Exception):
    """Base exception for rqlite-client."""

    pass


class ConfigError(RqliteError):
    """Invalid connection configuration (e.g. an unusable TLS setup)."""

    pass


class RqliteConnectionError(RqliteError):
    """Transport, handshake or send failure.

    The connection is unusable afterwards; reconnect with a new
    ``connect()`` call.
    """

    pass


class AuthError(RqliteError):
    """The node answered 401 Unauthorized."""

    def __init__(self, message: str = "authentication failed (HTTP 401)") -> None:
        super().__init__(message)


class SerializationError(RqliteError):
    """JSON encode/decode failure."""

    pass


class UnknownColumnTypeError(SerializationError):
    """A declared column type tag is not one of the SQLite storage classes."""

    def __init__(self, tag: str) -> None:
        self.tag = tag
        super().__init__(f"Unknown sqlite type {tag!r}")


class RowDecodeError(SerializationError):
    """A row value cannot be converted to the requested type."""

    def __init__(self, index: int, target: object, reason: str) -> None:
        self.index = index
        self.target = target
        name = getattr(target, "__name__", repr(target))
        super().__init__(f"Row element {index} cannot be read as {name}: {reason}")


class SQLError(RqliteError):
    """The response had an unexpected shape or the node rejected the statement."""

    pass


class RowIndexError(RqliteError, IndexError):
    """Row element index out of range."""

    def __init__(self, index: int) -> None:
        self.index = index
        super().__init__(f"Row element with id {index} doesn't exist")
