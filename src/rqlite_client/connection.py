"""Connection to a single rqlite node.

A Connection owns one HTTP/1.1 channel. Requests on it are serialized;
callers that need concurrency should open one Connection per task.
Once a transport error has been seen the connection is marked broken and
every later request fails fast with RqliteConnectionError. There is no
automatic reconnect.
"""

import asyncio
import base64
import json
from collections.abc import Sequence
from enum import Enum
from typing import Any

import httpx
from pydantic import TypeAdapter, ValidationError

from rqlite_client import cluster
from rqlite_client.config import ConnectOptions
from rqlite_client.cursor import Cursor
from rqlite_client.exceptions import AuthError, RqliteConnectionError, SerializationError
from rqlite_client.observability import (
    RequestContext,
    Timer,
    emit_counter,
    emit_timer,
    get_logger,
)
from rqlite_client.transport import build_transport

logger = get_logger(__name__)


class ConnectionState(str, Enum):
    """Lifecycle of a Connection."""

    DISCONNECTED = "disconnected"
    CONNECTING = "connecting"
    CONNECTED = "connected"
    FAILED = "failed"


class Connection:
    """A live channel to one rqlite node.

    Use ``connect()`` (or ``ConnectOptions.connect()``) to create one.

    Example:
        async with await connect(ConnectOptions(host="127.0.0.1")) as conn:
            cursor = await conn.execute(
                "INSERT INTO foo(name) VALUES (?)", ["fiona"]
            )
            assert cursor.rows_affected == 1
    """

    def __init__(self, client: httpx.AsyncClient, settings: ConnectOptions) -> None:
        """Wrap an opened client. Prefer ``connect()``.

        Args:
            client: HTTP client bound to the node's base URL
            settings: Snapshot of the options used to connect
        """
        self.settings = settings
        self.state = ConnectionState.CONNECTING
        self._client = client
        self._lock = asyncio.Lock()

    @property
    def node(self) -> str:
        """``host:port`` of the remote node."""
        return self.settings.host_header

    @property
    def is_connected(self) -> bool:
        """True once the handshake succeeded and until the connection fails or closes."""
        return self.state is ConnectionState.CONNECTED

    def base_headers(self) -> dict[str, str]:
        """Headers sent with every request."""
        return {
            "Host": self.settings.host_header,
            "Content-Type": "application/json",
        }

    def auth_headers(self) -> dict[str, str]:
        """Basic auth header, only when both user and password are set."""
        if not self.settings.has_credentials:
            return {}
        credentials = f"{self.settings.user}:{self.settings.password}"
        token = base64.b64encode(credentials.encode()).decode("ascii")
        return {"Authorization": f"Basic {token}"}

    @staticmethod
    def check_auth(status_code: int) -> None:
        """Raise AuthError for 401; any other status is left to the caller."""
        if status_code == 401:
            emit_counter("rqlite.auth.rejected")
            raise AuthError()

    def _ensure_usable(self) -> None:
        if self.state is ConnectionState.FAILED:
            raise RqliteConnectionError(
                f"Connection to {self.node} is broken; open a new connection"
            )
        if self.state is ConnectionState.DISCONNECTED:
            raise RqliteConnectionError(f"Connection to {self.node} is closed")

    async def _send(self, request: httpx.Request) -> httpx.Response:
        """Send one request, marking the connection broken on transport errors."""
        path = request.url.raw_path.decode("ascii", "replace")
        async with RequestContext(node=self.node):
            with Timer() as timer:
                try:
                    response = await self._client.send(request)
                except httpx.RequestError as e:
                    self.state = ConnectionState.FAILED
                    emit_counter("rqlite.request.failed", {"method": request.method})
                    logger.warning(
                        "Request failed, connection marked broken",
                        context={"method": request.method, "path": path},
                        error=e,
                    )
                    raise RqliteConnectionError(
                        f"{request.method} {path} to {self.node} failed: {e}"
                    ) from e

            logger.debug(
                "Response received",
                context={
                    "method": request.method,
                    "path": path,
                    "status": response.status_code,
                },
                duration_ms=timer.duration_ms,
            )
            emit_timer(
                "rqlite.request.duration_ms",
                timer.duration_ms,
                {"method": request.method, "status": response.status_code},
            )
        return response

    async def handshake(self) -> None:
        """Perform one round trip to prove the channel works.

        Any HTTP status counts as success; only transport failures do not.
        """
        headers = {**self.base_headers(), **self.auth_headers()}
        request = self._client.build_request("HEAD", "/", headers=headers)
        await self._send(request)
        self.state = ConnectionState.CONNECTED
        logger.info("Connected", context={"node": self.node})

    async def request(
        self,
        method: str,
        path: str,
        body: Any = None,
    ) -> httpx.Response:
        """Send a request and return the response with its body buffered.

        Args:
            method: HTTP method
            path: Path (and query string) on the node
            body: JSON-serializable request body, if any

        Returns:
            The response. Statuses other than 401 are not interpreted.

        Raises:
            SerializationError: If the body cannot be encoded as JSON
            RqliteConnectionError: If the connection is unusable or sending fails
            AuthError: If the node answers 401
        """
        content: bytes | None = None
        if body is not None:
            try:
                content = json.dumps(body, allow_nan=False).encode()
            except (TypeError, ValueError) as e:
                raise SerializationError(f"Cannot encode request body: {e}") from e

        headers = {**self.base_headers(), **self.auth_headers()}
        async with self._lock:
            self._ensure_usable()
            request = self._client.build_request(method, path, content=content, headers=headers)
            response = await self._send(request)

        self.check_auth(response.status_code)
        return response

    async def read_body(self, response: httpx.Response) -> bytes:
        """Return the full response body."""
        try:
            return await response.aread()
        except httpx.RequestError as e:
            self.state = ConnectionState.FAILED
            raise RqliteConnectionError(f"Failed reading response body: {e}") from e

    @staticmethod
    def decode(body: bytes, model: Any = None) -> Any:
        """Decode a JSON body.

        Args:
            body: Raw response body
            model: Optional target type; without it a plain JSON value is returned

        Raises:
            SerializationError: If the body is not valid JSON or does not fit ``model``
        """
        if model is None:
            try:
                return json.loads(body)
            except ValueError as e:
                raise SerializationError(f"Invalid JSON in response body: {e}") from e
        try:
            return TypeAdapter(model).validate_json(body)
        except ValidationError as e:
            raise SerializationError(str(e)) from e

    def cursor(self) -> Cursor:
        """Get a cursor for running statements on this connection."""
        return Cursor(self)

    async def execute(self, statement: str, params: Sequence[Any] | None = None) -> Cursor:
        """Run one parameterized statement.

        Example:
            cursor = await conn.execute("SELECT * FROM foo WHERE id = ?", [1])
            for row in cursor:
                print(row.get(0, int))
        """
        cursor = self.cursor()
        await cursor.execute(statement, params)
        return cursor

    async def nodes(self, show_nonvoters: bool = False) -> list[cluster.Node]:
        """List the nodes of the cluster."""
        return await cluster.nodes(self, show_nonvoters)

    async def ready(self) -> bool:
        """Check whether the node is ready to serve requests."""
        return await cluster.ready(self)

    async def remove(self, node_id: str) -> bool:
        """Remove a node from the cluster."""
        return await cluster.remove(self, node_id)

    async def close(self) -> None:
        """Close the channel. Further requests raise RqliteConnectionError."""
        if self.state is ConnectionState.DISCONNECTED:
            return
        await self._client.aclose()
        self.state = ConnectionState.DISCONNECTED
        logger.info("Disconnected", context={"node": self.node})

    async def __aenter__(self) -> "Connection":
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.close()


async def connect(
    options: ConnectOptions,
    transport: httpx.AsyncBaseTransport | None = None,
) -> Connection:
    """Open a connection to the node described by ``options``.

    Args:
        options: Connection settings
        transport: Transport override (e.g. ``httpx.MockTransport``); by
            default a plain or TLS transport is built from ``options``

    Raises:
        ConfigError: If the TLS context cannot be built
        RqliteConnectionError: If the node cannot be reached
    """
    settings = options.model_copy()
    if transport is None:
        transport = build_transport(settings)

    client = httpx.AsyncClient(
        base_url=settings.base_url,
        transport=transport,
        timeout=httpx.Timeout(settings.timeout),
    )
    connection = Connection(client, settings)
    try:
        await connection.handshake()
    except BaseException:
        await client.aclose()
        raise
    return connection
