"""Pytest configuration and fixtures."""

import json
from typing import Any

import httpx
import pytest

from rqlite_client import ConnectOptions, connect


class MockNode:
    """Fake rqlite node served through httpx.MockTransport.

    Routes are keyed on (method, raw path including query string).
    Unrouted HEAD requests answer 200 so the connect handshake succeeds;
    anything else unrouted answers 404.
    """

    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []
        self.routes: dict[tuple[str, str], dict[str, Any]] = {}
        self.fail_with: Exception | None = None

    def route(
        self,
        method: str,
        path: str,
        status: int = 200,
        json: Any = None,
        content: bytes | str | None = None,
    ) -> None:
        if json is not None:
            self.routes[(method, path)] = {"status_code": status, "json": json}
        else:
            self.routes[(method, path)] = {"status_code": status, "content": content or b""}

    def handler(self, request: httpx.Request) -> httpx.Response:
        if self.fail_with is not None:
            raise self.fail_with
        self.requests.append(request)
        key = (request.method, request.url.raw_path.decode())
        if key in self.routes:
            return httpx.Response(**self.routes[key])
        return httpx.Response(200 if request.method == "HEAD" else 404)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)

    @property
    def last_request(self) -> httpx.Request:
        return self.requests[-1]

    def last_json(self) -> Any:
        return json.loads(self.last_request.content)


@pytest.fixture
def mock_node() -> MockNode:
    """A fake node with no routes."""
    return MockNode()


@pytest.fixture
def options() -> ConnectOptions:
    """Plain HTTP options without credentials."""
    return ConnectOptions(host="127.0.0.1", port=4001)


@pytest.fixture
async def conn(mock_node: MockNode, options: ConnectOptions):
    """A connection to the fake node."""
    connection = await connect(options, transport=mock_node.transport)
    yield connection
    await connection.close()
