"""Cluster membership and management calls."""

from collections.abc import Iterable
from typing import TYPE_CHECKING, Any

from pydantic import BaseModel, ConfigDict, ValidationError

from rqlite_client.exceptions import SerializationError, SQLError
from rqlite_client.observability import get_logger
from rqlite_client.protocol import NODES_PATH, READY_PATH, REMOVE_PATH

if TYPE_CHECKING:
    from rqlite_client.connection import Connection

logger = get_logger(__name__)


class NodeInfo(BaseModel):
    """Per-node record as sent by the node listing endpoint."""

    model_config = ConfigDict(extra="ignore")

    addr: str
    reachable: bool
    leader: bool
    # Left out by the server for nodes it cannot contact
    api_addr: str = ""
    time: float = 0.0
    error: str | None = None


class Node(NodeInfo):
    """A cluster member. Built fresh on every listing."""

    model_config = ConfigDict(extra="ignore", frozen=True)

    id: str


def nodes_path(show_nonvoters: bool) -> str:
    return f"{NODES_PATH}?nonvoters" if show_nonvoters else NODES_PATH


def _entries(payload: dict[str, Any]) -> Iterable[tuple[Any, Any]]:
    # Newer servers can answer {"nodes": [{"id": ..., ...}, ...]}
    listed = payload.get("nodes")
    if isinstance(listed, list):
        return [
            (item.get("id") if isinstance(item, dict) else None, item)
            for item in listed
        ]
    return payload.items()


def parse_nodes(payload: Any) -> list[Node]:
    """Turn a node listing body into Node records.

    Raises:
        SQLError: If the body is not a JSON object
        SerializationError: If a node record is malformed
    """
    if not isinstance(payload, dict):
        raise SQLError("Error deserializing json body: expected a JSON object")

    result: list[Node] = []
    for node_id, value in _entries(payload):
        if not isinstance(node_id, str):
            raise SerializationError(f"Node record without a string id: {value!r}")
        try:
            info = NodeInfo.model_validate(value, strict=True)
        except ValidationError as e:
            raise SerializationError(f"Invalid record for node {node_id!r}: {e}") from e
        result.append(Node(id=node_id, **info.model_dump()))
    return result


async def nodes(connection: "Connection", show_nonvoters: bool = False) -> list[Node]:
    """List all nodes in the cluster.

    Args:
        connection: Open connection to any node
        show_nonvoters: Include non-voting (read-only) nodes
    """
    response = await connection.request("GET", nodes_path(show_nonvoters))
    body = await connection.read_body(response)
    return parse_nodes(connection.decode(body))


async def ready(connection: "Connection") -> bool:
    """True iff the node reports itself ready (HTTP 200).

    Any other status means "not ready" and is not an error.
    """
    response = await connection.request("GET", READY_PATH)
    return response.status_code == 200


async def remove(connection: "Connection", node_id: str) -> bool:
    """Remove a node from the cluster. True iff the node answered 200.

    The cluster must still have quorum afterwards; check ``ready()``
    before removing a node that may be the last tolerated failure.
    """
    response = await connection.request("DELETE", REMOVE_PATH, {"id": node_id})
    removed = response.status_code == 200
    logger.info(
        "Node removal requested",
        context={"node_id": node_id, "status": response.status_code, "removed": removed},
    )
    return removed
