import asyncio
import dataclasses
from typing import Dict, List, Optional, Sequence, Tuple

from async_timeout import timeout as atimeout

from redis_topology.cluster_state import NodeClusterState, parse_cluster_info
from redis_topology.connection import RedisConnection, create_connection
from redis_topology.errors import SnapshotError
from redis_topology.log import logger
from redis_topology.structs import Address, HashRangeGroup, NodeDescriptor, NodeRole
from redis_topology.util import DEFAULT_PORT, parse_cluster_nodes, parse_url


__all__ = (
    "ConnectionParams",
    "ClusterSnapshot",
    "create_range_groups",
    "fetch_health",
    "fetch_members",
    "fetch_snapshot",
)


MASTER_FLAG = "master"

ClusterSnapshot = Tuple[NodeClusterState, Optional[List[HashRangeGroup]]]


@dataclasses.dataclass(frozen=True)
class ConnectionParams:
    TIMEOUT = 5.0

    address: Address = Address("localhost", DEFAULT_PORT)
    username: Optional[str] = None
    password: Optional[str] = dataclasses.field(default=None, repr=False)
    ssl: bool = False
    timeout: Optional[float] = None

    def __post_init__(self) -> None:
        if self.timeout is None:
            object.__setattr__(self, "timeout", self.TIMEOUT)
        elif self.timeout <= 0:
            raise ValueError("timeout has to be a number greater than 0")

    @classmethod
    def from_url(
        cls,
        url: str,
        *,
        username: Optional[str] = None,
        password: Optional[str] = None,
        timeout: Optional[float] = None,
    ) -> "ConnectionParams":
        (host, port), options = parse_url(url)
        url_timeout = options.get("timeout")
        return cls(
            address=Address(host, port),
            username=options.get("username", username),  # type: ignore[arg-type]
            password=options.get("password", password),  # type: ignore[arg-type]
            ssl=bool(options.get("ssl", False)),
            timeout=timeout if timeout is not None else url_timeout,  # type: ignore[arg-type]
        )


async def _connect(params: ConnectionParams) -> Tuple[RedisConnection, Optional[float]]:
    """Open connection to entry node.

    Returns connection and the rest of timeout left for commands.
    """

    loop = asyncio.get_running_loop()
    start_t = loop.time()
    conn = await create_connection(
        params.address,
        username=params.username,
        password=params.password,
        ssl=params.ssl,
        timeout=params.timeout,
    )
    tail_timeout = params.timeout
    if tail_timeout is not None:
        tail_timeout = max(0, tail_timeout - (loop.time() - start_t))
    return conn, tail_timeout


async def _execute_health(conn: RedisConnection) -> NodeClusterState:
    raw_cluster_info: str = await conn.execute("CLUSTER", "INFO")
    cluster_info = parse_cluster_info(raw_cluster_info)
    logger.debug("Cluster info from %s: %r", conn.address, cluster_info)
    return cluster_info.state


async def _execute_members(conn: RedisConnection) -> List[HashRangeGroup]:
    raw_nodes: str = await conn.execute("CLUSTER", "NODES")
    try:
        parsed_nodes = parse_cluster_nodes(raw_nodes)
    except ValueError as e:
        raise SnapshotError(f"Invalid cluster nodes reply: {e!r}") from e

    groups = create_range_groups(parsed_nodes)
    logger.info(
        "Fetched %d nodes in %d hash range groups from %s",
        len(parsed_nodes),
        len(groups),
        conn.address,
    )
    return groups


async def fetch_health(params: ConnectionParams) -> NodeClusterState:
    conn, tail_timeout = await _connect(params)
    try:
        async with atimeout(tail_timeout):
            return await _execute_health(conn)
    except asyncio.TimeoutError:
        logger.warning("Getting cluster state from %s is timed out", params.address)
        raise
    finally:
        conn.close()
        await conn.wait_closed()


async def fetch_members(params: ConnectionParams) -> List[HashRangeGroup]:
    conn, tail_timeout = await _connect(params)
    try:
        async with atimeout(tail_timeout):
            return await _execute_members(conn)
    except asyncio.TimeoutError:
        logger.warning("Getting cluster nodes from %s is timed out", params.address)
        raise
    finally:
        conn.close()
        await conn.wait_closed()


async def fetch_snapshot(params: ConnectionParams) -> ClusterSnapshot:
    """Fetch cluster health and, for healthy cluster, its members
    over one connection."""

    conn, tail_timeout = await _connect(params)
    try:
        # one timeout for both commands
        async with atimeout(tail_timeout):
            state = await _execute_health(conn)
            if state is not NodeClusterState.OK:
                logger.warning(
                    'Node %s returned not "ok" cluster state "%s"', params.address, state.value
                )
                return state, None

            return state, await _execute_members(conn)
    except asyncio.TimeoutError:
        logger.warning("Getting cluster snapshot from %s is timed out", params.address)
        raise
    finally:
        conn.close()
        await conn.wait_closed()


def _node_descriptor(node: Dict, role: NodeRole) -> NodeDescriptor:
    return NodeDescriptor(
        id=node["id"],
        address=node["address"],
        host=node["host"],
        port=node["port"],
        cport=node["cport"],
        role=role,
    )


def create_range_groups(parsed_nodes: Sequence[Dict]) -> List[HashRangeGroup]:
    """Group parsed CLUSTER NODES entries by hash range owner.

    Every master starts a group in reply order, replicas join
    the group of their master in reply order.
    """

    primaries: Dict[str, NodeDescriptor] = {}
    ranges: Dict[str, Tuple] = {}
    replicas: Dict[str, List[NodeDescriptor]] = {}

    for node in parsed_nodes:
        if MASTER_FLAG in node["flags"]:
            primaries[node["id"]] = _node_descriptor(node, NodeRole.PRIMARY)
            ranges[node["id"]] = node["slots"]
            replicas.setdefault(node["id"], [])

    for node in parsed_nodes:
        if MASTER_FLAG in node["flags"]:
            continue

        master_id = node["master"]
        if master_id is None:
            logger.warning("Node %s (%s) has no master, skip it", node["id"], node["address"])
            continue
        if master_id not in primaries:
            logger.warning(
                "Node %s (%s) replicates unknown master %s, skip it",
                node["id"],
                node["address"],
                master_id,
            )
            continue

        replicas[master_id].append(_node_descriptor(node, NodeRole.REPLICA))

    return [
        HashRangeGroup(
            primary=primary,
            replicas=tuple(replicas[node_id]),
            range=tuple(ranges[node_id]),
        )
        for node_id, primary in primaries.items()
    ]
