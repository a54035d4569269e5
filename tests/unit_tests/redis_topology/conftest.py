import pytest

from redis_topology.structs import HashRangeGroup, NodeDescriptor, NodeRole


def make_node(node_id: str, host: str, port: int = 7000, role: NodeRole = NodeRole.REPLICA):
    return NodeDescriptor(
        id=node_id,
        address=f"{host}:{port}",
        host=host,
        port=port,
        cport=port + 10000,
        role=role,
    )


def make_group(primary_host: str, *replica_hosts: str, prefix: str = "n", slots=((0, 16383),)):
    primary = make_node(f"{prefix}0", primary_host, 7000, NodeRole.PRIMARY)
    replicas = tuple(
        make_node(f"{prefix}{idx}", host, 7000 + idx) for idx, host in enumerate(replica_hosts, 1)
    )
    return HashRangeGroup(primary=primary, replicas=replicas, range=tuple(slots))


@pytest.fixture
def node_factory():
    return make_node


@pytest.fixture
def group_factory():
    return make_group
