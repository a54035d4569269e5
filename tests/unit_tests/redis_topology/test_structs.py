import dataclasses

import pytest

from redis_topology.structs import Address, HashRangeGroup, NodeRole, ReportStatus, TopologyReport


def test_address_str():
    assert str(Address("10.0.0.1", 7000)) == "10.0.0.1:7000"


def test_node_descriptor_frozen(node_factory):
    node = node_factory("n1", "h1")

    with pytest.raises(dataclasses.FrozenInstanceError):
        node.host = "h2"  # type: ignore[misc]


def test_node_descriptor_to_dict(node_factory):
    node = node_factory("n1", "h1", 7001, NodeRole.PRIMARY)

    assert node.to_dict() == {
        "id": "n1",
        "address": "h1:7001",
        "host": "h1",
        "port": 7001,
        "cport": 17001,
        "role": "master",
    }


def test_hash_range_group_nodes(group_factory):
    group = group_factory("h1", "h2", "h3")

    assert [n.id for n in group.nodes] == ["n0", "n1", "n2"]
    assert group.nodes[0] is group.primary


def test_hash_range_group_no_replicas(node_factory):
    primary = node_factory("n0", "h1", role=NodeRole.PRIMARY)
    group = HashRangeGroup(primary=primary)

    assert group.nodes == (primary,)
    assert group.range == ()


def test_topology_report_to_dict():
    assert TopologyReport(status=ReportStatus.SUCCESS, ranges=()).to_dict() == {
        "status": "success",
        "ranges": [],
    }
    assert TopologyReport(status=ReportStatus.FAIL, reason="state_not_ok").to_dict() == {
        "status": "fail",
        "reason": "state_not_ok",
    }
    assert TopologyReport(status=ReportStatus.FAIL, reason="x").ok is False
