from operator import attrgetter
from types import MappingProxyType
from typing import Dict, List, Optional, Sequence

from redis_topology.cluster_state import NodeClusterState
from redis_topology.fetcher import ConnectionParams, fetch_snapshot
from redis_topology.log import logger
from redis_topology.structs import (
    HashRangeGroup,
    HostAllocation,
    NodeDescriptor,
    RangeReport,
    ReportStatus,
    TopologyReport,
)


__all__ = (
    "STATE_NOT_OK",
    "compute_risk",
    "host_allocation",
    "range_report",
    "analyze",
    "find_topology",
)


STATE_NOT_OK = "state_not_ok"


def compute_risk(max_nodes_on_one_host: int, node_count: int) -> float:
    """Fraction of redundant copies collapsed onto the worst host.

    0.0 means every copy lives on its own host, 1.0 means a single
    host failure loses every copy of the range.
    """

    if node_count < 1:
        raise ValueError("node_count must be positive")
    if not 1 <= max_nodes_on_one_host <= node_count:
        raise ValueError(
            f"max_nodes_on_one_host must be in [1, {node_count}], got {max_nodes_on_one_host}"
        )

    # one copy in total, nothing is redundant
    if node_count == 1:
        return 1.0

    return (max_nodes_on_one_host - 1) / (node_count - 1)


def host_allocation(nodes: Sequence[NodeDescriptor]) -> HostAllocation:
    allocation: Dict[str, List[NodeDescriptor]] = {}
    for node in nodes:
        allocation.setdefault(node.host, []).append(node)
    return MappingProxyType({host: tuple(host_nodes) for host, host_nodes in allocation.items()})


def range_report(group: HashRangeGroup) -> RangeReport:
    nodes = group.nodes
    allocation = host_allocation(nodes)
    max_nodes_on_one_host = max(len(host_nodes) for host_nodes in allocation.values())

    return RangeReport(
        nodes=nodes,
        risk=compute_risk(max_nodes_on_one_host, len(nodes)),
        host_count=len(allocation),
        max_nodes_on_one_host=max_nodes_on_one_host,
        host_allocation=allocation,
        range=tuple(group.range),
        primary=group.primary,
    )


def analyze(
    range_groups: Optional[Sequence[HashRangeGroup]],
    health_state: NodeClusterState,
) -> TopologyReport:
    """Build per hash range distribution report, riskiest ranges first.

    Statistics of a cluster in not "ok" state are meaningless,
    so range groups are not inspected at all in this case.
    """

    if health_state is not NodeClusterState.OK:
        return TopologyReport(status=ReportStatus.FAIL, reason=STATE_NOT_OK)

    reports = [range_report(group) for group in range_groups or ()]
    # sorted() is stable, equal risks keep the supplied order
    reports = sorted(reports, key=attrgetter("risk"), reverse=True)

    return TopologyReport(status=ReportStatus.SUCCESS, ranges=tuple(reports))


async def find_topology(params: ConnectionParams) -> TopologyReport:
    """Fetch cluster snapshot from one entry node and analyze it.

    This function is a coroutine.
    """

    state, range_groups = await fetch_snapshot(params)
    report = analyze(range_groups, state)

    if report.ok:
        ranges = report.ranges or ()
        logger.info(
            "Analyzed %d hash range groups from %s, at risk of single host failure: %d",
            len(ranges),
            params.address,
            sum(1 for r in ranges if r.risk == 1),
        )

    return report
