from ._version import __version__
from .analyzer import analyze, compute_risk, find_topology, range_report
from .cluster_state import NodeClusterState
from .errors import (
    AuthError,
    ConnectionClosedError,
    ConnectTimeoutError,
    ProtocolError,
    RedisError,
    ReplyError,
    SnapshotError,
    TopologyError,
)
from .fetcher import ConnectionParams, fetch_health, fetch_members, fetch_snapshot
from .report import dump_topology, print_topology
from .structs import (
    Address,
    HashRangeGroup,
    NodeDescriptor,
    NodeRole,
    RangeReport,
    ReportStatus,
    TopologyReport,
)

__all__ = [
    "__version__",
    # Analyzer
    "analyze",
    "compute_risk",
    "range_report",
    "find_topology",
    # Fetcher
    "ConnectionParams",
    "fetch_health",
    "fetch_members",
    "fetch_snapshot",
    # Reporter
    "print_topology",
    "dump_topology",
    # Errors
    "RedisError",
    "ReplyError",
    "AuthError",
    "ProtocolError",
    "ConnectionClosedError",
    "ConnectTimeoutError",
    "TopologyError",
    "SnapshotError",
    # public structs
    "Address",
    "NodeClusterState",
    "NodeRole",
    "NodeDescriptor",
    "HashRangeGroup",
    "RangeReport",
    "ReportStatus",
    "TopologyReport",
]
