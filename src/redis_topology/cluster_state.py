import dataclasses
import enum
from typing import Any, Optional

from redis_topology.errors import SnapshotError
from redis_topology.util import parse_info


__all__ = (
    "NodeClusterState",
    "ClusterInfo",
    "parse_cluster_info",
)


CLUSTER_INFO_STATE_KEY = "cluster_state"
CLUSTER_INFO_CURRENT_EPOCH_KEY = "cluster_current_epoch"
CLUSTER_INFO_SLOTS_ASSIGNED = "cluster_slots_assigned"
CLUSTER_INFO_KNOWN_NODES = "cluster_known_nodes"
CLUSTER_INFO_SIZE = "cluster_size"


@enum.unique
class NodeClusterState(enum.Enum):
    UNKNOWN = "unknown"
    OK = "ok"
    FAIL = "fail"

    @classmethod
    def _missing_(cls, value: Any) -> "NodeClusterState":
        return cls.UNKNOWN


@dataclasses.dataclass(frozen=True)
class ClusterInfo:
    state: NodeClusterState
    current_epoch: int
    slots_assigned: int
    known_nodes: Optional[int] = None
    size: Optional[int] = None


def _optional_int(value: Optional[str]) -> Optional[int]:
    if value is None:
        return None
    return int(value)


def parse_cluster_info(info: str) -> ClusterInfo:
    try:
        fields = parse_info(info)
        state = NodeClusterState(fields[CLUSTER_INFO_STATE_KEY])
        current_epoch = int(fields[CLUSTER_INFO_CURRENT_EPOCH_KEY])
        slots_assigned = int(fields[CLUSTER_INFO_SLOTS_ASSIGNED])
        known_nodes = _optional_int(fields.get(CLUSTER_INFO_KNOWN_NODES))
        size = _optional_int(fields.get(CLUSTER_INFO_SIZE))
    except (KeyError, ValueError) as e:
        raise SnapshotError(f"Invalid cluster info: {e!r}") from e

    return ClusterInfo(
        state=state,
        current_epoch=current_epoch,
        slots_assigned=slots_assigned,
        known_nodes=known_nodes,
        size=size,
    )
