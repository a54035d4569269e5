import dataclasses
import enum
from typing import Any, Dict, Mapping, NamedTuple, Optional, Tuple


__all__ = (
    "Address",
    "SlotRange",
    "NodeRole",
    "NodeDescriptor",
    "HashRangeGroup",
    "HostAllocation",
    "RangeReport",
    "ReportStatus",
    "TopologyReport",
)


SlotRange = Tuple[int, int]


class Address(NamedTuple):
    host: str
    port: int

    def __str__(self) -> str:
        return f"{self.host}:{self.port}"


@enum.unique
class NodeRole(enum.Enum):
    PRIMARY = "master"
    REPLICA = "slave"


@dataclasses.dataclass(frozen=True)
class NodeDescriptor:
    id: str
    address: str
    host: str
    port: int
    cport: Optional[int]
    role: NodeRole

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "address": self.address,
            "host": self.host,
            "port": self.port,
            "cport": self.cport,
            "role": self.role.value,
        }


@dataclasses.dataclass(frozen=True)
class HashRangeGroup:
    primary: NodeDescriptor
    replicas: Tuple[NodeDescriptor, ...] = ()
    range: Tuple[SlotRange, ...] = ()

    @property
    def nodes(self) -> Tuple[NodeDescriptor, ...]:
        return (self.primary,) + tuple(self.replicas)


# host -> nodes of one hash range located on that host
HostAllocation = Mapping[str, Tuple[NodeDescriptor, ...]]


@dataclasses.dataclass(frozen=True)
class RangeReport:
    nodes: Tuple[NodeDescriptor, ...]
    risk: float
    host_count: int
    max_nodes_on_one_host: int
    host_allocation: HostAllocation = dataclasses.field(repr=False)
    range: Tuple[SlotRange, ...]
    primary: NodeDescriptor

    def to_dict(self) -> Dict[str, Any]:
        return {
            "nodes": [n.to_dict() for n in self.nodes],
            "risk": self.risk,
            "host_count": self.host_count,
            "max_nodes_on_one_host": self.max_nodes_on_one_host,
            "host_allocation": {
                host: [n.to_dict() for n in nodes] for host, nodes in self.host_allocation.items()
            },
            "range": [list(r) for r in self.range],
            "primary": self.primary.to_dict(),
        }


@enum.unique
class ReportStatus(enum.Enum):
    SUCCESS = "success"
    FAIL = "fail"


@dataclasses.dataclass(frozen=True)
class TopologyReport:
    status: ReportStatus
    reason: Optional[str] = None
    ranges: Optional[Tuple[RangeReport, ...]] = None

    @property
    def ok(self) -> bool:
        return self.status is ReportStatus.SUCCESS

    def to_dict(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {"status": self.status.value}
        if self.reason is not None:
            result["reason"] = self.reason
        if self.ranges is not None:
            result["ranges"] = [r.to_dict() for r in self.ranges]
        return result
