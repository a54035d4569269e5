"""
Human readable and raw rendering of topology reports.

Nothing here computes statistics, every number is taken
from RangeReport as is.
"""

import json
from typing import Any, Dict, List, Optional, Sequence, Union

from rich.console import Console
from rich.table import Table

from redis_topology.structs import RangeReport, TopologyReport


__all__ = (
    "UNEXPECTED_FAIL",
    "overview_banner",
    "overview_rows",
    "host_slot_counts",
    "slot_status_message",
    "print_topology",
    "dump_topology",
)


UNEXPECTED_FAIL: Dict[str, str] = {"status": "fail", "reason": "unexpected_fail"}

FAIL_MESSAGE = "Failed finding cluster status. There may be something wrong with the cluster."
EMPTY_MESSAGE = "No stats were found for this cluster."
EVEN_MESSAGE = (
    "Looks like your cluster is evenly distributed, "
    "and no host contains more than one instance of a hash slot"
)

OVERVIEW_COLUMNS = (
    "Slot Number",
    "Number of Hosts",
    "Maximum on One Host",
    "Hosts",
    "Master Id",
    "Master Address",
)


def overview_banner(ranges: Sequence[RangeReport]) -> Optional[str]:
    if not ranges:
        return None

    worst = ranges[0].risk
    if worst == 0:
        return EVEN_MESSAGE
    if worst == 1:
        risky = sum(1 for r in ranges if r.risk == 1)
        return f"Oh no, looks like {risky} of your hash slots are in risk of single node failure!"
    return None


def overview_rows(ranges: Sequence[RangeReport]) -> List[List[str]]:
    return [
        [
            str(idx),
            str(r.host_count),
            str(r.max_nodes_on_one_host),
            ", ".join(r.host_allocation.keys()),
            r.primary.id,
            r.primary.address,
        ]
        for idx, r in enumerate(ranges, 1)
    ]


def host_slot_counts(ranges: Sequence[RangeReport]) -> Dict[str, List[int]]:
    """Returns host -> number of copies of every range on that host."""

    counts: Dict[str, List[int]] = {}
    for idx, r in enumerate(ranges):
        for host, nodes in r.host_allocation.items():
            if host not in counts:
                counts[host] = [0] * len(ranges)
            counts[host][idx] = len(nodes)
    return counts


def slot_status_message(r: RangeReport) -> str:
    if r.risk == 1:
        return "This slot is in risk of single node failure!"
    if r.risk == 0:
        return "This slot is perfectly evenly distributed"
    return (
        f"This slot is partially skewed, distributed between {r.host_count} hosts "
        f"with a max of {r.max_nodes_on_one_host} on one host."
    )


def _status_style(r: RangeReport) -> str:
    if r.risk == 1:
        return "red"
    if r.risk == 0:
        return "green"
    return "yellow"


def _print_overview(console: Console, ranges: Sequence[RangeReport]) -> None:
    banner = overview_banner(ranges)
    if banner is not None:
        console.print(banner, style="bold red" if ranges[0].risk == 1 else "bold green")

    table = Table(title="Overview")
    for column in OVERVIEW_COLUMNS:
        table.add_column(column)
    for row in overview_rows(ranges):
        table.add_row(*row)
    console.print(table)


def _print_by_host(console: Console, ranges: Sequence[RangeReport]) -> None:
    table = Table(title="Slots by Host")
    table.add_column("Host", style="cyan", no_wrap=True)
    for idx in range(1, len(ranges) + 1):
        table.add_column(f"Slot {idx}", justify="right")
    for host, counts in host_slot_counts(ranges).items():
        table.add_row(host, *(str(c) for c in counts))
    console.print(table)


def _print_slot_statuses(console: Console, ranges: Sequence[RangeReport]) -> None:
    console.print("\nSlot Statuses\n-------")
    for idx, r in enumerate(ranges, 1):
        console.print(f"\nSlot {idx}")
        console.print(slot_status_message(r), style=_status_style(r))


def print_topology(report: TopologyReport, console: Optional[Console] = None) -> None:
    if console is None:
        console = Console()

    if not report.ok:
        console.print(FAIL_MESSAGE, style="bold red")
        return

    ranges = report.ranges or ()
    if not ranges:
        console.print(EMPTY_MESSAGE)
        return

    _print_overview(console, ranges)
    _print_by_host(console, ranges)
    _print_slot_statuses(console, ranges)


def dump_topology(report: Union[TopologyReport, Dict[str, Any]]) -> str:
    data = report.to_dict() if isinstance(report, TopologyReport) else report
    return json.dumps(data, indent=2)
