import argparse
import asyncio
import logging
import os
import sys
from typing import Optional, Sequence

from rich.console import Console
from rich.logging import RichHandler

from redis_topology._version import __version__
from redis_topology.analyzer import find_topology
from redis_topology.errors import RedisError, network_errors
from redis_topology.fetcher import ConnectionParams
from redis_topology.log import logger
from redis_topology.report import UNEXPECTED_FAIL, dump_topology, print_topology
from redis_topology.structs import Address


__all__ = (
    "create_parser",
    "connection_params",
    "main",
)


EXIT_OK = 0
EXIT_FAIL = 1

LOG_LEVELS = (logging.WARNING, logging.INFO, logging.DEBUG)


def create_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="redis-topology",
        description="Diagnostics of Redis Cluster hash slots distribution across hosts",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument(
        "-v",
        "--verbose",
        action="count",
        default=0,
        help="Increase logging verbosity, may be repeated",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    find = subparsers.add_parser(
        "find-topology",
        help="Find the topology information of a redis cluster",
        description=(
            "Find the topology information of a redis cluster. "
            "The provided node must be part of the cluster."
        ),
    )
    find.add_argument(
        "-u",
        "--url",
        default=os.environ.get("REDIS_URL"),
        help="Formatted redis url for the node to connect to. This takes precedence over host and port.",
    )
    find.add_argument("-H", "--host", default="localhost", help="Host to connect to")
    find.add_argument("-p", "--port", type=int, default=6379, help="Port to connect to")
    find.add_argument(
        "-a",
        "--auth",
        default=os.environ.get("REDISCLI_AUTH"),
        help="The password, if required",
    )
    find.add_argument(
        "-U",
        "--username",
        default=os.environ.get("REDIS_USERNAME"),
        help="The username, if required",
    )
    find.add_argument(
        "-v",
        "--verbose",
        action="count",
        default=argparse.SUPPRESS,
        help="Increase logging verbosity, may be repeated",
    )
    find.add_argument("--ssl", action="store_true", help="Use TLS connection")
    find.add_argument(
        "-t",
        "--timeout",
        type=float,
        default=None,
        help=f"Connect and command timeout in seconds (default: {ConnectionParams.TIMEOUT})",
    )
    find.add_argument(
        "-r",
        "--raw",
        action="store_true",
        help="print result json, not the prettified data",
    )

    return parser


def connection_params(args: argparse.Namespace) -> ConnectionParams:
    if args.url:
        return ConnectionParams.from_url(
            args.url,
            username=args.username,
            password=args.auth,
            timeout=args.timeout,
        )

    return ConnectionParams(
        address=Address(args.host, args.port),
        username=args.username,
        password=args.auth,
        ssl=args.ssl,
        timeout=args.timeout,
    )


def setup_logging(verbosity: int) -> None:
    level = LOG_LEVELS[min(verbosity, len(LOG_LEVELS) - 1)]
    if not any(isinstance(h, RichHandler) for h in logger.handlers):
        logger.addHandler(RichHandler(console=Console(stderr=True), show_path=False))
    logger.setLevel(level)


async def find_topology_command(params: ConnectionParams, raw: bool, console: Console) -> int:
    try:
        report = await find_topology(params)
    except network_errors + (RedisError,) as e:
        if raw:
            console.out(dump_topology(UNEXPECTED_FAIL), highlight=False)
        logger.error("Error finding the topology of the redis cluster at %s: %r", params.address, e)
        return EXIT_FAIL

    if raw:
        console.out(dump_topology(report), highlight=False)
    else:
        print_topology(report, console)

    return EXIT_OK


def main(argv: Optional[Sequence[str]] = None, console: Optional[Console] = None) -> int:
    parser = create_parser()
    args = parser.parse_args(argv)
    if console is None:
        console = Console()

    setup_logging(args.verbose)

    try:
        params = connection_params(args)
    except ValueError as e:
        parser.error(str(e))

    return asyncio.run(find_topology_command(params, args.raw, console))


def run() -> None:
    sys.exit(main())
