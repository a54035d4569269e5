import asyncio

__all__ = [
    "RedisError",
    "ProtocolError",
    "ReplyError",
    "AuthError",
    "ConnectionClosedError",
    "ConnectTimeoutError",
    "TopologyError",
    "SnapshotError",
    "network_errors",
]


class RedisError(Exception):
    """Base exception class for redis_topology exceptions."""


class ProtocolError(RedisError):
    """Raised when protocol error occurs."""


class ReplyError(RedisError):
    """Raised for redis error replies (-ERR)."""

    MATCH_REPLY = None

    def __new__(cls, msg, *args):
        for klass in cls.__subclasses__():
            if msg and klass.MATCH_REPLY and msg.startswith(klass.MATCH_REPLY):
                return klass(msg, *args)
        return super().__new__(cls, msg, *args)


class AuthError(ReplyError):
    """Raised when authentication errors occurs."""

    MATCH_REPLY = (
        "NOAUTH ",
        "WRONGPASS ",
        "ERR invalid password",
        "ERR Client sent AUTH, but no password is set",
    )


class ConnectionClosedError(RedisError):
    """Raised if connection to server was closed."""


class ConnectTimeoutError(RedisError):
    """Raises than connect to redis is timed out"""

    def __init__(self, address) -> None:
        super().__init__(address)

        self.address = address


class TopologyError(RedisError):
    """Base class for cluster topology errors."""


class SnapshotError(TopologyError):
    """Raises while cluster reply can not be turned into a topology snapshot"""


network_errors = (
    ConnectionError,
    OSError,
    ConnectTimeoutError,
    ConnectionClosedError,
    asyncio.TimeoutError,
)
