import asyncio
import socket
import ssl as _ssl
from typing import Any, Callable, Optional, Union

import hiredis
from async_timeout import timeout as atimeout

from redis_topology.errors import (
    ConnectionClosedError,
    ConnectTimeoutError,
    ProtocolError,
    ReplyError,
)
from redis_topology.log import logger
from redis_topology.structs import Address
from redis_topology.util import encode_command


__all__ = (
    "RedisConnection",
    "create_connection",
)


MAX_CHUNK_SIZE = 65536

SSLParam = Optional[Union[bool, _ssl.SSLContext]]


class RedisConnection:
    """Single client connection.

    Sends one command at a time and waits for its reply,
    no pipelining and no pubsub.
    """

    def __init__(
        self,
        reader: asyncio.StreamReader,
        writer: asyncio.StreamWriter,
        *,
        address: Address,
        encoding: Optional[str] = None,
        parser: Optional[Callable[..., Any]] = None,
    ) -> None:
        if parser is None:
            parser = hiredis.Reader

        self._reader = reader
        self._writer = writer
        self._address = address
        self._encoding = encoding
        self._parser = parser(
            protocolError=ProtocolError,
            replyError=ReplyError,
            encoding=encoding,
        )
        self._closed = False
        self._close_exc: Optional[BaseException] = None
        self._lock = asyncio.Lock()

    def __repr__(self) -> str:
        return f"<{type(self).__name__} address:{self._address}>"

    @property
    def address(self) -> Address:
        return self._address

    @property
    def encoding(self) -> Optional[str]:
        return self._encoding

    @property
    def closed(self) -> bool:
        return self._closed

    async def auth(self, password: str) -> bool:
        """Authenticate to server."""
        return await self.execute("AUTH", password) == "OK"

    async def auth_with_username(self, username: str, password: str) -> bool:
        """Authenticate to server with ACL username (redis 6.0+)."""
        return await self.execute("AUTH", username, password) == "OK"

    async def execute(self, command, *args) -> Any:
        """Executes redis command and returns decoded reply.

        Raises ReplyError for error replies, ConnectionClosedError if
        connection was lost before reply is received.
        """

        if self._closed:
            raise ConnectionClosedError("Connection closed or corrupted") from self._close_exc

        async with self._lock:
            logger.debug("Execute %r on %s", command, self._address)
            self._writer.write(encode_command(command, *args))
            await self._writer.drain()
            reply = await self._read_reply()

        if isinstance(reply, ReplyError):
            raise reply

        return reply

    async def _read_reply(self) -> Any:
        while True:
            try:
                obj = self._parser.gets()
            except ProtocolError as e:
                # protocol state is unrecoverable
                self._do_close(e)
                raise

            if obj is not False:
                return obj

            data = await self._reader.read(MAX_CHUNK_SIZE)
            if not data:
                exc = ConnectionClosedError("Reader at end of file")
                self._do_close(exc)
                raise exc

            self._parser.feed(data)

    def close(self) -> None:
        """Close connection."""
        self._do_close(None)

    async def wait_closed(self) -> None:
        try:
            await self._writer.wait_closed()
        except OSError as e:
            logger.debug("Connection %r closed with error: %r", self, e)

    def _do_close(self, exc: Optional[BaseException]) -> None:
        if self._closed:
            return
        self._closed = True
        self._close_exc = exc
        self._writer.close()


async def create_connection(
    address: Address,
    *,
    username: Optional[str] = None,
    password: Optional[str] = None,
    ssl: SSLParam = None,
    encoding: Optional[str] = "utf-8",
    parser: Optional[Callable[..., Any]] = None,
    timeout: Optional[float] = None,
) -> RedisConnection:
    """Creates redis connection.

    Opens TCP connection to redis server and authenticates it
    if password is given.

    Timeout covers both the connection stage and authentication.
    ConnectTimeoutError is raised if connection could not be
    established in time.

    This function is a coroutine.
    """

    if timeout is not None and timeout <= 0:
        raise ValueError("Timeout has to be None or a number greater than 0")

    ssl_context: Optional[_ssl.SSLContext]
    if ssl is True:
        ssl_context = _ssl.create_default_context()
    elif ssl:
        ssl_context = ssl
    else:
        ssl_context = None

    loop = asyncio.get_running_loop()
    tail_timeout = timeout

    start_t = loop.time()
    logger.debug("Creating tcp connection to %s", address)
    try:
        async with atimeout(tail_timeout):
            reader, writer = await asyncio.open_connection(
                address.host,
                address.port,
                limit=MAX_CHUNK_SIZE,
                ssl=ssl_context,
            )
    except asyncio.TimeoutError:
        raise ConnectTimeoutError(address) from None

    sock = writer.transport.get_extra_info("socket")
    if sock is not None:
        sock.setsockopt(socket.IPPROTO_TCP, socket.TCP_NODELAY, 1)

    conn = RedisConnection(reader, writer, address=address, encoding=encoding, parser=parser)
    if tail_timeout is not None:
        tail_timeout = max(0, tail_timeout - (loop.time() - start_t))

    try:
        async with atimeout(tail_timeout):
            if password is not None:
                if username is not None:
                    await conn.auth_with_username(username, password)
                else:
                    await conn.auth(password)
    except (asyncio.CancelledError, Exception):
        conn.close()
        await conn.wait_closed()
        raise

    return conn
