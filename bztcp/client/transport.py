"""
Duplex Byte Transport

Thin wrapper over asyncio streams. The connection depends only on the
Transport protocol, so tests and embedders can supply their own.
"""
from __future__ import annotations

import asyncio
import logging
import socket
import ssl
from typing import Optional, Protocol, runtime_checkable

from bztcp.config import parse_address
from bztcp.core.types import TransportError

logger = logging.getLogger(__name__)


@runtime_checkable
class Transport(Protocol):
    """Line-oriented duplex byte stream."""

    async def read_line(self) -> bytes:
        """
        Read bytes up to and including the line terminator.

        Raises TransportError on EOF or I/O failure.
        """
        ...

    async def write(self, data: bytes) -> None:
        """Write all of *data*. Raises TransportError on failure."""
        ...

    def set_keepalive(self, enabled: bool) -> bool:
        """Toggle transport keep-alive; return False if unsupported."""
        ...

    async def close(self) -> None:
        """Close the transport. Safe to call more than once."""
        ...


class StreamTransport:
    """Transport backed by an asyncio StreamReader/StreamWriter pair."""

    def __init__(
        self,
        reader: asyncio.StreamReader,
        writer: asyncio.StreamWriter,
        *,
        terminator: bytes = b"\n",
        close_timeout: float = 5.0,
    ) -> None:
        self._reader = reader
        self._writer = writer
        self._terminator = terminator
        self._close_timeout = close_timeout
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    async def read_line(self) -> bytes:
        try:
            return await self._reader.readuntil(self._terminator)
        except asyncio.IncompleteReadError as e:
            raise TransportError(
                "Connection closed by peer",
                context={"partial_bytes": len(e.partial)},
            ) from e
        except asyncio.LimitOverrunError as e:
            raise TransportError(
                "Line exceeds read limit",
                context={"consumed": e.consumed},
            ) from e
        except OSError as e:
            raise TransportError(f"Read failed: {e}") from e

    async def write(self, data: bytes) -> None:
        if self._closed:
            raise TransportError("Write on closed transport")
        try:
            self._writer.write(data)
            await self._writer.drain()
        except OSError as e:
            raise TransportError(f"Write failed: {e}") from e

    def set_keepalive(self, enabled: bool) -> bool:
        sock = self._writer.get_extra_info("socket")
        if sock is None:
            return False
        try:
            sock.setsockopt(socket.SOL_SOCKET, socket.SO_KEEPALIVE, int(enabled))
        except OSError as e:
            logger.debug("Could not set SO_KEEPALIVE", extra={"error": str(e)})
            return False
        return True

    async def close(self) -> None:
        if self._closed:
            return
        self._closed = True

        self._writer.close()
        try:
            await asyncio.wait_for(
                self._writer.wait_closed(),
                timeout=self._close_timeout,
            )
        except asyncio.TimeoutError:
            # TLS shutdown can stall on an unresponsive peer
            self._writer.transport.abort()
        except OSError as e:
            logger.debug("Error while closing transport", extra={"error": str(e)})


async def open_transport(
    address: str,
    *,
    tls: bool = False,
    timeout: float = 10.0,
    limit: int = 1 << 20,
    terminator: bytes = b"\n",
    ssl_context: Optional[ssl.SSLContext] = None,
) -> StreamTransport:
    """
    Open a TCP (or TLS) connection to *address* ("host:port").

    Raises:
        TransportError: If the connection cannot be established in time
    """
    host, port = parse_address(address)

    ssl_arg: Optional[ssl.SSLContext] = None
    if tls:
        ssl_arg = ssl_context or ssl.create_default_context()

    try:
        reader, writer = await asyncio.wait_for(
            asyncio.open_connection(
                host,
                port,
                ssl=ssl_arg,
                server_hostname=host if ssl_arg is not None else None,
                limit=limit,
            ),
            timeout=timeout,
        )
    except asyncio.TimeoutError as e:
        raise TransportError(
            f"Timed out connecting after {timeout}s",
            address=address,
        ) from e
    except OSError as e:
        raise TransportError(f"Failed to connect: {e}", address=address) from e

    logger.debug("Transport open", extra={"address": address, "tls": tls})
    return StreamTransport(reader, writer, terminator=terminator)
