"""
BZTCP Connection

Connects, authenticates and streams news records from a BZTCP server.

The exchange generally looks like this:

    < READY=BZEOT
    > AUTH: {"username":"bztest","key":"12345"}=BZEOT
    < CONNECTED=BZEOT
    > PING: {"pingTime":"Mon Jan  2 2006 15:04:05 GMT-0700 (MST)"}=BZEOT
    < PONG: {...}=BZEOT
    < STREAM: {...}=BZEOT

Instead of CONNECTED the server may answer "INVALID KEY FORMAT" (the
AUTH body could not be parsed) or "INVALID KEY" (bad user or key).
"""
from __future__ import annotations

import asyncio
import inspect
import logging
import ssl
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Awaitable, Callable, Optional

from bztcp.client.clock import Clock, SystemClock
from bztcp.client.decoder import decode_stream_data
from bztcp.client.transport import Transport, open_transport
from bztcp.config import ProtocolConfig
from bztcp.core.types import (
    AuthenticationError,
    BZTCPError,
    ErrorKind,
    TransportError,
)
from bztcp.models.stream import AuthData, PingData, StreamData
from bztcp.protocol.codec import Message, decode_line, encode_message, new_message
from bztcp.protocol.timestamps import format_timestamp

logger = logging.getLogger(__name__)

# Type alias for the record sink; may be sync or async
RecordCallback = Callable[[StreamData], Optional[Awaitable[None]]]

_AUTH_FAILURES = {
    "INVALID KEY FORMAT": ErrorKind.INVALID_KEY_FORMAT,
    "INVALID KEY": ErrorKind.INVALID_KEY,
}


class ConnectionState(str, Enum):
    """Lifecycle of a connection. Transitions only move forward."""

    DISCONNECTED = "disconnected"
    CONNECTING = "connecting"
    AUTHENTICATING = "authenticating"
    STREAMING = "streaming"
    CLOSED = "closed"


async def _finished_first(
    future: asyncio.Future[None],
    waiters: list[asyncio.Future[Any]],
) -> bool:
    """Wait for future; False if any waiter completes first."""
    await asyncio.wait([future, *waiters], return_when=asyncio.FIRST_COMPLETED)
    return not any(w.done() for w in waiters)


class BZTCPConnection:
    """
    A single authenticated BZTCP session.

    Sessions are not reusable: once stream() returns or any step fails,
    the connection is CLOSED and a new one must be dialed.
    """

    def __init__(
        self,
        transport: Optional[Transport] = None,
        *,
        config: Optional[ProtocolConfig] = None,
        clock: Optional[Clock] = None,
        address: Optional[str] = None,
    ) -> None:
        """
        Initialize the connection.

        Args:
            transport: Already-open transport, or None to connect() later
            config: Protocol constants and timing for this connection
            clock: Time source for PING timestamps and intervals
            address: Server address, for logging and errors
        """
        self._transport = transport
        self._config = config or ProtocolConfig()
        self._clock = clock or SystemClock()
        self._address = address

        self._state = ConnectionState.DISCONNECTED
        self._closed = False
        self._stream_started = False

        # Serializes the write path between the handshake and the prober
        self._write_lock = asyncio.Lock()

        # Stats
        self._messages_received = 0
        self._records_delivered = 0
        self._pings_sent = 0
        self._last_message_time: Optional[datetime] = None
        self._connection_start_time: Optional[datetime] = None

    @classmethod
    async def from_transport(
        cls,
        transport: Transport,
        username: str,
        key: str,
        *,
        config: Optional[ProtocolConfig] = None,
        clock: Optional[Clock] = None,
    ) -> BZTCPConnection:
        """Authenticate over an already-configured transport."""
        conn = cls(transport, config=config, clock=clock)
        await conn.authenticate(username, key)
        return conn

    @property
    def state(self) -> ConnectionState:
        return self._state

    @property
    def config(self) -> ProtocolConfig:
        return self._config

    @property
    def pings_sent(self) -> int:
        return self._pings_sent

    @property
    def records_delivered(self) -> int:
        return self._records_delivered

    async def connect(
        self,
        address: str,
        *,
        tls: bool = False,
        ssl_context: Optional[ssl.SSLContext] = None,
    ) -> None:
        """
        Open the transport to *address* within the connect timeout.

        Raises:
            TransportError: If already connected or the dial fails
        """
        if self._state is not ConnectionState.DISCONNECTED or self._transport is not None:
            raise TransportError(
                "Connection already has a transport",
                context={"state": self._state.value},
            )

        self._address = address
        self._state = ConnectionState.CONNECTING
        logger.info("Connecting to BZTCP", extra={"address": address, "tls": tls})

        try:
            self._transport = await open_transport(
                address,
                tls=tls,
                timeout=self._config.connect_timeout,
                limit=self._config.read_limit,
                terminator=self._config.line_terminator,
                ssl_context=ssl_context,
            )
        except BaseException:
            self._state = ConnectionState.CLOSED
            self._closed = True
            raise

    async def authenticate(self, username: str, key: str) -> None:
        """
        Run the READY/AUTH/CONNECTED handshake under the auth timeout.

        On success the connection enters STREAMING and transport
        keep-alive is enabled where supported. On any failure the
        transport is closed before the error propagates.

        Raises:
            AuthenticationError: If the server rejects the handshake
            TransportError: On I/O failure or timeout
            MalformedLineError: If a handshake line cannot be decoded
        """
        if self._transport is None or self._state not in (
            ConnectionState.DISCONNECTED,
            ConnectionState.CONNECTING,
        ):
            raise TransportError(
                "Connection is not ready to authenticate",
                address=self._address,
                context={"state": self._state.value},
            )

        self._state = ConnectionState.AUTHENTICATING

        try:
            await asyncio.wait_for(
                self._handshake(username, key),
                timeout=self._config.auth_timeout,
            )
        except asyncio.TimeoutError as e:
            await self.close()
            raise TransportError(
                f"Timed out authenticating after {self._config.auth_timeout}s",
                address=self._address,
            ) from e
        except BaseException as e:
            logger.warning(
                "Authentication failed",
                extra={"address": self._address, "error": str(e)},
            )
            await self.close()
            raise

        self._state = ConnectionState.STREAMING
        self._connection_start_time = datetime.now(timezone.utc)

        set_keepalive = getattr(self._transport, "set_keepalive", None)
        if set_keepalive is not None:
            set_keepalive(True)

        logger.info(
            "Authenticated with BZTCP",
            extra={"address": self._address, "username": username},
        )

    async def _handshake(self, username: str, key: str) -> None:
        msg = await self.recv()
        if msg.status != "READY":
            raise AuthenticationError(ErrorKind.INVALID_READY, status=msg.status)

        await self.send("AUTH", AuthData(username=username, key=key))

        msg = await self.recv()
        if msg.status == "CONNECTED":
            return

        kind = _AUTH_FAILURES.get(msg.status, ErrorKind.INVALID_AUTH_RESPONSE)
        raise AuthenticationError(kind, status=msg.status)

    async def stream(
        self,
        on_record: RecordCallback,
        cancel: Optional[asyncio.Event] = None,
    ) -> None:
        """
        Deliver STREAM records to *on_record* until cancelled or failed.

        A keep-alive prober runs alongside the read loop. Setting *cancel*
        stops the prober, which closes the transport as its last act; the
        read loop then returns without error whatever the read produced.
        The callback runs in-line, so a slow callback slows ingestion.

        Raises:
            TransportError: If the connection fails before cancellation
            MalformedLineError: If a line cannot be decoded
            DecodeError: If a STREAM payload is invalid
            UnexpectedByteError: If a ticker has an unexpected leading byte
        """
        if self._state is not ConnectionState.STREAMING or self._stream_started:
            raise TransportError(
                "Connection is not ready to stream",
                address=self._address,
                context={"state": self._state.value},
            )
        self._stream_started = True

        if cancel is None:
            cancel = asyncio.Event()
        stop = asyncio.Event()

        prober = asyncio.create_task(self._keepalive(cancel, stop))
        try:
            await self._read_loop(on_record, cancel)
        finally:
            stop.set()
            await prober
            self._state = ConnectionState.CLOSED

        logger.info(
            "Stream finished",
            extra={
                "address": self._address,
                "records_delivered": self._records_delivered,
            },
        )

    async def _read_loop(
        self,
        on_record: RecordCallback,
        cancel: asyncio.Event,
    ) -> None:
        """Main receive-and-dispatch loop."""
        while True:
            try:
                msg = await self.recv()
            except BZTCPError:
                # A read failing because we closed the transport is not an error
                if cancel.is_set():
                    return
                raise

            if cancel.is_set():
                return

            if msg.status == "PONG":
                continue

            if msg.status == "STREAM":
                record = decode_stream_data(msg.data)
                result = on_record(record)
                if inspect.isawaitable(result):
                    await result
                self._records_delivered += 1
                continue

            logger.debug(
                "Ignoring unrecognized status",
                extra={"status": msg.status},
            )

    async def _keepalive(self, cancel: asyncio.Event, stop: asyncio.Event) -> None:
        """
        Send a PING every ping_interval; close the transport on exit.

        Both the timer and an in-flight PING are abandoned as soon as
        cancel or stop fires, so a write blocked on a peer that stopped
        reading cannot hold up shutdown.
        """
        waiters = [
            asyncio.ensure_future(cancel.wait()),
            asyncio.ensure_future(stop.wait()),
        ]
        pending: Optional[asyncio.Future[None]] = None
        try:
            while True:
                pending = asyncio.ensure_future(
                    self._clock.sleep(self._config.ping_interval)
                )
                if not await _finished_first(pending, waiters):
                    return
                pending.result()

                pending = asyncio.ensure_future(self._ping())
                if not await _finished_first(pending, waiters):
                    return
                pending.result()
        finally:
            if pending is not None:
                pending.cancel()
            for waiter in waiters:
                waiter.cancel()
            await self.close()

    async def _ping(self) -> None:
        ping = PingData(
            ping_time=format_timestamp(self._clock.now(), self._config.time_format)
        )
        try:
            await self.send("PING", ping)
        except BZTCPError as e:
            # The read loop reports the broken connection
            logger.warning("Failed to send PING", extra={"error": str(e)})
            return

        self._pings_sent += 1
        logger.debug("Sent PING", extra={"ping_time": ping.ping_time})

    async def recv(self) -> Message:
        """
        Read and decode the next line.

        Low-level; most callers want stream(). Must not be called
        concurrently with itself or with a running stream().

        Raises:
            TransportError: On I/O failure or EOF
            MalformedLineError: If the line has no status delimiter
        """
        if self._transport is None:
            raise TransportError("Connection is not connected")

        line = await self._transport.read_line()
        self._messages_received += 1
        self._last_message_time = datetime.now(timezone.utc)
        return decode_line(line)

    async def send(self, status: str, body: Any = None) -> None:
        """
        Encode and write one message. Safe to call concurrently.

        Raises:
            TransportError: On write failure
            DecodeError: If body cannot be JSON-encoded
        """
        if self._transport is None:
            raise TransportError("Connection is not connected")

        data = encode_message(new_message(status, body), self._config)
        async with self._write_lock:
            await self._transport.write(data)

    async def close(self) -> None:
        """Close the transport. Idempotent."""
        if self._closed:
            return
        self._closed = True
        self._state = ConnectionState.CLOSED

        if self._transport is not None:
            await self._transport.close()

        logger.info(
            "Disconnected from BZTCP",
            extra={
                "address": self._address,
                "messages_received": self._messages_received,
            },
        )

    def get_stats(self) -> dict[str, Any]:
        """Get connection statistics."""
        uptime_seconds = None
        if self._connection_start_time and not self._closed:
            uptime_seconds = (
                datetime.now(timezone.utc) - self._connection_start_time
            ).total_seconds()

        return {
            "state": self._state.value,
            "messages_received": self._messages_received,
            "records_delivered": self._records_delivered,
            "pings_sent": self._pings_sent,
            "last_message_time": (
                self._last_message_time.isoformat()
                if self._last_message_time
                else None
            ),
            "uptime_seconds": uptime_seconds,
        }


async def dial(
    address: str,
    username: str,
    key: str,
    *,
    tls: bool = False,
    config: Optional[ProtocolConfig] = None,
    clock: Optional[Clock] = None,
    ssl_context: Optional[ssl.SSLContext] = None,
) -> BZTCPConnection:
    """
    Connect to a BZTCP server and authenticate.

    Raises:
        TransportError: If the connection cannot be established
        AuthenticationError: If the handshake is rejected
    """
    conn = BZTCPConnection(config=config, clock=clock)
    await conn.connect(address, tls=tls, ssl_context=ssl_context)
    await conn.authenticate(username, key)
    return conn
