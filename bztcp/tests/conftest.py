"""
Shared fixtures for the BZTCP tests.

FakeTransport stands in for the socket: tests feed it server lines and
inspect what the client wrote. ManualClock lets tests release keep-alive
periods one at a time.
"""
import asyncio
from datetime import datetime, timedelta, timezone

import pytest

from bztcp.config import ProtocolConfig
from bztcp.core.types import TransportError

EOL = b"=BZEOT\r\n"
MST = timezone(timedelta(hours=-7), "MST")


class FakeTransport:
    """In-memory Transport with scripted replies."""

    def __init__(self, lines=(), replies=None):
        self._incoming: asyncio.Queue = asyncio.Queue()
        self._replies = dict(replies or {})
        self.written: list[bytes] = []
        self.close_count = 0
        self.keepalive = None
        for line in lines:
            self.feed(line)

    def feed(self, line: bytes) -> None:
        self._incoming.put_nowait(line)

    def eof(self) -> None:
        self._incoming.put_nowait(None)

    async def read_line(self) -> bytes:
        line = await self._incoming.get()
        if line is None:
            raise TransportError("Connection closed by peer")
        return line

    async def write(self, data: bytes) -> None:
        if self.close_count:
            raise TransportError("Write on closed transport")
        self.written.append(data)
        for prefix, reply in self._replies.items():
            if data.startswith(prefix):
                for line in reply:
                    self.feed(line)

    def set_keepalive(self, enabled: bool) -> bool:
        self.keepalive = enabled
        return True

    async def close(self) -> None:
        self.close_count += 1
        # Unblock a pending read, as closing a socket does
        self.eof()


class ManualClock:
    """Clock whose sleeps finish only when the test calls advance()."""

    def __init__(self, start: datetime):
        self.current = start
        self.sleeps: list[float] = []
        self._ticks: asyncio.Queue = asyncio.Queue()

    def now(self) -> datetime:
        return self.current

    async def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        await self._ticks.get()
        self.current += timedelta(seconds=seconds)

    def advance(self, periods: int = 1) -> None:
        for _ in range(periods):
            self._ticks.put_nowait(None)


@pytest.fixture
def config():
    return ProtocolConfig(auth_timeout=1.0)


@pytest.fixture
def clock():
    return ManualClock(datetime(2006, 1, 2, 15, 4, 5, tzinfo=MST))


@pytest.fixture
def handshake_transport():
    """A transport whose server accepts the AUTH message."""
    return FakeTransport(
        lines=[b"READY" + EOL],
        replies={b"AUTH": [b"CONNECTED" + EOL]},
    )


@pytest.fixture
def wait_until():
    """Poll a predicate on the event loop until it holds."""

    async def _wait(predicate, timeout: float = 1.0) -> None:
        async def _poll() -> None:
            while not predicate():
                await asyncio.sleep(0)

        await asyncio.wait_for(_poll(), timeout)

    return _wait
