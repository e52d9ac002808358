"""
Clock Abstraction

The keep-alive prober reads the time and waits between pings through a
Clock so tests can drive it without real delays.
"""
from __future__ import annotations

import asyncio
from datetime import datetime
from typing import Protocol, runtime_checkable


@runtime_checkable
class Clock(Protocol):
    """Source of the current time and of timed waits."""

    def now(self) -> datetime:
        """Return the current local time as an aware datetime."""
        ...

    async def sleep(self, seconds: float) -> None:
        """Suspend for *seconds*."""
        ...


class SystemClock:
    """Wall-clock time and asyncio.sleep."""

    def now(self) -> datetime:
        return datetime.now().astimezone()

    async def sleep(self, seconds: float) -> None:
        await asyncio.sleep(seconds)
