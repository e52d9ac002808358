"""
BZTCP Data Models

Payloads carried by the AUTH, PING, PONG and STREAM messages.
All models use frozen dataclasses; decoding from wire JSON lives in
bztcp.client.decoder.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional, Union


@dataclass(frozen=True)
class AuthData:
    """Credentials sent once in the AUTH message."""

    username: str
    key: str

    def to_dict(self) -> dict[str, Any]:
        return {"username": self.username, "key": self.key}

    def __repr__(self) -> str:
        return f"AuthData(username={self.username!r}, key='***')"


@dataclass(frozen=True)
class PingData:
    """Body of the periodic PING message."""

    ping_time: str

    def to_dict(self) -> dict[str, Any]:
        return {"pingTime": self.ping_time}


@dataclass(frozen=True)
class PongData:
    """Body of the PONG reply to a PING."""

    ping_time: str
    server_time: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        d: dict[str, Any] = {}
        if self.server_time:
            d["serverTime"] = self.server_time
        d["pingTime"] = self.ping_time
        return d

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> PongData:
        return cls(
            ping_time=d.get("pingTime", ""),
            server_time=d.get("serverTime") or None,
        )


@dataclass(frozen=True)
class Author:
    """A story author."""

    name: str

    def to_dict(self) -> dict[str, Any]:
        return {"name": self.name}


@dataclass(frozen=True)
class PlainTicker:
    """Ticker sent as a bare symbol string."""

    name: str
    # Not on the wire; consumers set it for extended symbols
    extended: bool = False

    @property
    def primary(self) -> bool:
        return False

    @property
    def sentiment(self) -> int:
        return 0

    def to_dict(self) -> dict[str, Any]:
        return {"name": self.name, "primary": False, "sentiment": 0}


@dataclass(frozen=True)
class DetailedTicker:
    """Ticker sent as a {name, primary, sentiment} record."""

    name: str
    primary: bool = False
    sentiment: int = 0
    # Not on the wire; consumers set it for extended symbols
    extended: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "primary": self.primary,
            "sentiment": self.sentiment,
        }


Ticker = Union[PlainTicker, DetailedTicker]


@dataclass(frozen=True)
class StreamData:
    """
    A news record delivered by a STREAM message.

    Field names follow Python conventions; to_dict() restores the wire
    names ("published", "updated").
    """

    id: int
    title: str = ""
    body: str = ""
    authors: tuple[Author, ...] = ()
    published_at: str = ""
    updated_at: str = ""
    channels: tuple[str, ...] = ()
    tickers: tuple[Ticker, ...] = ()
    status: str = ""
    link: Any = None

    @property
    def symbols(self) -> tuple[str, ...]:
        """Ticker names in wire order."""
        return tuple(t.name for t in self.tickers)

    def to_dict(self) -> dict[str, Any]:
        d: dict[str, Any] = {
            "id": self.id,
            "title": self.title,
            "body": self.body,
        }
        if self.authors:
            d["authors"] = [a.to_dict() for a in self.authors]
        d.update(
            {
                "published": self.published_at,
                "updated": self.updated_at,
                "channels": list(self.channels),
                "tickers": [t.to_dict() for t in self.tickers],
                "status": self.status,
                "link": self.link,
            }
        )
        return d
