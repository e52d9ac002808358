"""
Record Channel Definitions

Maps StreamData fields to Redis channel names.

Channel naming scheme (prefix defaults to "bztcp"):
  {prefix}:all               — every record
  {prefix}:channel:{name}    — e.g. bztcp:channel:earnings
  {prefix}:ticker:{TICKER}   — e.g. bztcp:ticker:AAPL
"""
from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ..models.stream import StreamData

DEFAULT_PREFIX = "bztcp"


def all_channel(prefix: str = DEFAULT_PREFIX) -> str:
    return f"{prefix}:all"


def news_channel(name: str, prefix: str = DEFAULT_PREFIX) -> str:
    return f"{prefix}:channel:{name.strip().lower().replace(' ', '_')}"


def ticker_channel(ticker: str, prefix: str = DEFAULT_PREFIX) -> str:
    return f"{prefix}:ticker:{ticker.upper()}"


def channels_for_record(record: StreamData, prefix: str = DEFAULT_PREFIX) -> list[str]:
    """
    Return all channels a record should be published to.

    Always includes the "all" channel, then one channel per news channel
    and one per ticker, without duplicates and in wire order.
    """
    result: list[str] = [all_channel(prefix)]

    for name in record.channels:
        if name.strip():
            result.append(news_channel(name, prefix))

    for ticker in record.tickers:
        if ticker.name:
            result.append(ticker_channel(ticker.name, prefix))

    return list(dict.fromkeys(result))
