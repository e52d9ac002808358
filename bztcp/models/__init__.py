"""
BZTCP Data Models

Frozen dataclasses for handshake, keep-alive and STREAM payloads.
"""
from bztcp.models.stream import (
    AuthData,
    Author,
    DetailedTicker,
    PingData,
    PlainTicker,
    PongData,
    StreamData,
    Ticker,
)

__all__ = [
    "AuthData",
    "Author",
    "DetailedTicker",
    "PingData",
    "PlainTicker",
    "PongData",
    "StreamData",
    "Ticker",
]
