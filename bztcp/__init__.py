"""
BZTCP Client

Client for the BZTCP line-delimited news push protocol.

Architecture:
    transport -> protocol.codec -> client.connection -> caller sink
                                                     -> pubsub (optional)

Components:
    - protocol: line codec and PING/PONG timestamp layout
    - client: connection state machine, keep-alive prober, read loop
    - models: handshake, keep-alive and STREAM payloads
    - pubsub: Redis fan-out of received records
    - main: command-line front end
"""
from bztcp.client import BZTCPConnection, ConnectionState, dial
from bztcp.config import ProtocolConfig
from bztcp.core import (
    AuthenticationError,
    BZTCPError,
    DecodeError,
    ErrorKind,
    MalformedLineError,
    TransportError,
    UnexpectedByteError,
)
from bztcp.models import StreamData

__all__ = [
    "AuthenticationError",
    "BZTCPConnection",
    "BZTCPError",
    "ConnectionState",
    "DecodeError",
    "ErrorKind",
    "MalformedLineError",
    "ProtocolConfig",
    "StreamData",
    "TransportError",
    "UnexpectedByteError",
    "dial",
]
