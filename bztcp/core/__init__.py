"""
BZTCP Core Utilities

Error taxonomy shared by the codec, decoder and connection.
"""
from bztcp.core.types import (
    AuthenticationError,
    BZTCPError,
    DecodeError,
    ErrorKind,
    MalformedLineError,
    TransportError,
    UnexpectedByteError,
)

__all__ = [
    "AuthenticationError",
    "BZTCPError",
    "DecodeError",
    "ErrorKind",
    "MalformedLineError",
    "TransportError",
    "UnexpectedByteError",
]
