"""
BZTCP Client Module

Connection state machine, transport and STREAM payload decoding.
"""
from bztcp.client.clock import Clock, SystemClock
from bztcp.client.connection import BZTCPConnection, ConnectionState, dial
from bztcp.client.decoder import decode_stream_data, ticker_from_value
from bztcp.client.transport import StreamTransport, Transport, open_transport

__all__ = [
    "BZTCPConnection",
    "Clock",
    "ConnectionState",
    "StreamTransport",
    "SystemClock",
    "Transport",
    "decode_stream_data",
    "dial",
    "open_transport",
    "ticker_from_value",
]
