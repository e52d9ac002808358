"""
BZTCP Protocol Module

Stateless line codec and timestamp layout.
"""
from bztcp.protocol.codec import Message, decode_line, encode_message, new_message
from bztcp.protocol.timestamps import format_timestamp, parse_timestamp

__all__ = [
    "Message",
    "decode_line",
    "encode_message",
    "format_timestamp",
    "new_message",
    "parse_timestamp",
]
