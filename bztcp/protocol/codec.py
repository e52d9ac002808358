"""
BZTCP Line Codec

Converts between wire lines and Message records.

Wire format (one line):
  STATUS[: PAYLOAD]=BZEOT\\r\\n

The status ends at the first ':' or '='. The payload, when present, runs
from just after that delimiter up to the last '=' in the line (the start
of the end-of-line marker), so payloads may themselves contain '='.
"""
from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Optional

from bztcp.config import ProtocolConfig
from bztcp.core.types import DecodeError, MalformedLineError

_DEFAULT_CONFIG = ProtocolConfig()


@dataclass(frozen=True)
class Message:
    """One decoded protocol line."""

    status: str
    data: Optional[bytes] = None

    def json(self) -> Any:
        """
        Parse the payload as JSON.

        Raises:
            DecodeError: If there is no payload or it is not valid JSON
        """
        if self.data is None:
            raise DecodeError(
                f"{self.status} message has no payload",
                field="data",
            )
        try:
            return json.loads(self.data)
        except (UnicodeDecodeError, json.JSONDecodeError) as e:
            raise DecodeError(
                f"Invalid JSON in {self.status} payload: {e}",
                field="data",
                value=self.data,
            ) from e


def _find_delimiter(line: bytes) -> int:
    """Index of the first ':' or '=', or -1."""
    indexes = [i for i in (line.find(b":"), line.find(b"=")) if i != -1]
    return min(indexes) if indexes else -1


def decode_line(line: bytes) -> Message:
    """
    Decode one received line into a Message.

    Args:
        line: Raw line, normally ending in the end-of-line marker

    Returns:
        Decoded message; data is None for status-only lines

    Raises:
        MalformedLineError: If the line contains neither ':' nor '='
    """
    delimiter = _find_delimiter(line)
    if delimiter == -1:
        raise MalformedLineError(line)

    status = line[:delimiter].decode("utf-8", errors="replace")
    terminator = line.rfind(b"=")

    if delimiter < terminator:
        return Message(status=status, data=line[delimiter + 1:terminator].strip())
    return Message(status=status)


def encode_message(
    message: Message,
    config: ProtocolConfig = _DEFAULT_CONFIG,
) -> bytes:
    """Encode a Message into a complete wire line."""
    parts = [message.status.encode("utf-8")]
    if message.data is not None:
        parts.append(config.separator)
        parts.append(message.data)
    parts.append(config.eol)
    return b"".join(parts)


def new_message(status: str, body: Any = None) -> Message:
    """
    Build a Message, JSON-encoding the body when one is given.

    Objects with a to_dict() method are converted first. The encoding is
    compact (no spaces), matching what the server sends.

    Raises:
        DecodeError: If the body cannot be JSON-encoded
    """
    if body is None:
        return Message(status=status)

    if hasattr(body, "to_dict"):
        body = body.to_dict()

    try:
        data = json.dumps(body, separators=(",", ":"), ensure_ascii=False)
    except (TypeError, ValueError) as e:
        raise DecodeError(
            f"Failed to encode {status} body: {e}",
            field="body",
        ) from e

    return Message(status=status, data=data.encode("utf-8"))
